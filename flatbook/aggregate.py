from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List

from .archive import EpubArchive
from .assets import inline_assets
from .css import scope_css
from .markup import body_inner_html, parse_markup, remove_elements, remove_stylesheet_links
from .package import ManifestItem, PackageDescriptor

logger = logging.getLogger(__name__)

DEFAULT_SCOPE = "#epub-content"
STYLESHEET_MEDIA_TYPE = "text/css"


@dataclass(frozen=True)
class AggregatedContent:
    html: str
    css: str
    warnings: List[str] = field(default_factory=list)


def collect_stylesheets(
    archive: EpubArchive,
    descriptor: PackageDescriptor,
    scope: str = DEFAULT_SCOPE,
    warnings: List[str] | None = None,
) -> str:
    parts: List[str] = []
    for item in descriptor.manifest.values():
        if item.media_type != STYLESHEET_MEDIA_TYPE:
            continue
        css = archive.read_text(item.href)
        if css is None:
            logger.warning("Stylesheet not found: %s", item.href)
            if warnings is not None:
                warnings.append(f"Stylesheet not found: {item.href}")
            continue
        parts.append(scope_css(css, scope) + "\n")
    return "".join(parts)


def render_document(archive: EpubArchive, item: ManifestItem) -> tuple[str, List[str]] | None:
    data = archive.read_binary(item.href)
    if data is None:
        return None
    soup = parse_markup(data, "html")
    remove_elements(soup, ["script"])
    remove_stylesheet_links(soup)
    warnings = inline_assets(soup, item.href, archive)
    return body_inner_html(soup), warnings


def aggregate(
    archive: EpubArchive,
    descriptor: PackageDescriptor,
    scope: str = DEFAULT_SCOPE,
) -> AggregatedContent:
    warnings: List[str] = []
    css = collect_stylesheets(archive, descriptor, scope=scope, warnings=warnings)

    html_parts: List[str] = []
    for idref in descriptor.spine:
        item = descriptor.manifest.get(idref)
        if item is None or not item.href:
            logger.info("Spine entry %r has no manifest item; skipping", idref)
            warnings.append(f"Spine entry {idref!r} has no manifest item")
            continue
        rendered = render_document(archive, item)
        if rendered is None:
            logger.warning("Content document not found: %s", item.href)
            warnings.append(f"Content document not found: {item.href}")
            continue
        html, doc_warnings = rendered
        html_parts.append(html)
        warnings.extend(doc_warnings)

    return AggregatedContent(html="".join(html_parts), css=css, warnings=warnings)
