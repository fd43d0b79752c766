from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

from bs4 import ParserRejectedMarkup

from .aggregate import DEFAULT_SCOPE, aggregate
from .archive import EpubArchive, decode_text
from .errors import ConversionError
from .markdown_render import RenderConfig, highlight_css, render_markdown
from .package import load_descriptor

logger = logging.getLogger(__name__)

EPUB = "epub"
MARKDOWN = "markdown"

STATUS_OK = "ok"
STATUS_PARTIAL = "partial"
STATUS_FAILED = "failed"

_MARKDOWN_SUFFIXES = {".md", ".markdown", ".txt"}


@dataclass(frozen=True)
class Conversion:
    html: str
    css: str
    type: str
    metadata: dict = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)

    def to_payload(self) -> dict:
        return {
            "html": self.html,
            "css": self.css,
            "type": self.type,
            "metadata": dict(self.metadata),
            "warnings": list(self.warnings),
        }


@dataclass(frozen=True)
class Outcome:
    status: str
    conversion: Optional[Conversion] = None
    error: str = ""

    @property
    def warnings(self) -> List[str]:
        if self.conversion is None:
            return []
        return list(self.conversion.warnings)

    @property
    def ok(self) -> bool:
        return self.status != STATUS_FAILED


def infer_kind(filename: str, declared: Optional[str] = None) -> str:
    declared = (declared or "").strip().lower()
    if declared:
        if declared in (EPUB, MARKDOWN):
            return declared
        raise ValueError(f"Unsupported type: {declared}")
    suffix = Path(filename or "").suffix.lower()
    if suffix == ".epub":
        return EPUB
    if suffix in _MARKDOWN_SUFFIXES:
        return MARKDOWN
    raise ValueError("Only .epub or Markdown files are supported.")


def convert_epub(data: Union[bytes, EpubArchive], scope: str = DEFAULT_SCOPE) -> Conversion:
    if isinstance(data, EpubArchive):
        archive = data
        owned = False
    else:
        archive = EpubArchive(data)
        owned = True
    try:
        descriptor = load_descriptor(archive)
        content = aggregate(archive, descriptor, scope=scope)
    finally:
        if owned:
            archive.close()
    return Conversion(
        html=content.html,
        css=content.css,
        type=EPUB,
        metadata=descriptor.metadata,
        warnings=content.warnings,
    )


def convert_markdown(
    text: str,
    scope: str = DEFAULT_SCOPE,
    config: RenderConfig | None = None,
) -> Conversion:
    config = config or RenderConfig()
    html = render_markdown(text, config)
    css = highlight_css(scope, config.code_style) if config.highlight_code else ""
    return Conversion(html=html, css=css, type=MARKDOWN)


def convert_data(
    data: Union[bytes, str],
    kind: str,
    scope: str = DEFAULT_SCOPE,
    config: RenderConfig | None = None,
) -> Conversion:
    if kind == EPUB:
        if isinstance(data, str):
            raise ConversionError("EPUB input must be bytes.")
        return convert_epub(data, scope=scope)
    if isinstance(data, bytes):
        data = decode_text(data)
    return convert_markdown(data, scope=scope, config=config)


def run_conversion(
    data: Union[bytes, str],
    kind: str,
    scope: str = DEFAULT_SCOPE,
    config: RenderConfig | None = None,
) -> Outcome:
    """Convert without raising, tagging the result as ok, partial or failed."""
    try:
        conversion = convert_data(data, kind, scope=scope, config=config)
    except (ConversionError, ParserRejectedMarkup) as exc:
        logger.error("Conversion failed: %s", exc)
        return Outcome(status=STATUS_FAILED, error=f"Failed to parse file: {exc}")
    status = STATUS_PARTIAL if conversion.warnings else STATUS_OK
    return Outcome(status=status, conversion=conversion)
