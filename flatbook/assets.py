from __future__ import annotations

import base64
import logging
from typing import List

from bs4 import BeautifulSoup

from .archive import EpubArchive
from .errors import ConversionError
from .paths import resolve_path

logger = logging.getLogger(__name__)

DEFAULT_MEDIA_TYPE = "application/octet-stream"
IMAGE_MEDIA_TYPES = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "svg": "image/svg+xml",
    "webp": "image/webp",
}
_SOURCE_ATTRS = {
    "img": ("src",),
    "image": ("href", "xlink:href"),
}


def media_type_for(path: str) -> str:
    name = path.rsplit("/", 1)[-1]
    if "." not in name:
        return DEFAULT_MEDIA_TYPE
    extension = name.rsplit(".", 1)[-1].lower()
    return IMAGE_MEDIA_TYPES.get(extension, DEFAULT_MEDIA_TYPE)


def to_data_uri(data: bytes, media_type: str) -> str:
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{media_type};base64,{encoded}"


def is_data_uri(value: str) -> bool:
    return value.strip().lower().startswith("data:")


def _inline_one(archive: EpubArchive, doc_path: str, value: str) -> str | None:
    resolved = resolve_path(doc_path, value)
    try:
        data = archive.read_binary(resolved)
    except ConversionError as exc:
        logger.warning("Could not read asset %s: %s", resolved, exc)
        return None
    if data is None:
        logger.warning("Asset not found: %s (referenced from %s)", resolved, doc_path)
        return None
    return to_data_uri(data, media_type_for(resolved))


def inline_assets(soup: BeautifulSoup, doc_path: str, archive: EpubArchive) -> List[str]:
    """Replace image references in ``soup`` with ``data:`` URIs.

    ``doc_path`` is the archive path of the document the tree was parsed
    from; references are resolved against it. Unresolvable references keep
    their original value and are reported in the returned warnings.
    """
    warnings: List[str] = []
    for tag in soup.find_all(list(_SOURCE_ATTRS)):
        for attr in _SOURCE_ATTRS[tag.name]:
            value = tag.get(attr)
            if not value:
                continue
            value = str(value)
            if is_data_uri(value):
                break
            data_uri = _inline_one(archive, doc_path, value)
            if data_uri is None:
                warnings.append(f"Could not inline asset {value!r} in {doc_path}")
            else:
                tag[attr] = data_uri
            break
    return warnings
