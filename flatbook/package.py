from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List

from bs4 import BeautifulSoup

from .archive import EpubArchive
from .errors import (
    MalformedContainerError,
    MissingContainerError,
    MissingPackageDocumentError,
)
from .markup import parse_markup
from .paths import base_dir

logger = logging.getLogger(__name__)

CONTAINER_PATH = "META-INF/container.xml"


@dataclass(frozen=True)
class ManifestItem:
    id: str
    href: str
    media_type: str


@dataclass(frozen=True)
class PackageDescriptor:
    package_path: str
    base_path: str
    manifest: Dict[str, ManifestItem]
    spine: List[str]
    metadata: dict = field(default_factory=dict)


def find_package_path(archive: EpubArchive) -> str:
    container = archive.read_binary(CONTAINER_PATH)
    if container is None:
        raise MissingContainerError(f"{CONTAINER_PATH} not found.")
    soup = parse_markup(container, "xml")
    rootfile = soup.find("rootfile")
    full_path = str(rootfile.get("full-path") or "").strip() if rootfile else ""
    if not full_path:
        raise MalformedContainerError(
            f"Could not find the package document path in {CONTAINER_PATH}."
        )
    return full_path


def _element_text(node: object) -> str:
    if node is None:
        return ""
    return node.get_text(separator=" ", strip=True)


def extract_metadata(soup: BeautifulSoup) -> dict:
    root = soup.find("metadata") or soup
    authors: List[str] = []
    for node in root.find_all("creator"):
        value = _element_text(node)
        if value:
            authors.append(value)
    return {
        "title": _element_text(root.find("title")),
        "authors": authors,
        "language": _element_text(root.find("language")),
    }


def parse_manifest(soup: BeautifulSoup, base_path: str) -> Dict[str, ManifestItem]:
    manifest: Dict[str, ManifestItem] = {}
    for item in soup.find_all("item"):
        href = item.get("href")
        if not href:
            continue
        item_id = str(item.get("id") or "")
        if item_id in manifest:
            logger.debug("Duplicate manifest id %r; keeping the last one", item_id)
        manifest[item_id] = ManifestItem(
            id=item_id,
            href=base_path + str(href),
            media_type=str(item.get("media-type") or ""),
        )
    return manifest


def parse_spine(soup: BeautifulSoup) -> List[str]:
    return [str(itemref.get("idref") or "") for itemref in soup.find_all("itemref")]


def load_descriptor(archive: EpubArchive) -> PackageDescriptor:
    package_path = find_package_path(archive)
    package_data = archive.read_binary(package_path)
    if package_data is None:
        raise MissingPackageDocumentError(
            f"Package document not found at path: {package_path}"
        )
    soup = parse_markup(package_data, "xml")
    base_path = base_dir(package_path)
    return PackageDescriptor(
        package_path=package_path,
        base_path=base_path,
        manifest=parse_manifest(soup, base_path),
        spine=parse_spine(soup),
        metadata=extract_metadata(soup),
    )
