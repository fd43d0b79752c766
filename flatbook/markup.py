from __future__ import annotations

from typing import Iterable, Union

from bs4 import BeautifulSoup

_PARSERS = {"xml": "lxml-xml", "html": "lxml"}


def parse_markup(text: Union[bytes, str], mode: str = "html") -> BeautifulSoup:
    try:
        parser = _PARSERS[mode]
    except KeyError:
        raise ValueError(f"Unknown markup mode: {mode!r}") from None
    return BeautifulSoup(text, parser)


def remove_elements(soup: BeautifulSoup, names: Iterable[str]) -> int:
    removed = 0
    for tag in soup.find_all(list(names)):
        tag.decompose()
        removed += 1
    return removed


def remove_stylesheet_links(soup: BeautifulSoup) -> int:
    removed = 0
    for link in soup.find_all("link"):
        rel = link.get("rel") or []
        if isinstance(rel, str):
            rel = rel.split()
        if any(str(value).lower() == "stylesheet" for value in rel):
            link.decompose()
            removed += 1
    return removed


def body_inner_html(soup: BeautifulSoup) -> str:
    body = soup.body
    if body is None:
        return ""
    return body.decode_contents()
