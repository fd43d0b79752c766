from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Tuple

import markdown
from bs4 import BeautifulSoup
from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import get_lexer_by_name, guess_lexer
from pygments.lexers.special import TextLexer
from pygments.util import ClassNotFound

_ANCHOR_STRIP_RE = re.compile(r"[^\w]+")
_QUOTE_AUTHOR_PREFIX = "—"
BOOKMARK_ICON = "☆"


def slugify_heading(value: str, separator: str = "-") -> str:
    return _ANCHOR_STRIP_RE.sub(separator, value.lower()).strip(separator)


@dataclass(frozen=True)
class RenderConfig:
    extensions: Tuple[str, ...] = ("fenced_code", "tables", "toc", "nl2br", "sane_lists")
    highlight_code: bool = True
    code_header: bool = True
    copy_label: str = "\U0001F4CB Copy"
    bookmark_headings: bool = True
    lazy_images: bool = True
    code_style: str = "default"
    extension_configs: dict = field(
        default_factory=lambda: {"toc": {"slugify": slugify_heading}}
    )


def _code_language(code: object) -> str:
    classes = code.get("class") or []
    if isinstance(classes, str):
        classes = classes.split()
    for cls in classes:
        cls = str(cls)
        if cls.startswith("language-"):
            return cls[len("language-") :]
    return ""


def _highlight(source: str, language: str) -> str:
    lexer = None
    if language:
        try:
            lexer = get_lexer_by_name(language)
        except ClassNotFound:
            lexer = None
    if lexer is None:
        try:
            lexer = guess_lexer(source)
        except ClassNotFound:
            lexer = TextLexer()
    return highlight(source, lexer, HtmlFormatter(nowrap=True))


def _decorate_code_blocks(soup: BeautifulSoup, config: RenderConfig) -> None:
    for pre in soup.find_all("pre"):
        code = pre.find("code")
        if code is None:
            continue
        language = _code_language(code) or "text"
        source = code.get_text()
        new_code = soup.new_tag("code")
        new_code["class"] = ["hljs", language]
        if config.highlight_code:
            fragment = BeautifulSoup(_highlight(source, _code_language(code)), "html.parser")
            new_code.extend(list(fragment.contents))
        else:
            new_code.string = source
        pre.clear()
        if config.code_header:
            header = soup.new_tag("div")
            header["class"] = ["code-header"]
            label = soup.new_tag("span")
            label.string = language
            button = soup.new_tag("button")
            button["class"] = ["copy-btn"]
            button["title"] = "Copy code"
            button.string = config.copy_label
            header.append(label)
            header.append(button)
            pre.append(header)
        pre.append(new_code)


def _decorate_images(soup: BeautifulSoup) -> None:
    for img in soup.find_all("img"):
        img["loading"] = "lazy"
        if not img.get("title"):
            img["title"] = ""


def _decorate_blockquotes(soup: BeautifulSoup) -> None:
    for quote in soup.find_all("blockquote"):
        paragraphs = quote.find_all("p", recursive=False)
        if not paragraphs:
            continue
        last = paragraphs[-1]
        text = last.get_text()
        if not text.startswith(_QUOTE_AUTHOR_PREFIX):
            continue
        author = text[len(_QUOTE_AUTHOR_PREFIX) :].strip()
        if not author:
            continue
        last.clear()
        last["class"] = ["quote-author"]
        last.string = f"{_QUOTE_AUTHOR_PREFIX} {author}"


def _decorate_headings(soup: BeautifulSoup) -> None:
    for heading in soup.find_all(["h1", "h2", "h3", "h4", "h5", "h6"]):
        icon = soup.new_tag("span")
        icon["class"] = ["bookmark-icon"]
        icon["title"] = "Bookmark section"
        icon.string = BOOKMARK_ICON
        heading.insert(0, icon)


def render_markdown(text: str, config: RenderConfig | None = None) -> str:
    config = config or RenderConfig()
    rendered = markdown.markdown(
        text or "",
        extensions=list(config.extensions),
        extension_configs=config.extension_configs,
    )
    soup = BeautifulSoup(rendered, "html.parser")
    _decorate_code_blocks(soup, config)
    if config.lazy_images:
        _decorate_images(soup)
    _decorate_blockquotes(soup)
    if config.bookmark_headings:
        _decorate_headings(soup)
    return str(soup)


def highlight_css(scope: str, style: str = "default") -> str:
    prefix = f"{scope} code.hljs"
    rules = HtmlFormatter(style=style).get_style_defs(prefix).splitlines()
    # Pygments also emits bare pre/linenos rules that would escape the scope.
    return "\n".join(rule for rule in rules if rule.startswith(prefix)) + "\n"
