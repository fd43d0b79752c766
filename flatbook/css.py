from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List

SELECTOR = "selector"
OPEN = "open"
CLOSE = "close"
OTHER = "other"

_BRACE_SPLIT_RE = re.compile(r"([{}])")
_LEADING_COMMENT_RE = re.compile(r"^\s*/\*.*?\*/", re.DOTALL)
_WHOLE_DOCUMENT_SELECTORS = {"body", "html"}


@dataclass(frozen=True)
class CssToken:
    kind: str
    text: str


def _split_prelude(text: str) -> tuple[str, str]:
    """Separate comments and ``;``-terminated statements from a selector group."""
    prelude = ""
    rest = text
    while True:
        match = _LEADING_COMMENT_RE.match(rest)
        if match:
            prelude += match.group(0)
            rest = rest[match.end() :]
            continue
        stripped = rest.lstrip()
        if stripped.startswith("@") and ";" in stripped:
            cut = rest.index(";") + 1
            prelude += rest[:cut]
            rest = rest[cut:]
            continue
        return prelude, rest


def tokenize_css(css: str) -> List[CssToken]:
    """Split ``css`` into selector, open, close and other tokens.

    Brace depth is tracked explicitly and never drops below 0, so an
    unmatched ``}`` is emitted as a close token without pushing the rules
    that follow it out of the top level.
    """
    parts = [part for part in _BRACE_SPLIT_RE.split(css or "") if part]
    tokens: List[CssToken] = []
    depth = 0
    for idx, part in enumerate(parts):
        if part == "{":
            tokens.append(CssToken(OPEN, part))
            depth += 1
            continue
        if part == "}":
            tokens.append(CssToken(CLOSE, part))
            depth = max(depth - 1, 0)
            continue
        opens_block = idx + 1 < len(parts) and parts[idx + 1] == "{"
        if depth != 0 or not opens_block:
            tokens.append(CssToken(OTHER, part))
            continue
        prelude, group = _split_prelude(part)
        if prelude:
            tokens.append(CssToken(OTHER, prelude))
        if group.strip().startswith("@"):
            tokens.append(CssToken(OTHER, group))
        else:
            tokens.append(CssToken(SELECTOR, group))
    return tokens


def scope_selector_group(group: str, scope: str) -> str:
    scoped: List[str] = []
    for selector in group.split(","):
        trimmed = selector.strip()
        if not trimmed:
            continue
        if trimmed.lower() in _WHOLE_DOCUMENT_SELECTORS:
            scoped.append(scope)
        else:
            scoped.append(f"{scope} {trimmed}")
    if not scoped:
        scoped.append(scope)
    stripped = group.strip()
    if not stripped:
        return f"{group}{', '.join(scoped)} "
    leading = group[: len(group) - len(group.lstrip())]
    trailing = group[len(group.rstrip()) :]
    return f"{leading}{', '.join(scoped)}{trailing}"


def scope_css(css: str, scope: str) -> str:
    """Confine every top-level rule of ``css`` to elements inside ``scope``.

    ``body`` and ``html`` selectors are mapped onto the scope element itself.
    Rules nested in at-rule blocks such as ``@media`` are passed through
    unchanged, as are all declaration blocks.
    """
    out: List[str] = []
    for token in tokenize_css(css):
        if token.kind == SELECTOR:
            out.append(scope_selector_group(token.text, scope))
        else:
            out.append(token.text)
    return "".join(out)
