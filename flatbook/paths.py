from __future__ import annotations

from typing import List


def base_dir(path: str) -> str:
    idx = path.rfind("/")
    if idx == -1:
        return ""
    return path[: idx + 1]


def resolve_path(base_path: str, relative_ref: str) -> str:
    """Resolve ``relative_ref`` against the archive member ``base_path``.

    The result is archive-root-relative. ``..`` never climbs above the
    archive root, and a leading ``/`` in the reference is not special.
    """
    segments: List[str] = (base_path or "").split("/")
    segments.pop()
    segments = [seg for seg in segments if seg not in ("", ".")]
    for part in (relative_ref or "").split("/"):
        if part == "..":
            if segments:
                segments.pop()
        elif part not in (".", ""):
            segments.append(part)
    return "/".join(segments)
