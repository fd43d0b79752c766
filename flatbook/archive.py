from __future__ import annotations

import io
import zipfile
import zlib
from pathlib import Path
from typing import Optional, Union
from urllib.parse import unquote

from .errors import CorruptArchiveError


def decode_text(data: bytes) -> str:
    if data.startswith((b"\xff\xfe", b"\xfe\xff")):
        return data.decode("utf-16")
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError:
        pass
    for encoding in ("cp932", "cp1252"):
        try:
            return data.decode(encoding)
        except UnicodeDecodeError:
            continue
    return data.decode("utf-8", errors="replace")


class EpubArchive:
    """Read-only access to the members of a zipped publication.

    Member paths are archive-root-relative and case-sensitive. They are
    percent-decoded before lookup; a member whose stored name really
    contains ``%`` escapes is still found by its literal name.
    """

    def __init__(self, source: Union[bytes, Path, str]) -> None:
        try:
            if isinstance(source, bytes):
                self._zip = zipfile.ZipFile(io.BytesIO(source))
            else:
                self._zip = zipfile.ZipFile(str(source))
        except zipfile.BadZipFile as exc:
            raise CorruptArchiveError(f"Not a readable archive: {exc}") from exc
        self._names = {info.filename for info in self._zip.infolist() if not info.is_dir()}

    def __enter__(self) -> "EpubArchive":
        return self

    def __exit__(self, *_exc: object) -> None:
        self.close()

    def close(self) -> None:
        self._zip.close()

    def _lookup(self, path: str) -> Optional[str]:
        if not path:
            return None
        decoded = unquote(path)
        if decoded in self._names:
            return decoded
        if path in self._names:
            return path
        return None

    def has_member(self, path: str) -> bool:
        return self._lookup(path) is not None

    def read_binary(self, path: str) -> Optional[bytes]:
        name = self._lookup(path)
        if name is None:
            return None
        try:
            return self._zip.read(name)
        except (
            zipfile.BadZipFile,
            zipfile.LargeZipFile,
            zlib.error,
            EOFError,
            NotImplementedError,
            RuntimeError,
        ) as exc:
            raise CorruptArchiveError(f"Cannot read {name}: {exc}") from exc

    def read_text(self, path: str) -> Optional[str]:
        data = self.read_binary(path)
        if data is None:
            return None
        return decode_text(data)
