from __future__ import annotations

from .convert import Conversion, Outcome, convert_data, convert_epub, convert_markdown, run_conversion
from .errors import (
    ConversionError,
    CorruptArchiveError,
    MalformedContainerError,
    MissingContainerError,
    MissingPackageDocumentError,
)

__all__ = [
    "Conversion",
    "ConversionError",
    "CorruptArchiveError",
    "MalformedContainerError",
    "MissingContainerError",
    "MissingPackageDocumentError",
    "Outcome",
    "convert_data",
    "convert_epub",
    "convert_markdown",
    "run_conversion",
]
