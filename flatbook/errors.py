from __future__ import annotations


class ConversionError(ValueError):
    """A conversion that cannot produce any output."""


class CorruptArchiveError(ConversionError):
    pass


class MissingContainerError(ConversionError):
    pass


class MalformedContainerError(ConversionError):
    pass


class MissingPackageDocumentError(ConversionError):
    pass
