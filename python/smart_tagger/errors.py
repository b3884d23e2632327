"""Exception types raised by Smart Tagger."""


class TaggerError(Exception):
    """Base error for tagging operations."""

    operation = "process"

    def __init__(self, path, reason: str = ""):
        self.path = str(path)
        self.reason = reason
        message = f"Failed to {self.operation} {self.path}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class DirectoryReadError(TaggerError):
    """Raised when a directory is missing or cannot be listed."""

    operation = "read directory"


class TrackExtractionError(TaggerError):
    """Raised when a filename carries no usable track number."""

    operation = "extract track number from"


class TagReadError(TaggerError):
    """Raised when an audio file cannot be opened for tag reading."""

    operation = "read tags from"


class TagWriteError(TaggerError):
    """Raised when tags cannot be written back to an audio file."""

    operation = "write tags to"


class UnsupportedFormatError(TaggerError):
    """Raised when a file extension has no tag implementation."""

    operation = "open unsupported file"


class ConversionError(TaggerError):
    """Raised when the external transcoder fails."""

    operation = "convert"
