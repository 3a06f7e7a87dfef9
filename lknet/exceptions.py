"""Exceptions raised by the lknet pipeline."""


class LKNetError(Exception):
    """Base exception class for lknet."""
    pass


class MalformedInputFileError(LKNetError):
    """Raised when an interval table or sequence file cannot be read."""
    pass


class EmptyDatasetError(LKNetError):
    """Raised when no interval resolved to a sequence."""
    pass
