"""Errors raised while importing the remote bookmark tree."""


class MarksyncError(Exception):
    """Base class for import errors."""


class FetchUnavailable(MarksyncError):
    """The version check or document download did not succeed."""


class ParseError(MarksyncError):
    """The document is not valid JSON, not an array, or has a bad row."""


class ValidationError(MarksyncError):
    """The document does not start with the expected sentinel record."""


class MalformedDepth(MarksyncError):
    """A record's depth cannot be resolved against the open folders."""

    def __init__(self, index: int, depth: int, stack_depth: int):
        super().__init__(
            f"Record {index} has depth {depth} but only {stack_depth} "
            f"folder level(s) are open"
        )
        self.index = index
        self.depth = depth
        self.stack_depth = stack_depth


class StoreFailure(MarksyncError):
    """A bookmark target primitive failed."""
