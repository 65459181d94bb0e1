"""Exception types raised by adpath."""

from typing import TYPE_CHECKING, List, Optional

from .constants import DirectoryErrorKind

if TYPE_CHECKING:
    from .services.materializer import ActionRecord
    from .services.path_service import PathSegment


class AdPathError(Exception):
    """Base class for all adpath errors."""


class FormatError(AdPathError, ValueError):
    """Raised when a path does not match the DN grammar."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid path '{path}': {reason}")


class ConfigError(AdPathError):
    """Raised when configuration is missing or invalid."""


class DirectoryError(AdPathError):
    """Raised by the directory client when a query or mutation fails."""

    def __init__(self, kind: DirectoryErrorKind, message: str):
        self.kind = kind
        self.message = message
        super().__init__(f"{kind.value}: {message}")


class UnsupportedOperation(AdPathError):
    """A non-container segment would have to be created."""

    def __init__(self, segment: 'PathSegment'):
        self.segment = segment
        super().__init__(f"Cannot create non-container object {segment.raw}")


class MaterializationError(AdPathError):
    """Raised when a segment fails during materialization.

    Everything created before the failing segment stays in the directory.
    ``prefix`` is the deepest path known to exist at the time of failure.
    """

    def __init__(self, segment: 'PathSegment', prefix: str,
                 actions: List['ActionRecord'], error: Optional[Exception] = None):
        self.segment = segment
        self.prefix = prefix
        self.actions = actions
        self.error = error
        super().__init__(f"Failed at {segment.raw} under {prefix}: {error}")
