"""Error types raised by devbase operations."""

from __future__ import annotations


class DevbaseError(RuntimeError):
    """Base class for failures devbase reports to its caller."""


class InvalidPath(DevbaseError):
    def __init__(self, path: str, reason: str = "path must be absolute") -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid path '{path}': {reason}")


class DuplicatePath(DevbaseError):
    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Scan path '{path}' is already configured")


class InvalidDepth(DevbaseError):
    def __init__(self, depth: object) -> None:
        self.depth = depth
        super().__init__(f"Max depth must be a positive integer, got {depth!r}")


class NotFound(DevbaseError):
    """Raised when a scan path, repository or tag id does not exist."""

    def __init__(self, kind: str, identifier: object) -> None:
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"No {kind} with id {identifier!r}")


class ScanError(DevbaseError):
    """Discovery failed for a single scan root."""

    def __init__(self, root: str, reason: str) -> None:
        self.root = root
        self.reason = reason
        super().__init__(f"Scan of '{root}' failed: {reason}")


class HealthUnavailable(DevbaseError):
    """Git facts could not be read for a repository."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Health unavailable for '{path}': {reason}")


class InvalidTag(DevbaseError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Invalid tag name {name!r}")


class DuplicateTag(DevbaseError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Tag '{name}' already exists")
