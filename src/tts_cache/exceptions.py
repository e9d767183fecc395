"""Exception hierarchy for tts-cache."""


class TtsCacheError(Exception):
    """Base exception for all tts-cache errors."""

    pass


class UpstreamError(TtsCacheError):
    """The synthesis provider failed or answered with a non-success status."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class SnapshotError(TtsCacheError):
    """Error reading or writing the durable tier snapshot."""

    pass


class SnapshotDecodeError(SnapshotError):
    """The snapshot file exists but cannot be decoded."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot decode cache snapshot {path}: {reason}")
