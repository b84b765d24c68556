"""Domain-specific exceptions — framework-independent."""


class ConfigError(Exception):
    """Raised when the backend endpoint URL or access key is missing."""

    def __init__(self, missing: list[str]):
        self.missing = missing
        super().__init__(
            "Database configuration is incomplete. "
            f"Missing: {', '.join(missing)}. Please check your environment variables."
        )


class FetchTimeoutError(Exception):
    """Raised when the backend does not answer within the fetch bound."""

    def __init__(self, timeout_seconds: float):
        self.timeout_seconds = timeout_seconds
        super().__init__(f"Request timeout after {timeout_seconds:g}s")


class BackendError(Exception):
    """Raised when the managed backend returns an error.

    Mirrors the backend's error triple (code / hint / details) so callers
    can surface it for troubleshooting.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        code: str | None = None,
        hint: str | None = None,
        details: str | None = None,
    ):
        self.message = message
        self.status_code = status_code
        self.code = code
        self.hint = hint
        self.details = details
        super().__init__(message)

    def to_dict(self) -> dict[str, str | int | None]:
        return {
            "message": self.message,
            "status_code": self.status_code,
            "code": self.code,
            "hint": self.hint,
            "details": self.details,
        }


class InvalidEditError(Exception):
    """Raised when a local edit targets a non-editable field or an unknown value."""

    def __init__(self, field: str, value: str | None, reason: str):
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid edit of '{field}'={value!r}: {reason}")


class SaveError(Exception):
    """Raised when at least one row of a batch save could not be persisted.

    Rows listed in ``failed`` keep their pending edits; rows listed in
    ``succeeded`` were written and their edits were cleared.
    """

    def __init__(self, failed: dict[str, str], succeeded: list[str]):
        self.failed = failed
        self.succeeded = succeeded
        super().__init__(
            f"Failed to save changes for {len(failed)} booking(s). Please try again."
        )

    @property
    def failed_ids(self) -> list[str]:
        return list(self.failed)
