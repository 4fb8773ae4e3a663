"""Exception hierarchy shared by the store, the tracker and the API layer."""

from typing import Optional


class NovelNestError(Exception):
    """Base exception for all NovelNest errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


# ---- Store Errors ----

class NotFoundError(NovelNestError):
    """Requested novel, chapter, profile or entry does not exist."""

    def __init__(self, what: str, identifier: str = ""):
        details = {"id": identifier} if identifier else {}
        super().__init__(f"{what} not found", details)
        self.what = what
        self.identifier = identifier


class StoreError(NovelNestError):
    """Document store operation failed."""


class TransientWriteFailure(NovelNestError):
    """A best-effort write (view counter, last-read pointer) failed."""

    def __init__(self, description: str, cause: Optional[BaseException] = None):
        details = {"cause": repr(cause)} if cause is not None else {}
        super().__init__(f"Best-effort write failed: {description}", details)
        self.description = description
        self.cause = cause


# ---- Auth Errors ----

class AuthFailure(NovelNestError):
    """Login or registration rejected, or no valid credentials supplied."""


class PermissionDenied(AuthFailure):
    """Signed in, but not allowed to touch this resource."""

    def __init__(self, message: str = "Not allowed"):
        super().__init__(message)


# ---- Validation Errors ----

class ValidationFailure(NovelNestError):
    """Input rejected before any store call is issued."""


class GenreLimitError(ValidationFailure, ValueError):
    """More genres selected than allowed."""

    def __init__(self, selected: int, limit: int):
        super().__init__(
            f"Please select up to {limit} genres",
            {"selected": selected, "limit": limit},
        )
        self.selected = selected
        self.limit = limit
