"""Tests for the exception hierarchy."""

import pytest

from exceptions import (
    AuthFailure,
    GenreLimitError,
    NotFoundError,
    NovelNestError,
    PermissionDenied,
    StoreError,
    TransientWriteFailure,
    ValidationFailure,
)


class TestExceptionHierarchy:
    def test_all_inherit_from_base(self):
        for cls in (NotFoundError, StoreError, TransientWriteFailure, AuthFailure,
                    PermissionDenied, ValidationFailure, GenreLimitError):
            assert issubclass(cls, NovelNestError), f"{cls.__name__} must inherit NovelNestError"

    def test_permission_denied_is_auth_failure(self):
        assert issubclass(PermissionDenied, AuthFailure)

    def test_genre_limit_is_value_error(self):
        assert issubclass(GenreLimitError, ValueError)
        assert issubclass(GenreLimitError, ValidationFailure)


class TestExceptionCreation:
    def test_not_found_message(self):
        err = NotFoundError("Novel", "N1")
        assert err.message == "Novel not found"
        assert str(err) == "Novel not found (id=N1)"

    def test_transient_failure_keeps_cause(self):
        cause = ConnectionError("reset")
        err = TransientWriteFailure("chapter view", cause)
        assert err.cause is cause
        assert "chapter view" in str(err)

    def test_genre_limit_message(self):
        err = GenreLimitError(4, 3)
        assert err.message == "Please select up to 3 genres"
        assert err.details == {"selected": 4, "limit": 3}

    def test_catchable_as_base(self):
        with pytest.raises(NovelNestError):
            raise PermissionDenied()
