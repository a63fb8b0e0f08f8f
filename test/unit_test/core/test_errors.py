"""Unit tests for the application error hierarchy and validators."""

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from focusprint.core.errors import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DatabaseError,
    ErrorCode,
    LimitExceededError,
    NotFoundError,
    OperationNotAllowedError,
    RateLimitError,
    ValidationFailedError,
    from_database_error,
    status_for_message,
    validate_email,
    validate_required,
    validate_string_length,
    validate_uuid,
)


class TestErrorStatusCodes:
    @pytest.mark.parametrize(
        "error, status_code",
        [
            (ValidationFailedError("bad"), 400),
            (AuthenticationError(), 401),
            (AuthorizationError(), 403),
            (NotFoundError("Client"), 404),
            (ConflictError(), 409),
            (OperationNotAllowedError("no"), 400),
            (LimitExceededError("limit"), 400),
            (RateLimitError(), 429),
            (DatabaseError(), 500),
        ],
    )
    def test_status_code(self, error, status_code):
        assert error.status_code == status_code

    def test_not_found_message(self):
        assert NotFoundError("Feature flag").message == "Feature flag not found"

    def test_to_dict_hides_context_by_default(self):
        error = ConflictError("Email already exists", context={"email": "a@b.co"})

        assert error.to_dict() == {
            "error": "Email already exists",
            "details": {"type": "conflict", "code": "RESOURCE_ALREADY_EXISTS"},
        }
        assert error.to_dict(include_context=True)["details"]["context"] == {"email": "a@b.co"}


class TestStatusForMessage:
    @pytest.mark.parametrize(
        "message, status_code",
        [
            ("Client not found", 404),
            ("Plan already exists", 409),
            ("Duplicate key value", 409),
            ("Missing permission", 403),
            ("Forbidden", 403),
            ("Validation failed: name", 400),
            ("Invalid email format", 400),
            ("Cannot delete client with active licenses", 400),
            ("Connection refused", 503),
            ("Something odd", 500),
            ("", 500),
        ],
    )
    def test_message_patterns(self, message, status_code):
        assert status_for_message(message) == status_code


class TestFromDatabaseError:
    def test_unique_violation(self):
        exc = IntegrityError("INSERT", {}, Exception("duplicate key value violates unique constraint"))
        error = from_database_error(exc)

        assert isinstance(error, ConflictError)
        assert error.status_code == 409

    def test_foreign_key_violation(self):
        exc = IntegrityError("INSERT", {}, Exception("FOREIGN KEY constraint failed"))
        error = from_database_error(exc)

        assert isinstance(error, ValidationFailedError)
        assert error.message == "Referenced resource does not exist"

    def test_not_null_violation(self):
        exc = IntegrityError("INSERT", {}, Exception("NOT NULL constraint failed: clients.name"))
        error = from_database_error(exc)

        assert error.code is ErrorCode.MISSING_REQUIRED_FIELD

    def test_connection_failure(self):
        exc = OperationalError("SELECT 1", {}, Exception("could not connect to server"))
        error = from_database_error(exc)

        assert isinstance(error, DatabaseError)
        assert error.code is ErrorCode.DATABASE_CONNECTION_ERROR

    def test_unknown_error(self):
        error = from_database_error(RuntimeError("weird"))

        assert isinstance(error, DatabaseError)
        assert error.status_code == 500


class TestValidators:
    def test_validate_email_lowercases(self):
        assert validate_email("Ana@Example.COM") == "ana@example.com"

    @pytest.mark.parametrize("email", ["", "no-at-sign", "a@b", "two words@x.io"])
    def test_validate_email_rejects(self, email):
        with pytest.raises(ValidationFailedError, match="Invalid email format"):
            validate_email(email)

    def test_validate_required(self):
        with pytest.raises(ValidationFailedError) as exc_info:
            validate_required({"name": "x", "email": ""}, ["name", "email", "plan"])

        assert exc_info.value.context["missing_fields"] == ["email", "plan"]
        validate_required({"name": "x"}, ["name"])

    def test_validate_uuid(self):
        value = "0b9e4a54-5a3b-4a83-8d38-0f3d6a0cb8a1"
        assert validate_uuid(value) == value
        with pytest.raises(ValidationFailedError, match="Invalid UUID format for client_id"):
            validate_uuid("nope", "client_id")

    def test_validate_string_length(self):
        assert validate_string_length("abc", "name", 2, 5) == "abc"
        with pytest.raises(ValidationFailedError, match="at least 2"):
            validate_string_length("a", "name", 2)
        with pytest.raises(ValidationFailedError, match="less than 5"):
            validate_string_length("abcdef", "name", 0, 5)
