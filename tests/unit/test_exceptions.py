"""Unit tests for custom exception hierarchy"""
import psycopg
from datetime import datetime

from progression.exceptions import (
    ProgressionError,
    ValidationError,
    DatabaseError,
    QueryError,
    RecordNotFoundError,
    UserNotFoundError,
    ConfigurationError,
    ChallengeError,
    wrap_database_exception,
)


class TestProgressionError:
    """Test base exception class"""

    def test_basic_exception(self):
        error = ProgressionError("Test error")
        assert error.message == "Test error"
        assert error.user_message == "An error occurred. Please try again."
        assert error.request_id is not None
        assert isinstance(error.timestamp, datetime)

    def test_exception_with_context(self):
        error = ProgressionError(
            "Failed to award points",
            user_id="user-1",
            operation="award_points",
            context={"point_type": "TASK_COMPLETED"},
        )
        assert error.user_id == "user-1"
        assert error.operation == "award_points"
        assert error.context == {"point_type": "TASK_COMPLETED"}

    def test_to_dict(self):
        data = ProgressionError("Test error", user_message="Nope").to_dict()
        assert data["error"] == "ProgressionError"
        assert data["message"] == "Test error"
        assert data["user_message"] == "Nope"
        assert "request_id" in data
        assert "timestamp" in data


class TestSubclasses:
    """Test the specialised errors"""

    def test_validation_error(self):
        error = ValidationError("must be positive", field="duration_minutes", value=-5)
        assert isinstance(error, ProgressionError)
        assert error.field == "duration_minutes"
        assert error.value == -5
        assert error.user_message == "Invalid duration_minutes: must be positive"
        assert error.context == {"field": "duration_minutes", "value": -5}

    def test_query_error_merges_context(self):
        error = QueryError("failed", query="SELECT 1", context={"user": "u1"})
        assert isinstance(error, DatabaseError)
        assert error.context == {"query": "SELECT 1", "user": "u1"}

    def test_user_not_found(self):
        error = UserNotFoundError("user-9")
        assert isinstance(error, RecordNotFoundError)
        assert error.record_type == "User"
        assert error.record_id == "user-9"
        assert error.user_id == "user-9"
        assert error.user_message == "User not found."

    def test_configuration_error(self):
        error = ConfigurationError("bad tz", config_key="APP_TIMEZONE")
        assert error.config_key == "APP_TIMEZONE"

    def test_challenge_error_shows_message_to_user(self):
        error = ChallengeError("You're already working on 'Daily Grind'", challenge_id="ch-1")
        assert error.challenge_id == "ch-1"
        assert error.user_message == "You're already working on 'Daily Grind'"


class TestWrapDatabaseException:
    """Test psycopg error wrapping"""

    def test_wraps_psycopg_error(self):
        cause = psycopg.OperationalError("connection lost")
        error = wrap_database_exception(cause, operation="record_task", user_id="u1", context={"a": 1})
        assert isinstance(error, QueryError)
        assert error.cause is cause
        assert error.operation == "record_task"
        assert error.context["a"] == 1

    def test_wraps_other_errors_generically(self):
        error = wrap_database_exception(RuntimeError("boom"), operation="record_task")
        assert type(error) is ProgressionError
        assert "record_task failed" in error.message
