"""Tests for kvstash.errors module."""

import pytest

from kvstash.errors import (
    CacheError,
    ConfigError,
    EmptyKeyError,
    ErrorCategory,
    ErrorContext,
    InvalidArgumentError,
    InvalidDirectoryError,
    InvalidIterableError,
    InvalidKeyCharactersError,
    KeyNotStringError,
    SerializationError,
)


class TestErrorContext:
    def test_empty_context(self):
        assert ErrorContext().to_dict() == {}

    def test_only_set_fields_serialized(self):
        ctx = ErrorContext(key="index", backend="FileBackend")
        ctx.metadata["attempt"] = 2
        assert ctx.to_dict() == {"key": "index", "backend": "FileBackend", "attempt": 2}


class TestCacheError:
    def test_default_category(self):
        assert CacheError("boom").category is ErrorCategory.INTERNAL

    def test_cause_is_chained(self):
        cause = OSError("disk full")
        error = CacheError("write failed", cause=cause)
        assert error.cause is cause
        assert error.__cause__ is cause

    def test_with_context_sets_fields_and_metadata(self):
        error = CacheError("x").with_context(hashed_key="abc", attempt=3)
        assert error.context.hashed_key == "abc"
        assert error.context.metadata == {"attempt": 3}

    def test_to_dict(self):
        error = SerializationError("bad payload", cause=ValueError("eof"))
        error.with_context(key="index")
        assert error.to_dict() == {
            "error_type": "SerializationError",
            "message": "bad payload",
            "category": "SERIALIZATION",
            "context": {"key": "index"},
            "cause": "eof",
        }

    def test_repr(self):
        assert repr(ConfigError("nope")) == "ConfigError('nope', category=CONFIG)"


class TestArgumentErrors:
    def test_key_errors_are_value_errors(self):
        assert isinstance(EmptyKeyError(), ValueError)
        assert isinstance(InvalidKeyCharactersError("a/b", "/"), InvalidArgumentError)

    def test_key_not_string_is_also_type_error(self):
        error = KeyNotStringError(42)
        assert isinstance(error, TypeError)
        assert isinstance(error, ValueError)
        assert "int" in str(error)

    def test_string_key_recorded_in_context(self):
        assert InvalidKeyCharactersError("a/b", "/").context.key == "a/b"

    def test_iterable_error(self):
        error = InvalidIterableError(5)
        assert isinstance(error, TypeError)
        assert error.category is ErrorCategory.VALIDATION
        assert "int" in str(error)


class TestInvalidDirectoryError:
    def test_carries_directory(self):
        error = InvalidDirectoryError("/nowhere")
        assert error.directory == "/nowhere"
        assert error.context.path == "/nowhere"
        assert error.category is ErrorCategory.CONFIG

    def test_is_config_error(self):
        with pytest.raises(ConfigError):
            raise InvalidDirectoryError("/nowhere")
