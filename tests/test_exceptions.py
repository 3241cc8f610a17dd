"""Tests for custom exceptions."""

import pytest

from recall.core.exceptions import (
    AnalysisError,
    ConfigurationError,
    EncodingError,
    InvalidTransitionError,
    RecallError,
)


class TestExceptionHierarchy:
    """Recoverable errors share a base class; configuration errors don't."""

    @pytest.mark.parametrize("error_cls", [EncodingError, AnalysisError, InvalidTransitionError])
    def test_inherits_recall_error(self, error_cls):
        error = error_cls("something went wrong")

        assert isinstance(error, RecallError)
        assert error.message == "something went wrong"
        assert str(error) == "something went wrong"

    def test_configuration_error_is_not_recall_error(self):
        assert not issubclass(ConfigurationError, RecallError)

    def test_can_catch_as_base(self):
        with pytest.raises(RecallError):
            raise AnalysisError("No response from Gemini")
