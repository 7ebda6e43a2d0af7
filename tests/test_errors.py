"""Tests for error decorators, error contexts and HTTP status mapping."""

import pytest
from structlog.testing import capture_logs

from project_brain.core.base import ErrorCode, ErrorLevel
from project_brain.core.decorators import with_error_handling
from project_brain.core.error_context import ErrorContext, ErrorContextManager
from project_brain.core.errors import NotFoundError, ProviderError, ServiceError, ValidationError, is_transient
from project_brain.core.handlers import status_for
from project_brain.core.logging import bind_request_context, get_log_context


class TestWithErrorHandling:
    async def test_reraises_by_default(self):
        @with_error_handling()
        async def explode():
            raise ValidationError("bad input")

        with pytest.raises(ValidationError):
            await explode()

    async def test_swallows_into_none(self):
        @with_error_handling(reraise=False)
        async def explode():
            raise RuntimeError("boom")

        assert await explode() is None

    def test_sync_functions(self):
        @with_error_handling(error_level=ErrorLevel.WARNING, reraise=False)
        def explode():
            raise RuntimeError("boom")

        assert explode() is None

    async def test_return_value_untouched(self):
        @with_error_handling()
        async def fine(x):
            return x * 2

        assert await fine(21) == 42

    async def test_reraised_errors_reported_once(self):
        @with_error_handling(reraise=True)
        async def inner():
            raise RuntimeError("boom")

        @with_error_handling(reraise=True)
        async def middle():
            return await inner()

        @with_error_handling(reraise=False)
        async def outer():
            return await middle()

        with capture_logs() as logs:
            assert await outer() is None

        errors = [entry for entry in logs if entry["log_level"] == "error"]
        assert len(errors) == 1
        assert errors[0]["function"] == "outer"
        assert errors[0]["exc_info"] is True
        assert not any("during error context handling" in entry["event"] for entry in logs)

    async def test_reraise_logs_at_debug(self):
        @with_error_handling(error_level=ErrorLevel.ERROR, reraise=True)
        async def explode():
            raise RuntimeError("boom")

        with capture_logs() as logs, pytest.raises(RuntimeError):
            await explode()

        assert [entry["log_level"] for entry in logs] == ["debug"]


class TestProviderError:
    def test_transient_flag(self):
        assert is_transient(ProviderError("timed out", transient=True))
        assert not is_transient(ProviderError("input rejected"))
        assert not is_transient(RuntimeError("timed out"))


class TestErrorContext:
    def test_includes_details_and_request_context(self):
        error = ValidationError("bad", details={"source": "tests", "operation": "check"})
        with bind_request_context(project="p1"):
            data = ErrorContext(error, attempt=1).to_dict()

        assert data["error_code"] == ErrorCode.INVALID_INPUT.value
        assert data["details.source"] == "tests"
        assert data["request.project"] == "p1"
        assert data["context.attempt"] == 1

    def test_request_context_restored(self):
        with bind_request_context(project="p1"):
            with bind_request_context(operation="ask", model=None):
                assert get_log_context() == {"project": "p1", "operation": "ask"}
            assert get_log_context() == {"project": "p1"}

    async def test_contexts_are_bounded(self):
        manager = ErrorContextManager()
        manager.max_contexts = 3
        contexts = [await manager.capture_context(RuntimeError(str(i))) for i in range(5)]

        assert manager.get_context(contexts[0].trace_id) is None
        assert manager.get_context(contexts[-1].trace_id) is contexts[-1]


class TestStatusMapping:
    @pytest.mark.parametrize(
        ("error", "status"),
        [
            (ValidationError("x"), 400),
            (NotFoundError("x"), 404),
            (ProviderError("x"), 502),
            (ServiceError("x"), 500),
            (RuntimeError("x"), 500),
        ],
    )
    def test_status_for(self, error, status):
        assert status_for(error) == status
