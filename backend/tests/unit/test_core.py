"""
Unit Tests for Core Components

Tests for statistics, priority translation, retries, backend error
translation, the recent-error log, structured logging and the realtime
broker.
"""

import asyncio
import io
import json
import logging

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from projecthub.core.errors import ErrorLog, error_log, log_error
from projecthub.core.logging import REDACTED, configure_logging, get_logger
from projecthub.core.retry import BackoffStrategy, RetryConfig, RetryHandler, retry, retry_operation
from projecthub.data.demo import DEMO_USER_ID
from projecthub.middleware.exception import (
    BackendError,
    NotFoundException,
    classify_backend_error,
    should_retry,
)
from projecthub.services.priority import normalize_priority, priority_to_numeric
from projecthub.services.realtime import ChangeBroker
from projecthub.services.stats import completion_rate, dashboard_stats, task_stats


class TestCompletionRate:
    """Tests for the completion percentage."""

    @pytest.mark.parametrize("completed,total,expected", [
        (0, 0, 0),
        (0, 10, 0),
        (10, 10, 100),
        (1, 3, 33),
        (2, 3, 67),
        (1, 8, 13),
        (9, 19, 47),
    ])
    def test_rounding(self, completed, total, expected):
        assert completion_rate(completed, total) == expected

    def test_clamped(self):
        assert completion_rate(12, 10) == 100
        assert completion_rate(-1, 10) == 0


class TestDashboardStats:
    """Tests for the derived dashboard totals."""

    async def test_seed_totals(self, demo_data):
        stats = await dashboard_stats(demo_data, DEMO_USER_ID)

        assert stats.total_projects == 5
        assert stats.active_projects == 3
        assert stats.completed_projects == 1
        assert stats.total_tasks == 19
        assert stats.completed_tasks == 9
        assert stats.completion_rate == 47

    async def test_member_projects_are_not_counted(self, demo_data):
        stats = await dashboard_stats(demo_data, "contact-1")

        assert stats.total_projects == 0
        assert stats.completion_rate == 0

    async def test_project_task_stats(self, demo_data):
        stats = task_stats(await demo_data.tasks.list("proj-1"))

        assert stats.to_dict() == {
            "total_tasks": 5,
            "completed_tasks": 2,
            "in_progress_tasks": 1,
            "todo_tasks": 2,
            "completion_rate": 40,
        }


class TestPriority:
    """Tests for the numeric/label priority translation."""

    @pytest.mark.parametrize("value,expected", [
        (1, "low"),
        (2, "low"),
        (3, "medium"),
        (4, "high"),
        (5, "high"),
        ("5", "high"),
        ("High", "high"),
        (" medium ", "medium"),
    ])
    def test_normalize(self, value, expected):
        assert normalize_priority(value) == expected

    def test_unknown_passes_through(self):
        assert normalize_priority(9) == 9
        assert normalize_priority("urgent") == "urgent"

    def test_numeric_weight(self):
        assert priority_to_numeric("low") == 1
        assert priority_to_numeric("medium") == 3
        assert priority_to_numeric("high") == 5


class TestRetry:
    """Tests for the retry handler."""

    def test_exponential_delays(self):
        handler = RetryHandler(RetryConfig(base_delay=1.0, max_delay=5.0))

        assert [handler.calculate_delay(n) for n in (1, 2, 3, 4)] == [1.0, 2.0, 4.0, 5.0]

    def test_fixed_delays(self):
        handler = RetryHandler(RetryConfig(base_delay=2.0, backoff_strategy=BackoffStrategy.FIXED))

        assert handler.calculate_delay(3) == 2.0

    async def test_recovers_after_transient_failures(self):
        calls = []

        async def flaky():
            calls.append(1)
            if len(calls) < 3:
                raise ConnectionError("connection reset")
            return "ok"

        assert await retry_operation(flaky, max_retries=3, initial_delay=0) == "ok"
        assert len(calls) == 3

    async def test_gives_up_after_max_retries(self):
        calls = []

        async def broken():
            calls.append(1)
            raise ConnectionError("connection refused")

        with pytest.raises(ConnectionError):
            await retry_operation(broken, max_retries=2, initial_delay=0)
        assert len(calls) == 3

    async def test_non_retryable_fails_immediately(self):
        calls = []

        async def conflict():
            calls.append(1)
            raise NotFoundException("Project", "p")

        with pytest.raises(NotFoundException):
            await retry_operation(conflict, initial_delay=0, should_retry=should_retry)
        assert len(calls) == 1

    async def test_decorator(self):
        attempts = {"n": 0}

        @retry(max_retries=1, base_delay=0)
        async def once_flaky():
            attempts["n"] += 1
            if attempts["n"] == 1:
                raise asyncio.TimeoutError()
            return attempts["n"]

        assert await once_flaky() == 2


class TestBackendErrors:
    """Tests for translating raw backend failures."""

    def _integrity(self, text):
        return IntegrityError("INSERT", {}, Exception(text))

    def test_duplicate_email(self):
        error = classify_backend_error(self._integrity("UNIQUE constraint failed: profiles.email"))

        assert error.error_code == "ERR_DUPLICATE"
        assert error.message == "This email is already registered."
        assert error.status_code == 409
        assert not error.retryable

    def test_foreign_key(self):
        error = classify_backend_error(self._integrity("FOREIGN KEY constraint failed"))

        assert error.error_code == "ERR_REFERENCE"

    def test_network(self):
        error = classify_backend_error(ConnectionError("Network is unreachable"))

        assert error.error_code == "ERR_NETWORK"
        assert error.retryable

    def test_operational(self):
        error = classify_backend_error(OperationalError("SELECT", {}, Exception("disk I/O error")))

        assert error.error_code == "ERR_NETWORK"

    def test_timeout(self):
        error = classify_backend_error(asyncio.TimeoutError())

        assert error.error_code == "ERR_TIMEOUT"
        assert error.status_code == 504

    def test_permission(self):
        error = classify_backend_error(Exception("permission denied for table projects"))

        assert error.error_code == "ERR_PERMISSION"

    def test_unknown(self):
        error = classify_backend_error(RuntimeError("boom"))

        assert error.error_code == "ERR_BACKEND"
        assert error.status_code == 500

    def test_backend_error_passes_through(self):
        original = BackendError("Already friendly", retryable=True)

        assert classify_backend_error(original) is original
        assert should_retry(original)

    def test_should_retry(self):
        assert should_retry(ConnectionError("connection lost"))
        assert not should_retry(self._integrity("UNIQUE constraint failed"))


class TestErrorLog:
    """Tests for the recent-error buffer."""

    def test_newest_first_and_bounded(self):
        log = ErrorLog(capacity=3)
        for n in range(5):
            log.record(RuntimeError(f"error {n}"), page="dashboard")

        assert [e.message for e in log.recent()] == ["error 4", "error 3", "error 2"]
        assert len(log) == 3

    def test_log_error_records_context(self):
        entry = log_error(ValueError("bad"), page="tasks", action="create", user_id="u-1", task_id="t-1")

        assert error_log.recent(1)[0] is entry
        assert entry.error_type == "ValueError"
        assert entry.context == {"task_id": "t-1"}

    def test_defaults(self):
        entry = ErrorLog().record(KeyError())

        assert entry.page == "unknown"
        assert entry.user_id == "anonymous"
        assert entry.mode == "unknown"
        assert entry.message == "KeyError"

    def test_filter_by_user_and_mode(self):
        log = ErrorLog()
        log.record(RuntimeError("demo"), user_id=DEMO_USER_ID, mode="demo")
        log.record(RuntimeError("mine"), user_id="u-1", mode="real")
        log.record(RuntimeError("theirs"), user_id="u-2", mode="real")
        log.record(RuntimeError("mine again"), user_id="u-1", mode="real")

        assert [e.message for e in log.recent(user_id="u-1", mode="real")] == ["mine again", "mine"]
        assert [e.message for e in log.recent(1, user_id="u-1")] == ["mine again"]
        assert log.recent(user_id=DEMO_USER_ID, mode="real") == []
        assert len(log.recent()) == 4


class TestChangeBroker:
    """Tests for realtime fan-out."""

    async def test_filtered_subscription(self):
        broker = ChangeBroker()
        room_1 = broker.subscribe("real", "chat_messages", column="room_id", value="room-1")
        room_2 = broker.subscribe("real", "chat_messages", column="room_id", value="room-2")

        broker.publish("real", "chat_messages", {"id": "m", "room_id": "room-1"})

        event = await room_1.get(timeout=1)
        assert event.record["id"] == "m"
        assert event.to_dict()["type"] == "INSERT"
        assert await room_2.get(timeout=0.01) is None

    async def test_modes_are_isolated(self):
        broker = ChangeBroker()
        demo = broker.subscribe("demo", "project_updates")

        broker.publish("real", "project_updates", {"id": "u"})

        assert await demo.get(timeout=0.01) is None

    def test_unsubscribe(self):
        broker = ChangeBroker()
        with broker.subscribe("demo", "chat_messages"):
            assert broker.subscriber_count() == 1
        assert broker.subscriber_count() == 0

    def test_full_queue_drops(self):
        broker = ChangeBroker()
        subscription = broker.subscribe("demo", "chat_messages")
        for n in range(subscription.queue.maxsize + 2):
            broker.publish("demo", "chat_messages", {"id": str(n)})

        assert subscription.dropped == 2
        assert broker.get_metrics()["published"] == subscription.queue.maxsize + 2


class TestStructuredLogging:
    """Tests for the rendered JSON log lines."""

    @pytest.fixture
    def captured(self):
        configure_logging()
        handler = next(h for h in logging.getLogger().handlers if h.name == "default")
        stream = io.StringIO()
        previous = handler.setStream(stream)
        yield stream
        handler.setStream(previous)

    def _lines(self, stream):
        return [json.loads(line) for line in stream.getvalue().splitlines()]

    def test_event_is_rendered_once(self, captured):
        get_logger("projecthub.jobs").warning("Cache miss", key="dashboard")

        [line] = self._lines(captured)
        assert line["event"] == "Cache miss"
        assert line["key"] == "dashboard"
        assert line["level"] == "warning"
        assert line["logger"] == "projecthub.jobs"
        assert "_record" not in line

    def test_stdlib_records_share_the_format(self, captured):
        logging.getLogger("uvicorn.error").warning("Shutting down %s", "worker")

        [line] = self._lines(captured)
        assert line["event"] == "Shutting down worker"
        assert line["level"] == "warning"
        assert "timestamp" in line

    def test_secrets_are_redacted(self, captured):
        get_logger("projecthub.jobs").warning("Login failed", detail="password=hunter2")

        [line] = self._lines(captured)
        assert "hunter2" not in captured.getvalue()
        assert line["detail"] == REDACTED
