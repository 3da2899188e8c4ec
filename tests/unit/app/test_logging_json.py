from __future__ import annotations

import json
import logging

import pytest

from mediavault.app.core.env import Env
from mediavault.app.core.logging import JsonFormatter, setup_logging
from mediavault.auth.memory import InMemoryUserRepository
from mediavault.auth.models import User
from mediavault.files.lifecycle import FileLifecycleManager
from mediavault.files.memory import InMemoryFileRepository
from mediavault.files.models import IncomingFile
from mediavault.storage.backends.memory import MemoryBackend


class _Buffer:
    def __init__(self):
        self.data = ""

    def write(self, s):
        self.data += s

    def flush(self):
        pass


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def _logger_with_buffer(name: str) -> tuple[logging.Logger, _Buffer]:
    logger = logging.getLogger(name)
    logger.setLevel(logging.INFO)
    logger.propagate = False
    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    buf = _Buffer()
    handler.stream = buf
    logger.handlers[:] = [handler]
    return logger, buf


def test_json_formatter_includes_context_fields():
    logger, buf = _logger_with_buffer("test.json.context")

    logger.info("uploaded %s", "a.jpg", extra={"user_id": "u1", "file_id": "f1"})

    payload = json.loads(buf.data)
    assert payload["message"] == "uploaded a.jpg"
    assert payload["level"] == "INFO"
    assert payload["logger"] == "test.json.context"
    assert payload["user_id"] == "u1"
    assert payload["file_id"] == "f1"
    assert "request_id" not in payload


def test_json_formatter_truncates_stack(monkeypatch):
    monkeypatch.setenv("LOG_STACK_LIMIT", "10")
    logger, buf = _logger_with_buffer("test.json.error")

    try:
        raise RuntimeError("boom")
    except RuntimeError:
        logger.exception("failed")

    error = json.loads(buf.data)["error"]
    assert error["type"] == "RuntimeError"
    assert error["message"] == "boom"
    assert error["stack"].endswith("...(truncated)")


@pytest.mark.parametrize(
    "env, level, formatter",
    [(Env.PROD, logging.INFO, JsonFormatter), (Env.LOCAL, logging.DEBUG, logging.Formatter)],
)
def test_setup_logging_defaults(monkeypatch, env, level, formatter):
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    monkeypatch.delenv("LOG_FORMAT", raising=False)

    setup_logging(env)

    root = logging.getLogger()
    assert root.level == level
    assert type(root.handlers[0].formatter) is formatter


def test_setup_logging_env_overrides(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "warning")
    monkeypatch.setenv("LOG_FORMAT", "json")

    setup_logging(Env.LOCAL)

    root = logging.getLogger()
    assert root.level == logging.WARNING
    assert isinstance(root.handlers[0].formatter, JsonFormatter)
    assert logging.getLogger("pymongo").level == logging.INFO


@pytest.fixture
def lifecycle_json_log():
    logger = logging.getLogger("mediavault.files.lifecycle")
    buf = _Buffer()
    handler = logging.StreamHandler(buf)
    handler.setFormatter(JsonFormatter())
    level = logger.level
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    yield buf
    logger.removeHandler(handler)
    logger.setLevel(level)


@pytest.mark.asyncio
async def test_lifecycle_events_carry_context_fields(lifecycle_json_log, clock, now):
    users = InMemoryUserRepository()
    await users.create(User(id="owner-a", name="Owner", email="owner-a@example.com", created_at=now))
    manager = FileLifecycleManager(InMemoryFileRepository(), users, MemoryBackend(), clock=clock)

    record = await manager.upload(
        "owner-a", IncomingFile(filename="beach.jpg", content_type="image/jpeg", data=b"x" * 16)
    )
    await manager.delete("owner-a", record.id)

    events = [json.loads(line) for line in lifecycle_json_log.data.splitlines()]
    assert [e["message"].split(" (")[0] for e in events] == [
        f"File {record.id} uploaded by owner-a",
        f"File {record.id} deleted by owner-a",
    ]
    for event in events:
        assert event["user_id"] == "owner-a"
        assert event["file_id"] == record.id
        assert event["object_id"] == record.storage_object_id
