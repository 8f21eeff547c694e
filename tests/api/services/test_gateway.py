"""Tests for per-connection request dispatch."""

import asyncio
import json
from typing import Any

import pytest

from api.services.connection_hub import ConnectionHub
from api.services.gateway import ConnectionGateway
from core.config import Settings
from core.tasks import TaskRegistry, TaskScheduler

from tests.utils.test_helpers import BlockingUnitOfWork, TestDataFactory


class Channel:
    """In-memory stand-in for a WebSocket."""

    def __init__(self) -> None:
        self.sent: list[dict[str, Any]] = []

    async def __call__(self, message: dict[str, Any]) -> None:
        self.sent.append(message)

    def of_type(self, kind: str) -> list[dict[str, Any]]:
        return [message for message in self.sent if message["type"] == kind]


def _connect(
    connection_id: str, hub: ConnectionHub, registry: TaskRegistry, settings: Settings
) -> tuple[ConnectionGateway, Channel]:
    channel = Channel()
    hub.register(channel, connection_id=connection_id)
    return ConnectionGateway(connection_id, hub, registry, settings), channel


async def _start(gateway: ConnectionGateway, channel: Channel, **overrides) -> str:
    await gateway.handle_message(
        json.dumps(TestDataFactory.create_start_payload(**overrides))
    )
    return channel.of_type("task_started")[-1]["taskId"]


class TestStart:
    """Test the start request."""

    @pytest.mark.asyncio
    async def test_start_creates_task(self, hub, hub_registry, test_settings):
        gateway, channel = _connect("conn-1", hub, hub_registry, test_settings)

        task_id = await _start(gateway, channel)

        assert task_id in hub_registry
        assert [m["type"] for m in channel.sent] == ["task_started", "log"]
        assert channel.sent[1]["taskId"] == task_id
        assert channel.sent[1]["messageType"] == "info"
        task = hub_registry.lookup(task_id)
        assert task.owner == "conn-1"
        assert task.config.items == ("hi", "bye")
        assert task.config.interval_seconds == 60.0
        assert len(task.logs) == 1

    @pytest.mark.asyncio
    async def test_empty_items_rejected(self, hub, hub_registry, test_settings):
        """Blank item source: error event and no new task."""
        gateway, channel = _connect("conn-1", hub, hub_registry, test_settings)

        await gateway.handle_message(
            json.dumps(TestDataFactory.create_start_payload(items="  \n \n"))
        )

        assert len(hub_registry) == 0
        assert channel.sent == [
            {
                "type": "error",
                "message": "items must contain at least one non-blank line",
                "from": "start",
            }
        ]

    @pytest.mark.asyncio
    async def test_missing_credentials_rejected(self, hub, hub_registry, test_settings):
        gateway, channel = _connect("conn-1", hub, hub_registry, test_settings)
        payload = TestDataFactory.create_start_payload()
        del payload["credentials"]

        await gateway.handle_message(json.dumps(payload))

        assert len(hub_registry) == 0
        assert channel.sent[0]["type"] == "error"
        assert channel.sent[0]["message"] == "credentials is required"

    @pytest.mark.asyncio
    async def test_bad_interval_uses_default(self, hub, hub_registry, test_settings):
        gateway, channel = _connect("conn-1", hub, hub_registry, test_settings)

        task_id = await _start(gateway, channel, interval="never")

        config = hub_registry.lookup(task_id).config
        assert config.interval_seconds == test_settings.default_interval_seconds

    @pytest.mark.asyncio
    async def test_start_with_browser_client_fields(
        self, hub, hub_registry, test_settings
    ):
        """The web client's field names are accepted as well."""
        gateway, channel = _connect("conn-1", hub, hub_registry, test_settings)

        await gateway.handle_message(
            json.dumps(
                {
                    "type": "start",
                    "cookieContent": "c=1",
                    "messageContent": "hi\nbye",
                    "hatersName": "X",
                    "threadID": "t",
                    "lastHereName": "Y",
                    "delay": 5,
                }
            )
        )

        [started] = channel.of_type("task_started")
        config = hub_registry.lookup(started["taskId"]).config
        assert config.credentials == "c=1"
        assert config.items == ("hi", "bye")
        assert config.compose("hi") == "X hi Y"
        assert config.target == "t"
        assert config.interval_seconds == 5.0


class TestStop:
    """Test the stop request."""

    @pytest.mark.asyncio
    async def test_stop_own_task(self, hub, hub_registry, test_settings):
        gateway, channel = _connect("conn-1", hub, hub_registry, test_settings)
        task_id = await _start(gateway, channel)
        channel.sent.clear()

        await gateway.handle_message(json.dumps({"type": "stop", "taskId": task_id}))

        assert task_id not in hub_registry
        assert [m["type"] for m in channel.sent] == ["log", "task_stopped"]
        assert channel.sent[0]["messageType"] == "warning"
        assert channel.sent[1] == {"type": "task_stopped", "taskId": task_id}

    @pytest.mark.asyncio
    async def test_stop_unknown(self, hub, hub_registry, test_settings):
        gateway, channel = _connect("conn-1", hub, hub_registry, test_settings)

        await gateway.handle_message(json.dumps({"type": "stop", "taskId": "nope"}))

        assert channel.sent == [
            {"type": "error", "message": "Task nope not found", "from": "stop"}
        ]

    @pytest.mark.asyncio
    async def test_stop_missing_task_id(self, hub, hub_registry, test_settings):
        gateway, channel = _connect("conn-1", hub, hub_registry, test_settings)

        await gateway.handle_message(json.dumps({"type": "stop"}))

        assert channel.sent == [
            {"type": "error", "message": "taskId is required", "from": "stop"}
        ]

    @pytest.mark.asyncio
    async def test_second_stop_is_not_found(self, hub, hub_registry, test_settings):
        gateway, channel = _connect("conn-1", hub, hub_registry, test_settings)
        task_id = await _start(gateway, channel)
        stop = json.dumps({"type": "stop", "taskId": task_id})

        await gateway.handle_message(stop)
        await gateway.handle_message(stop)

        errors = channel.of_type("error")
        assert len(errors) == 1
        assert "not found" in errors[0]["message"]
        assert errors[0]["from"] == "stop"

    @pytest.mark.asyncio
    async def test_stop_by_other_connection(self, hub, hub_registry, test_settings):
        """Stop is open to any holder of the id; the owner is told too."""
        owner, owner_channel = _connect("conn-1", hub, hub_registry, test_settings)
        other, other_channel = _connect("conn-2", hub, hub_registry, test_settings)
        task_id = await _start(owner, owner_channel)
        owner_channel.sent.clear()

        await other.handle_message(json.dumps({"type": "stop", "taskId": task_id}))

        assert task_id not in hub_registry
        assert [m["type"] for m in other_channel.sent] == ["log", "task_stopped"]
        assert owner_channel.sent == [other_channel.sent[0]]

    @pytest.mark.asyncio
    async def test_owner_gone_gets_nothing(self, hub, hub_registry, test_settings):
        owner, owner_channel = _connect("conn-1", hub, hub_registry, test_settings)
        other, other_channel = _connect("conn-2", hub, hub_registry, test_settings)
        task_id = await _start(owner, owner_channel)
        owner_channel.sent.clear()
        hub.unregister("conn-1")

        await other.handle_message(json.dumps({"type": "stop", "taskId": task_id}))

        assert owner_channel.sent == []
        assert other_channel.of_type("task_stopped")

    @pytest.mark.asyncio
    async def test_stop_waits_for_cycle_in_flight(self, hub, test_settings):
        """A running cycle completes before the stop is logged and confirmed."""
        work = BlockingUnitOfWork()
        registry = TaskRegistry(TaskScheduler(notifier=hub), work_factory=lambda _: work)
        gateway, channel = _connect("conn-1", hub, registry, test_settings)
        task_id = await _start(gateway, channel, interval=0.05)
        task = registry.lookup(task_id)
        await asyncio.wait_for(work.entered.wait(), timeout=1.0)

        stopping = asyncio.create_task(
            gateway.handle_message(json.dumps({"type": "stop", "taskId": task_id}))
        )
        await asyncio.sleep(0.05)
        assert channel.of_type("task_stopped") == []

        work.release.set()
        await asyncio.wait_for(stopping, timeout=1.0)

        assert task.stats.sent == 1
        assert [entry.message for entry in task.logs][-2:] == [
            "Sent: X hi Y",
            "Task stopped",
        ]
        assert channel.sent[-1] == {"type": "task_stopped", "taskId": task_id}
        await registry.shutdown()


class TestViewDetails:
    """Test the view_details request."""

    @pytest.mark.asyncio
    async def test_details_of_running_task(self, hub, hub_registry, test_settings):
        gateway, channel = _connect("conn-1", hub, hub_registry, test_settings)
        task_id = await _start(gateway, channel)
        task = hub_registry.lookup(task_id)
        await task.run_cycle()
        await task.run_cycle()
        channel.sent.clear()

        await gateway.handle_message(
            json.dumps({"type": "view_details", "taskId": task_id})
        )

        [details] = channel.sent
        assert details["type"] == "task_details"
        assert details["taskId"] == task_id
        assert details["sent"] == 2
        assert details["failed"] == 0
        assert details["loopsCompleted"] == 1
        assert details["restarts"] == 0
        assert details["activeCookiesCount"] == 1
        assert [entry["severity"] for entry in details["logs"]] == [
            "info",
            "success",
            "success",
        ]

    @pytest.mark.asyncio
    async def test_details_for_non_owner(self, hub, hub_registry, test_settings):
        owner, owner_channel = _connect("conn-1", hub, hub_registry, test_settings)
        viewer, viewer_channel = _connect("conn-2", hub, hub_registry, test_settings)
        task_id = await _start(owner, owner_channel)
        owner_channel.sent.clear()

        await viewer.handle_message(
            json.dumps({"type": "view_details", "taskId": task_id})
        )

        assert viewer_channel.sent[0]["type"] == "task_details"
        assert owner_channel.sent == []

    @pytest.mark.asyncio
    async def test_details_unknown(self, hub, hub_registry, test_settings):
        gateway, channel = _connect("conn-1", hub, hub_registry, test_settings)

        await gateway.handle_message(
            json.dumps({"type": "view_details", "taskId": "fabricated"})
        )

        [error] = channel.sent
        assert error["type"] == "error"
        assert "not found" in error["message"]
        assert "sent" not in error


class TestMalformed:
    """Test requests that cannot be dispatched."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "raw,message",
        [
            ("{not json", "Malformed request: not valid JSON"),
            (b"\xff\xfe", "Malformed request: not valid JSON"),
            ("[1, 2]", "Malformed request: expected a JSON object"),
            ('{"taskId": "x"}', "Request type is missing"),
            ('{"type": "explode"}', "Unknown request type: 'explode'"),
        ],
    )
    async def test_error_event(self, hub, hub_registry, test_settings, raw, message):
        gateway, channel = _connect("conn-1", hub, hub_registry, test_settings)

        await gateway.handle_message(raw)

        assert channel.sent == [{"type": "error", "message": message}]


class TestClose:
    @pytest.mark.asyncio
    async def test_close_removes_only_own_tasks(self, hub, hub_registry, test_settings):
        first, first_channel = _connect("conn-1", hub, hub_registry, test_settings)
        second, second_channel = _connect("conn-2", hub, hub_registry, test_settings)
        mine = [await _start(first, first_channel) for _ in range(2)]
        theirs = await _start(second, second_channel)

        assert first.close() == 2

        assert all(task_id not in hub_registry for task_id in mine)
        assert theirs in hub_registry
