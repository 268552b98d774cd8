"""Tests for board event broadcasting."""

import json

import pytest
from conftest import make_task

from task_projections.board.state_machine import TransitionResult
from task_projections.websocket.connection_manager import ConnectionManager


class FakeWebSocket:
    def __init__(self, broken: bool = False) -> None:
        self.sent: list[dict] = []
        self.accepted = False
        self.broken = broken

    async def accept(self) -> None:
        self.accepted = True

    async def send_text(self, text: str) -> None:
        if self.broken:
            raise RuntimeError("socket closed")
        self.sent.append(json.loads(text))


@pytest.mark.asyncio
async def test_celebrate_and_task_moved_reach_viewers() -> None:
    manager = ConnectionManager()
    viewer = FakeWebSocket()
    await manager.connect(viewer)

    await manager.celebrate(make_task("ship", title="Ship it"))
    await manager.task_moved(TransitionResult("ship", "in_progress", "done", applied=True))

    assert viewer.accepted
    assert viewer.sent == [
        {"type": "celebrate", "task_id": "ship", "title": "Ship it"},
        {"type": "task_moved", "task_id": "ship", "from_status": "in_progress", "to_status": "done"},
    ]


@pytest.mark.asyncio
async def test_dead_connections_are_dropped() -> None:
    manager = ConnectionManager()
    alive, dead = FakeWebSocket(), FakeWebSocket(broken=True)
    await manager.connect(alive)
    await manager.connect(dead)

    await manager.broadcast({"type": "celebrate", "task_id": "x", "title": "X"})

    assert manager.active_connections == [alive]
    assert len(alive.sent) == 1


@pytest.mark.asyncio
async def test_broadcast_without_viewers() -> None:
    await ConnectionManager().broadcast({"type": "task_moved"})
