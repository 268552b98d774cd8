"""WebSocket connection management for board events."""

import json
import logging
from typing import Any

from fastapi import WebSocket

from task_projections.api.models import Task
from task_projections.board.state_machine import TransitionResult

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Tracks board viewers and pushes board events to them."""

    def __init__(self) -> None:
        self.active_connections: list[WebSocket] = []

    async def connect(self, websocket: WebSocket) -> None:
        await websocket.accept()
        self.active_connections.append(websocket)
        logger.info(f"[ConnectionManager] Viewer connected (total: {len(self.active_connections)})")

    def disconnect(self, websocket: WebSocket) -> None:
        if websocket in self.active_connections:
            self.active_connections.remove(websocket)
            logger.info(
                f"[ConnectionManager] Viewer disconnected (total: {len(self.active_connections)})"
            )

    async def broadcast(self, message: dict[str, Any]) -> None:
        """Send an event as JSON to every viewer, dropping dead connections."""
        if not self.active_connections:
            logger.debug(f"[ConnectionManager] No viewers for {message.get('type')} event")
            return

        message_json = json.dumps(message)
        dead_connections = []
        for connection in self.active_connections:
            try:
                await connection.send_text(message_json)
            except Exception as e:
                logger.warning(f"[ConnectionManager] Failed to send to viewer: {e}")
                dead_connections.append(connection)

        for connection in dead_connections:
            self.disconnect(connection)

    async def task_moved(self, result: TransitionResult) -> None:
        """Announce a confirmed column change."""
        await self.broadcast(
            {
                "type": "task_moved",
                "task_id": result.task_id,
                "from_status": result.from_status,
                "to_status": result.to_status,
            }
        )

    async def celebrate(self, task: Task) -> None:
        """Celebration hook: a task reached done."""
        await self.broadcast({"type": "celebrate", "task_id": task.id, "title": task.title})
