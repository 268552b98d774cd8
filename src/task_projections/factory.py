"""Dependency injection factory."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import tzinfo

from fastapi import FastAPI

from task_projections.board.state_machine import BoardStateMachine
from task_projections.config import Config
from task_projections.storage.task_store import MarkdownTaskStore, TaskStore
from task_projections.views.dates import resolve_tz
from task_projections.websocket.connection_manager import ConnectionManager

logger = logging.getLogger(__name__)

# Global config instance for dependency injection
_config: Config | None = None

# Global singletons, created on first use
_task_store: TaskStore | None = None
_connection_manager: ConnectionManager | None = None
_board: BoardStateMachine | None = None


def get_config() -> Config:
    """Get or create Config instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def get_timezone() -> tzinfo | None:
    """Local zone used to bucket days (None: system zone)."""
    return resolve_tz(get_config().timezone)


def get_task_store() -> TaskStore:
    """Get or create the task store."""
    global _task_store
    if _task_store is None:
        config = get_config()
        _task_store = MarkdownTaskStore(config.data_dir, config.tasks_folder, config.categories_file)
    return _task_store


def get_connection_manager() -> ConnectionManager:
    """Get or create ConnectionManager singleton."""
    global _connection_manager
    if _connection_manager is None:
        _connection_manager = ConnectionManager()
    return _connection_manager


def get_board() -> BoardStateMachine:
    """Get or create the board, loading its snapshot from the store."""
    global _board
    if _board is None:
        store = get_task_store()
        _board = BoardStateMachine(
            store.list_tasks(),
            store,
            on_celebrate=get_connection_manager().celebrate,
        )
        logger.info(f"[Factory] Board created with {len(_board.tasks())} tasks")
    return _board


def reset() -> None:
    """Drop cached singletons (config included)."""
    global _config, _task_store, _connection_manager, _board
    _config = None
    _task_store = None
    _connection_manager = None
    _board = None


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application lifecycle - startup and shutdown."""
    logger.info("[Lifespan] Loading board snapshot...")
    get_board()
    try:
        yield
    finally:
        logger.info("[Lifespan] Shutting down")


def create_app() -> FastAPI:
    """Create FastAPI application (composition root)."""
    from task_projections.api.board import router as board_router
    from task_projections.api.views import router as views_router
    from task_projections.api.websocket import router as ws_router

    app = FastAPI(
        title="TaskProjections",
        description="Streak, calendar, roadmap and board projections over a task snapshot",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.include_router(views_router, prefix="/api")
    app.include_router(board_router, prefix="/api")
    app.include_router(ws_router)  # WebSocket at /ws

    return app
