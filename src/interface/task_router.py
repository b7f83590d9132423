"""Task board HTTP API router."""

import logging

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from src.core.config import constants
from src.core.db_client import TaskStore
from src.core.errors import ErrorResponse, TaskBoardError, to_error_response
from src.domain.create_models import TaskCreate
from src.domain.task import Task
from src.domain.update_models import TaskUpdate
from src.models.api_models import (
    MessageResponse,
    ReorderRequest,
    TaskCreatedResponse,
    TaskDeleteRequest,
    TaskListRequest,
)
from src.models.service_models import TaskPage
from src.services import reorder_service, task_service


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/tasks", tags=["tasks"])


def get_store(request: Request) -> TaskStore:
    """Return the store handle opened by the application lifespan."""
    return request.app.state.store


@router.post("/create")
async def create_task(body: TaskCreate, store: TaskStore = Depends(get_store)) -> TaskCreatedResponse:
    """Create a task at the end of its column."""
    task = await task_service.create_task(store, body)
    return TaskCreatedResponse(task_id=task.task_id, message="Task created", order_index=task.order_index)


@router.post("/update")
async def update_task(body: TaskUpdate, store: TaskStore = Depends(get_store)) -> MessageResponse:
    """Update title, description, priority or deadline of a task."""
    await task_service.update_task(store, body.task_id, body.to_patch())
    return MessageResponse(message="Task updated")


@router.post("/delete")
async def delete_task(body: TaskDeleteRequest, store: TaskStore = Depends(get_store)) -> MessageResponse:
    """Delete a task and renumber its former column."""
    await task_service.delete_task(store, body.task_id)
    return MessageResponse(message="Task deleted")


@router.post("/list")
async def list_tasks(body: TaskListRequest | None = None, store: TaskStore = Depends(get_store)) -> TaskPage:
    """Search, filter and paginate tasks."""
    query = body or TaskListRequest()
    return await task_service.list_tasks(store, search=query.search, status=query.status, page=query.page)


@router.post("/reorder-tasks-and-status")
async def reorder_tasks_and_status(body: ReorderRequest, store: TaskStore = Depends(get_store)) -> MessageResponse:
    """Move a task to a column and position, renumbering both columns."""
    await reorder_service.reorder_task(store, task_id=body.taskId, new_status=body.newStatus, new_index=body.newIndex)
    return MessageResponse(message="Tasks reordered")


@router.get("/{task_id}")
async def get_task(task_id: int, store: TaskStore = Depends(get_store)) -> Task:
    """Fetch a single task."""
    return await task_service.get_task(store, task_id)


def _format_validation_error(exc: RequestValidationError) -> str:
    """Render the first validation error as a short message."""
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid value")
    return f"{location}: {message}" if location else message


async def handle_task_board_error(request: Request, exc: TaskBoardError) -> JSONResponse:
    """Translate domain errors into JSON error payloads."""
    level = "error" if exc.status_code >= constants.HTTP_SERVER_ERROR else "info"
    getattr(logger, level)(
        "request_failed",
        extra={"path": request.url.path, "code": exc.code, "status_code": exc.status_code, "error": exc.detail},
    )
    return JSONResponse(status_code=exc.status_code, content=to_error_response(exc).model_dump(exclude_none=True))


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed request bodies as 400 instead of FastAPI's default 422."""
    message = _format_validation_error(exc)
    logger.info("request_invalid", extra={"path": request.url.path, "error": message})
    return JSONResponse(
        status_code=constants.HTTP_BAD_REQUEST,
        content=ErrorResponse(message=message).model_dump(exclude_none=True),
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler so clients always receive the JSON error shape."""
    logger.exception("request_unhandled_error", extra={"path": request.url.path})
    return JSONResponse(
        status_code=constants.HTTP_SERVER_ERROR,
        content=ErrorResponse(message="Internal server error", error=str(exc)).model_dump(exclude_none=True),
    )


def register_error_handlers(app: FastAPI) -> None:
    """Install the JSON error handlers on an application."""
    app.add_exception_handler(TaskBoardError, handle_task_board_error)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, handle_validation_error)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, handle_unexpected_error)
