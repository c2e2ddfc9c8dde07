from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, List

from fastapi import APIRouter, Depends, Request, status

from ..context import AppContext, get_context
from ..schemas import TodoCreate, TodoOut

router = APIRouter(
    prefix="/api/todos",
    tags=["todos"],
)

_UNAVAILABLE = {"description": "Database not connected"}
_STORE_ERROR = {"description": "Database operation failed"}


async def _read_body(request: Request) -> Any:
    """
    Decode the JSON request body, treating anything undecodable as an empty object.
    """
    try:
        return await request.json()
    except ValueError:
        return {}


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[TodoOut],
    summary="List Todos",
    description="Return every Todo in the collection.",
    responses={
        200: {"description": "List retrieved successfully"},
        500: _STORE_ERROR,
        503: _UNAVAILABLE,
    },
)
async def list_todos(ctx: AppContext = Depends(get_context)) -> List[TodoOut]:
    """
    List all todos.
    """
    items = await ctx.gateway.find_all(ctx.settings.collection)
    return [TodoOut(**it) for it in items]


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=TodoOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create Todo",
    description=(
        "Create a new Todo item and return it with its assigned identifier. "
        "Missing fields fall back to defaults: task '', user 'anonymous', completed false."
    ),
    responses={
        201: {"description": "Todo created successfully"},
        500: _STORE_ERROR,
        503: _UNAVAILABLE,
    },
    openapi_extra={
        "requestBody": {
            "content": {"application/json": {"schema": TodoCreate.model_json_schema()}},
            "required": False,
        }
    },
)
async def create_todo(request: Request, ctx: AppContext = Depends(get_context)) -> TodoOut:
    """
    Create a new Todo. The body is parsed leniently and never rejected.
    """
    payload = TodoCreate.from_body(await _read_body(request))
    now = datetime.now(timezone.utc)
    # BSON dates keep millisecond precision
    created_at = now.replace(microsecond=now.microsecond // 1000 * 1000)
    record = {
        "task": payload.task,
        "user": payload.user,
        "completed": payload.completed,
        "createdAt": created_at,
    }
    new_id = await ctx.gateway.insert_one(ctx.settings.collection, record)
    return TodoOut(
        id=new_id,
        task=payload.task,
        user=payload.user,
        completed=payload.completed,
        created_at=created_at,
    )
