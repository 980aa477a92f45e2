from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from pydantic import ValidationError

from ..htmx import HX_RESWAP, HX_RETARGET, HX_TRIGGER, is_partial_request
from ..models import TodoEntity
from ..repositories import Repository, StoreError
from ..schemas import TodoCreate, TodoUpdate, first_error_message

logger = logging.getLogger(__name__)

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))

router = APIRouter(
    tags=["todos"],
    default_response_class=HTMLResponse,
)

# Client-side event that clears the add-todo form
RESET_FORM_EVENT = "resetTodoForm"
# DOM selector of the element wrapping the whole list
TODO_LIST_TARGET = "#todo-list"
# DOM selector of the inline error slot under the add-todo form
FORM_ERROR_TARGET = "#form-error"


def get_repo(request: Request) -> Repository:
    """
    Dependency returning the repository injected into the app at startup.
    """
    return request.app.state.repository


def _render_error(request: Request, message: str, headers: Optional[Dict[str, str]] = None) -> HTMLResponse:
    return templates.TemplateResponse(request, "partials/error.html", {"message": message}, headers=headers)


def _render_form_error(request: Request, message: str) -> HTMLResponse:
    # The add form targets the list; errors go to the slot under the form instead
    return _render_error(
        request,
        message,
        headers={HX_RETARGET: FORM_ERROR_TARGET, HX_RESWAP: "innerHTML"},
    )


def _render_list(
    request: Request,
    todos: List[TodoEntity],
    headers: Optional[Dict[str, str]] = None,
    clear_form_error: bool = False,
) -> HTMLResponse:
    return templates.TemplateResponse(
        request,
        "partials/todo_list.html",
        {"todos": todos, "error": None, "clear_form_error": clear_form_error},
        headers=headers,
    )


# PUBLIC_INTERFACE
@router.get("/", summary="Todo page")
@router.get("/todos", summary="List Todos")
def list_todos(request: Request, repo: Repository = Depends(get_repo)) -> HTMLResponse:
    """
    Render all todos newest-first: the full page for normal navigation, the
    list fragment for htmx requests. A store failure renders the same view
    with no todos and an error message.
    """
    error: Optional[str] = None
    try:
        todos = repo.list()
    except StoreError:
        logger.exception("Error fetching todos")
        todos = []
        error = "Failed to load todos"

    template = "partials/todo_list.html" if is_partial_request(request) else "index.html"
    return templates.TemplateResponse(request, template, {"todos": todos, "error": error})


# PUBLIC_INTERFACE
@router.post("/todos", summary="Create Todo")
def create_todo(
    request: Request,
    task: Optional[str] = Form(None),
    repo: Repository = Depends(get_repo),
) -> HTMLResponse:
    """
    Create a todo and return the refreshed list, asking the client to reset
    its form.
    """
    try:
        payload = TodoCreate(task=task)
    except ValidationError as exc:
        return _render_form_error(request, first_error_message(exc))

    try:
        repo.create(payload)
        todos = repo.list()
    except StoreError:
        logger.exception("Error creating todo")
        return _render_form_error(request, "Failed to create todo")

    return _render_list(
        request,
        todos,
        headers={HX_TRIGGER: RESET_FORM_EVENT},
        clear_form_error=True,
    )


# PUBLIC_INTERFACE
@router.put("/todos", summary="Update Todo without id")
@router.delete("/todos", summary="Delete Todo without id")
def missing_todo_id(request: Request) -> HTMLResponse:
    """Mutations on the collection itself lack the id they need."""
    return _render_error(request, "Todo ID is required")


# PUBLIC_INTERFACE
@router.put("/todos/{todo_id}", summary="Update Todo")
def update_todo(
    request: Request,
    todo_id: str,
    task: Optional[str] = Form(None),
    completed: Optional[str] = Form(None),
    repo: Repository = Depends(get_repo),
) -> HTMLResponse:
    """
    Partially update a todo and return its refreshed item fragment.

    The completed field is a checkbox toggle: it only counts as supplied when
    present in the form. Unknown ids render a "Todo not found" error.
    """
    todo_id = todo_id.strip()
    if not todo_id:
        return _render_error(request, "Todo ID is required")

    try:
        payload = TodoUpdate.from_form(task, completed)
    except ValidationError as exc:
        return _render_error(request, first_error_message(exc))

    try:
        found = repo.update(todo_id, payload)
        todo = repo.get(todo_id) if found else None
    except StoreError:
        logger.exception("Error updating todo %s", todo_id)
        return _render_error(request, "Failed to update todo")

    if todo is None:
        return _render_error(request, "Todo not found")
    return templates.TemplateResponse(request, "partials/todo_item.html", {"todo": todo})


# PUBLIC_INTERFACE
@router.delete("/todos/{todo_id}", summary="Delete Todo")
def delete_todo(
    request: Request,
    todo_id: str,
    repo: Repository = Depends(get_repo),
) -> HTMLResponse:
    """
    Delete a todo. Returns an empty body so the client drops the item itself,
    unless the list became empty: then the empty-state list replaces the
    whole list container.
    """
    todo_id = todo_id.strip()
    if not todo_id:
        return _render_error(request, "Todo ID is required")

    try:
        if not repo.delete(todo_id):
            logger.info("Delete of unknown todo %s treated as no-op", todo_id)
        remaining = repo.list()
    except StoreError:
        logger.exception("Error deleting todo %s", todo_id)
        return _render_error(request, "Failed to delete todo")

    if not remaining:
        return _render_list(
            request,
            [],
            headers={HX_RETARGET: TODO_LIST_TARGET, HX_RESWAP: "outerHTML"},
        )
    return HTMLResponse(content="", status_code=200)
