from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

# Values a checkbox-style form field may carry when the box is ticked
_TRUTHY_CHECKBOX_VALUES = {"on", "true", "1", "yes"}


def parse_checkbox(value: Optional[str]) -> Optional[bool]:
    """
    Interpret a checkbox-style form value.

    The field being absent means "not supplied" (None). When present, 'on',
    'true', '1' and 'yes' (any case) mean checked; anything else is unchecked.
    """
    if value is None:
        return None
    return value.strip().lower() in _TRUTHY_CHECKBOX_VALUES


# PUBLIC_INTERFACE
def first_error_message(exc: ValidationError) -> str:
    """Return the user-facing message of the first validation error in exc."""
    errors = exc.errors()
    if not errors:
        return "Invalid input"
    first = errors[0]
    ctx_error = (first.get("ctx") or {}).get("error")
    if ctx_error is not None:
        return str(ctx_error)
    return str(first.get("msg", "Invalid input"))


# PUBLIC_INTERFACE
class TodoCreate(BaseModel):
    """
    Schema for creating a new Todo item from the add-todo form.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "task": "Buy milk",
            }
        }
    )

    task: str = Field(..., description="Task text for the todo item", min_length=1)

    @field_validator("task", mode="before")
    @classmethod
    def validate_task(cls, v: Any) -> str:
        """
        Strip whitespace and require a non-empty task.
        """
        if v is None or not isinstance(v, str) or not v.strip():
            raise ValueError("Task is required")
        return v.strip()


# PUBLIC_INTERFACE
class TodoUpdate(BaseModel):
    """
    Schema for updating an existing Todo item.
    All fields are optional; only provided fields will be updated, but at
    least one of them has to be supplied.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "task": "Buy oat milk",
                "completed": True,
            }
        }
    )

    task: Optional[str] = Field(default=None, description="New task text")
    completed: Optional[bool] = Field(default=None, description="Completion status flag")

    @field_validator("task")
    @classmethod
    def validate_task(cls, v: Optional[str]) -> Optional[str]:
        """
        If task is provided, strip whitespace and reject a blank result.
        """
        if v is None:
            return v
        s = v.strip()
        if not s:
            raise ValueError("Task is required")
        return s

    @model_validator(mode="after")
    def require_some_field(self) -> "TodoUpdate":
        if self.task is None and self.completed is None:
            raise ValueError("No updates provided")
        return self

    @classmethod
    def from_form(cls, task: Optional[str], completed: Optional[str]) -> "TodoUpdate":
        """
        Build an update from raw form values.

        An empty task string counts as not supplied; the completed field is a
        checkbox toggle whose presence alone marks it as supplied.
        """
        return cls(
            task=task if task else None,
            completed=parse_checkbox(completed),
        )

    def changes(self) -> Dict[str, Any]:
        """Return only the supplied fields, ready to be written to the store."""
        out: Dict[str, Any] = {}
        if self.task is not None:
            out["task"] = self.task
        if self.completed is not None:
            out["completed"] = self.completed
        return out
