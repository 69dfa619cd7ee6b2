"""
Pydantic models for task-related requests and responses.
"""
from datetime import datetime
from typing import Optional, Dict, Any
from pydantic import BaseModel, ConfigDict, Field, StrictBool, field_validator


class TaskCreate(BaseModel):
    """Request model for creating a task."""
    model_config = ConfigDict(extra="forbid")

    title: str = Field(..., description="Task title", min_length=1)
    description: Optional[str] = Field(None, description="Optional description (null when omitted)")
    completed: StrictBool = Field(False, description="Initial completion state")

    @field_validator('title')
    @classmethod
    def validate_not_empty_or_whitespace(cls, v: str) -> str:
        """Validate that the title is not empty or only whitespace."""
        if not v or not v.strip():
            raise ValueError("Field cannot be empty or contain only whitespace")
        return v.strip()


class TaskUpdate(BaseModel):
    """
    Request model for a partial task update.

    Fields the caller leaves out are not part of ``model_fields_set`` and are
    never written. A field sent as null is present: for ``description`` that
    clears the stored value, for ``title`` and ``completed`` it is rejected.
    """
    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = Field(None, description="Replacement title")
    description: Optional[str] = Field(None, description="Replacement description, null to clear")
    completed: Optional[StrictBool] = Field(None, description="Replacement completion state")

    @field_validator('title')
    @classmethod
    def validate_title(cls, v: Optional[str]) -> str:
        """An explicitly supplied title must be a non-blank string."""
        if v is None:
            raise ValueError("title cannot be null")
        if not v.strip():
            raise ValueError("Field cannot be empty or contain only whitespace")
        return v.strip()

    @field_validator('completed')
    @classmethod
    def validate_completed(cls, v: Optional[bool]) -> bool:
        """An explicitly supplied completion flag must be a boolean."""
        if v is None:
            raise ValueError("completed cannot be null")
        return v

    def changes(self) -> Dict[str, Any]:
        """Mapping of only the fields the caller supplied to their new values."""
        return self.model_dump(exclude_unset=True)

    def is_set(self, field: str) -> bool:
        """Whether the caller mentioned ``field`` at all (null counts as mentioned)."""
        return field in self.model_fields_set


class TaskResponse(BaseModel):
    """Task response model."""
    id: int
    title: str
    description: Optional[str]
    completed: bool
    created_at: datetime
    updated_at: datetime


class DeleteTaskResponse(BaseModel):
    """Result of a delete request."""
    success: bool
