from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictStr, field_validator


def _string_or_none(value: Any) -> Optional[str]:
    """Optional tool arguments of the wrong type are treated as absent."""
    return value if isinstance(value, str) else None


# PUBLIC_INTERFACE
class TodoCreate(BaseModel):
    """
    Store input for creating a new Todo item.
    The description may be empty; created_date is RFC3339 text kept verbatim.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {"description": "Buy milk", "createdDate": "2024-01-01T00:00:00Z"}
        },
    )

    description: str = Field(..., description="Description of the todo")
    created_date: str = Field(..., alias="createdDate", description="Creation date (RFC3339)")


# PUBLIC_INTERFACE
class TodoUpdate(BaseModel):
    """
    Store input for a partial update.
    All fields are optional; only provided fields will be written.
    """

    model_config = ConfigDict(populate_by_name=True)

    description: Optional[str] = Field(default=None, description="New description")
    created_date: Optional[str] = Field(
        default=None, alias="createdDate", description="New creation date (RFC3339)"
    )

    @field_validator("description")
    @classmethod
    def drop_blank_description(cls, v: Optional[str]) -> Optional[str]:
        """
        A whitespace-only description never overwrites the stored value.
        """
        if v is None or not v.strip():
            return None
        return v


# PUBLIC_INTERFACE
class TodoOut(BaseModel):
    """
    Wire representation of a Todo item as returned by the read_todos tool.
    """

    id: int = Field(..., description="Unique identifier of the todo item")
    description: Optional[str] = Field(default=None, description="Description of the todo")
    created_date: str = Field(
        ..., serialization_alias="createdDate", description="Creation date (RFC3339)"
    )


# Tool argument payloads. Every value arrives as text; ids and dates are
# parsed by the tool dispatcher, not here.


# PUBLIC_INTERFACE
class CreateTodoArgs(BaseModel):
    """Arguments of the create_todo tool."""

    model_config = ConfigDict(populate_by_name=True)

    description: StrictStr
    created_date: StrictStr = Field(..., alias="createdDate")


# PUBLIC_INTERFACE
class ReadTodosArgs(BaseModel):
    """Arguments of the read_todos tool."""

    id: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def ignore_non_string_id(cls, v: Any) -> Optional[str]:
        return _string_or_none(v)


# PUBLIC_INTERFACE
class UpdateTodoArgs(BaseModel):
    """Arguments of the update_todo tool."""

    model_config = ConfigDict(populate_by_name=True)

    id: StrictStr
    description: Optional[str] = None
    created_date: Optional[str] = Field(default=None, alias="createdDate")

    @field_validator("description", "created_date", mode="before")
    @classmethod
    def ignore_non_strings(cls, v: Any) -> Optional[str]:
        return _string_or_none(v)


# PUBLIC_INTERFACE
class DeleteTodoArgs(BaseModel):
    """Arguments of the delete_todo tool."""

    id: StrictStr


# JSON-RPC envelope


# PUBLIC_INTERFACE
class JsonRpcRequest(BaseModel):
    """
    Inbound JSON-RPC envelope. Members of the wrong type make the whole
    request undecodable.
    """

    jsonrpc: Optional[StrictStr] = None
    id: Any = None
    method: Optional[StrictStr] = None
    params: Any = None


# PUBLIC_INTERFACE
class ToolCallParams(BaseModel):
    """params of a tools/call request."""

    name: StrictStr
    arguments: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("arguments", mode="before")
    @classmethod
    def arguments_default(cls, v: Any) -> Dict[str, Any]:
        """
        Anything other than a JSON object is treated as no arguments.
        """
        return v if isinstance(v, dict) else {}


# PUBLIC_INTERFACE
class JsonRpcError(BaseModel):
    """error member of a JSON-RPC response."""

    code: int
    message: str
    data: Optional[Any] = None
