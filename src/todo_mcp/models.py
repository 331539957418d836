from __future__ import annotations

from typing import Optional, TypedDict


# PUBLIC_INTERFACE
class TodoEntity(TypedDict):
    """
    A lightweight domain model representing a stored Todo item.

    Fields:
    - id: Unique integer identifier, assigned by the store and never reused
    - description: Optional free text
    - created_date: RFC3339 timestamp text, stored exactly as supplied
    """

    id: int
    description: Optional[str]
    created_date: str
