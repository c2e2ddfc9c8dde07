from __future__ import annotations

from datetime import datetime
from typing import TypedDict


# PUBLIC_INTERFACE
class TodoEntity(TypedDict):
    """
    A Todo record as read back from the document store.

    Fields:
    - id: identifier assigned by the store on insert (stringified ObjectId)
    - task: free text, may be empty
    - user: owner name, 'anonymous' when not supplied
    - completed: Boolean completion flag
    - created_at: creation timestamp set by the service
    """

    id: str
    task: str
    user: str
    completed: bool
    created_at: datetime
