# gallery/schemas/assistant/assistant.py
from typing import Any, Optional

from pydantic import BaseModel


class AssistantQuery(BaseModel):
    # Left untyped so a non-string query gets the endpoint's own 400
    query: Any = None
    includeImage: bool = False


class AssistantReply(BaseModel):
    text: str
    imageUrl: Optional[str] = None
