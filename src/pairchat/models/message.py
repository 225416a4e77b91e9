"""
Chat message model: one row of GET /chat/messages/{chatRoomId}.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field, model_validator


class Message(BaseModel):
    id: str
    user_id: str = ""
    text: str = Field(default="", alias="message")
    created_at: datetime
    author_username: Optional[str] = None

    model_config = {"frozen": True, "populate_by_name": True}

    @model_validator(mode="before")
    @classmethod
    def _flatten_profile(cls, data: Any) -> Any:
        # The backend joins the author's profile as {"profiles": {"username": ...}}
        if isinstance(data, dict) and "profiles" in data:
            data = dict(data)
            profile = data.pop("profiles") or {}
            if isinstance(profile, dict) and "author_username" not in data:
                data["author_username"] = profile.get("username")
        return data

    def is_from(self, user_id: Optional[str]) -> bool:
        return user_id is not None and self.user_id == user_id
