from typing import Optional

from fastapi import Header

from config import DEFAULT_USER_ID
from services.suggestion_service import SuggestionAdapter

_adapter: Optional[SuggestionAdapter] = None


def get_user_id(x_user_id: Optional[str] = Header(default=None)) -> str:
    # Authentication lives outside this service; callers just name the user.
    return x_user_id or DEFAULT_USER_ID


def get_suggestion_adapter() -> SuggestionAdapter:
    global _adapter
    if _adapter is None:
        _adapter = SuggestionAdapter()
    return _adapter
