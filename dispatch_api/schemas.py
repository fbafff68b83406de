from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class FilterChangeModel(BaseModel):
    active_filter: str = "all"


class SearchChangeModel(BaseModel):
    search_term: str = ""


class SessionStatusResponse(BaseModel):
    status: str
    error: Optional[str] = None
    active_filter: str = "all"
    search_term: str = ""
