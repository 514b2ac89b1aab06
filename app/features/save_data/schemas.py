"""
Pydantic schemas for the JSON blob store endpoint.
"""
from typing import Any, Dict, List
from pydantic import BaseModel

from app.core.entities import EntityKind


class SaveDataRequest(BaseModel):
    type: EntityKind
    data: List[Dict[str, Any]]


class SaveDataResponse(BaseModel):
    success: bool
    message: str
    count: int


class LoadDataResponse(BaseModel):
    success: bool
    data: List[Dict[str, Any]]
    count: int
