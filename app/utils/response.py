# app/utils/response.py

from typing import TypeVar, Generic, Optional, Dict, Any
from pydantic import BaseModel

T = TypeVar("T")


def success_response(message: str, data: Optional[T] = None, code: int = 200) -> Dict[str, Any]:
    return {
        "code": code,
        "message": message,
        "data": data,
    }


class APIResponse(BaseModel, Generic[T]):
    code: int = 200
    message: str
    data: Optional[T] = None
