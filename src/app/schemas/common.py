# app/schemas/common.py

from pydantic import BaseModel
from typing import Generic, TypeVar, Optional

T = TypeVar('T')  # 定义泛型类型

class JsonResponse(BaseModel, Generic[T]):
    status: str = "success"
    message: str = "success"
    data: T

class JsonFaildResponse(BaseModel, Generic[T]):
    status: str = "fail"
    message: str = "error"
    data: Optional[T] = None

class MsgResponse(BaseModel):
    status: str = "success"
    message: str = "success"
