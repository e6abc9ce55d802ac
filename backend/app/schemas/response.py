# backend/app/schemas/response.py
from pydantic import BaseModel
from typing import Generic, TypeVar, Optional

T = TypeVar('T')
class StandardResponse(BaseModel, Generic[T]):
    """标准响应模型

    所有接口统一的响应外壳。

    Attributes:
        code: 业务状态码，默认200
        message: 响应消息，默认'success'
        data: 数据载荷
    """
    code: int = 200
    message: str = 'success'
    data: Optional[T] = None
