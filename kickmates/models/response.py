"""
响应信封与分页
"""

from typing import Generic, TypeVar, Optional
from pydantic import BaseModel, Field


T = TypeVar('T')


class PaginationMeta(BaseModel):
    """分页元数据（讨论帖、成员列表）"""
    page: int = Field(..., description="当前页码，从1开始")
    limit: int = Field(..., description="每页数量")
    total: int = Field(..., description="总条数")
    pages: int = Field(..., description="总页数")

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "PaginationMeta":
        return cls(page=page, limit=limit, total=total, pages=(total + limit - 1) // limit if limit else 0)


class ApiResponse(BaseModel, Generic[T]):
    """
    服务层统一返回值，也是 HTTP 响应信封

    失败时 error 为 {"code": "EVENT_NOT_FOUND", "message": "..."}，
    由路由层 ensure_success 转换为对应的 HTTP 状态码
    """
    success: bool = Field(True, description="是否成功")
    data: Optional[T] = Field(None, description="业务数据")
    message: Optional[str] = Field(None, description="提示信息")
    code: Optional[int] = Field(None, description="HTTP 错误码（仅 500 信封）")
    error: Optional[dict] = Field(None, description="错误码与错误信息")

    class Config:
        json_schema_extra = {
            "example": {
                "success": True,
                "data": {"status": "waiting", "current_players": 10},
                "message": "You have been added to the waiting list"
            }
        }
