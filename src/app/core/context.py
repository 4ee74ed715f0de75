# src/app/core/context.py

from pydantic import BaseModel, ConfigDict
from typing import Optional
import httpx

from app.api.dependencies.authentication import AuthContext
from sqlalchemy.ext.asyncio import async_sessionmaker
from app.services.exceptions import AuthenticationError

class AppContext(BaseModel):
    """
    Defines the typed context for service layer operations: everything a
    service may depend on is injected here rather than read from module globals.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    # 会话工厂：服务按需开启各自的短事务 (unit_of_work)
    session_factory: async_sessionmaker

    # 进程内共享的出站 HTTP 客户端
    http_client: httpx.AsyncClient

    # 对于需要认证的路由，它将是一个 AuthContext 实例；对于公共路由，它将是 None。
    auth: Optional[AuthContext] = None

    @property
    def actor_id(self) -> str:
        if not self.auth:
            raise AuthenticationError("An authenticated user (actor) is required for this operation.")
        return self.auth.user_id
