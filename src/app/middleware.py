# app/middleware.py

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# 中间件只负责从请求中提取凭证，不做校验，也不访问数据库
def _extract_bearer_token(request: Request) -> None:
    """Places the token of an 'Authorization: Bearer <token>' header into request.state."""
    header = request.headers.get("Authorization")
    if not header:
        return
    scheme, _, token = header.partition(" ")
    if scheme.lower() == "bearer" and token.strip():
        setattr(request.state, "token", token.strip())


class AuthenticationMiddleware(BaseHTTPMiddleware):
    AUTH_EXTRACTORS = [
        _extract_bearer_token,
    ]

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        # 为每个请求重置状态
        setattr(request.state, "token", None)

        for extractor in self.AUTH_EXTRACTORS:
            extractor(request)

        return await call_next(request)
