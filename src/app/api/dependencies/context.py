# src/app/api/dependencies/context.py

import logging
from fastapi import Depends, HTTPException, status, Request
from app.core.context import AppContext
from app.api.dependencies.authentication import get_auth

# --- 步骤1: 定义一个纯粹的基础上下文构建器 ---
async def get_base_context(request: Request) -> AppContext:
    """
    [纯粹构建器]
    只负责把 lifespan 中创建的全局依赖装进 AppContext。
    它的 'auth' 字段总是 None。
    """
    session_factory = getattr(request.app.state, "session_factory", None)
    http_client = getattr(request.app.state, "http_client", None)
    if session_factory is None or http_client is None:
        logging.critical("Application state is not initialized! Halting request.")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service is not initialized. Please try again later."
        )
    return AppContext(session_factory=session_factory, http_client=http_client, auth=None)

# --- 步骤2: 定义强制认证的上下文 ---
async def require_auth_context(
    request: Request,
    context: AppContext = Depends(get_base_context),
) -> AppContext:
    """
    [强制认证]
    如果 get_auth 抛出 HTTPException (401)，请求将在此被中断。
    """
    context.auth = await get_auth(request)
    return context

# 用于公共路由
PublicContextDep = Depends(get_base_context)
# 用于需要强制认证的私有路由
AuthContextDep = Depends(require_auth_context)
