import logging
from typing import Dict, Type
import httpx
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
from app.db.session import create_engine, create_session_factory
from app.core.config import settings
from app.api.router import router
from app.services.exceptions import (
    ServiceException,
    InvalidRequestError,
    UnsupportedServiceError,
    AuthenticationError,
    UserNotFound,
    NotFoundError,
    InsufficientCreditsError,
    InvalidAmountError,
    NoSupportedPlatforms,
    ConfigurationError,
    CredentialProbeError
)
from app.middleware import AuthenticationMiddleware
from app.schemas.common import JsonFaildResponse

@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
    )

    # --- [关键] 数据库引擎与出站 HTTP 客户端的生命周期 ---
    # 两者都只在这里创建一次，经由 AppContext 注入到各个服务
    logging.info("Connecting to database...")
    engine = create_engine(settings.DATABASE_URL)
    app.state.session_factory = create_session_factory(engine)
    app.state.http_client = httpx.AsyncClient(
        timeout=httpx.Timeout(settings.PUBLISH_TIMEOUT_SECONDS, connect=10.0)
    )

    yield

    # --- 清理 ---
    logging.info("Closing HTTP client and database connections...")
    await app.state.http_client.aclose()
    await engine.dispose()

app = FastAPI(
    title="LinkedIn Automation Backend",
    lifespan=lifespan
)

app.add_middleware(AuthenticationMiddleware)

#设置允许访问的域名
origins = ["*"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,  #设置允许的origins来源
    allow_credentials=True,
    allow_methods=["*"],  # 设置允许跨域的http方法，比如 get、post、put等。
    allow_headers=["*"])  #允许跨域的headers，可以用来鉴别来源等作用。

app.include_router(router)


def _fail(status_code: int, message: str, data=None, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(JsonFaildResponse(message=message, data=data)),
        headers=headers,
    )

# 服务层异常 → HTTP 状态码；按 MRO 查找，未列出的子类回落到 400
SERVICE_EXCEPTION_STATUS: Dict[Type[ServiceException], int] = {
    InvalidRequestError: status.HTTP_400_BAD_REQUEST,
    UnsupportedServiceError: status.HTTP_400_BAD_REQUEST,
    AuthenticationError: status.HTTP_401_UNAUTHORIZED,
    InsufficientCreditsError: status.HTTP_402_PAYMENT_REQUIRED,
    UserNotFound: status.HTTP_404_NOT_FOUND,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    InvalidAmountError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    NoSupportedPlatforms: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ConfigurationError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    CredentialProbeError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

def status_for_service_exception(exc: ServiceException) -> int:
    for cls in type(exc).__mro__:
        if cls in SERVICE_EXCEPTION_STATUS:
            return SERVICE_EXCEPTION_STATUS[cls]
    return status.HTTP_400_BAD_REQUEST

@app.exception_handler(CredentialProbeError)
async def credential_probe_exception_handler(request: Request, exc: CredentialProbeError):
    """
    单个密钥测试失败：附带上游错误和排查建议。
    """
    logging.warning(f"[API] {request.url.path}: {exc.message}")
    return _fail(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        exc.message,
        data={"suggestion": exc.suggestion, "statusCode": exc.status_code},
    )

@app.exception_handler(ServiceException)
async def service_exception_handler(request: Request, exc: ServiceException):
    # 处理所有来自服务层的、可预期的业务逻辑错误
    status_code = status_for_service_exception(exc)
    if status_code >= 500:
        logging.error(f"[API] {request.url.path}: {exc.__class__.__name__}: {exc.message}")
    else:
        logging.info(f"[API] {request.url.path}: {exc.__class__.__name__}: {exc.message}")
    return _fail(status_code, exc.message)

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return _fail(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "Request validation failed",
        data=jsonable_encoder(exc.errors()),
    )

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    # 重写 FastAPI 默认的 HTTPException 处理器，以匹配我们的响应格式 (包括 404/405)
    return _fail(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))

@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    # 这个处理器只处理真正未预料到的服务器内部错误
    logging.error(f"[API] Unhandled error on {request.url.path}: {exc}", exc_info=exc)
    return _fail(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal Server Error")
