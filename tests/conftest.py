# tests/conftest.py

import os

# [关键] Settings 在导入 app 时实例化，测试环境变量必须先于任何 app 导入设置
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-jwt-signing")
os.environ.setdefault("CREDENTIAL_ENCRYPTION_KEY", "AAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAA=")
os.environ.setdefault("UPLOAD_POST_API_KEY", "test-upload-post-key")
os.environ.setdefault("APP_ENV", "test")

import asyncio
import inspect
import uuid
from dataclasses import dataclass, field
from typing import AsyncGenerator, Callable, List, Optional, Tuple, Any
import pytest
import httpx
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlalchemy.pool import StaticPool

from app.main import app
from app.core.context import AppContext
from app.core.security import create_access_token
from app.db.base import Base
from app.db.session import create_engine, create_session_factory, unit_of_work, SessionFactory
from app.dao.identity.profile_dao import ProfileDao
from app.dao.billing.api_usage_dao import ApiUsageDao
from app.models import Profile, PlanTier, ApiUsage

# ==============================================================================
# 1. 数据库 Fixtures
# ==============================================================================

@pytest.fixture(scope="function")
async def db_engine() -> AsyncGenerator[AsyncEngine, None]:
    """
    每个测试一个全新的内存 SQLite 数据库。
    StaticPool 保证所有会话共享同一个连接，否则每个连接都会看到一个空库。
    """
    engine = create_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()

@pytest.fixture(scope="function")
def session_factory(db_engine: AsyncEngine) -> SessionFactory:
    return create_session_factory(db_engine)

@pytest.fixture(scope="function")
async def file_db_engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """
    基于临时文件的 SQLite 数据库，使用默认连接池：每个会话拿到自己的连接，
    因此可以真正并发地运行多个事务 (内存库 + StaticPool 做不到)。
    """
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()

@pytest.fixture(scope="function")
def file_session_factory(file_db_engine: AsyncEngine) -> SessionFactory:
    return create_session_factory(file_db_engine)

# ==============================================================================
# 2. 第三方 API 替身
# ==============================================================================

@dataclass
class VendorStub:
    """
    A programmable stand-in for every third-party HTTP API.
    Routes are matched by method and URL prefix (query string ignored); the
    most recently registered match wins. Unmatched requests get a 404.
    """
    routes: List[Tuple[str, str, Any]] = field(default_factory=list)
    calls: List[httpx.Request] = field(default_factory=list)

    def on(self, method: str, url_prefix: str, response: Any) -> "VendorStub":
        """`response` is an httpx.Response, or a (possibly async) callable taking the request."""
        self.routes.insert(0, (method.upper(), url_prefix, response))
        return self

    def calls_to(self, url_prefix: str) -> List[httpx.Request]:
        return [r for r in self.calls if self._base(r).startswith(url_prefix)]

    @staticmethod
    def _base(request: httpx.Request) -> str:
        return str(request.url.copy_with(query=None))

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        for method, prefix, response in self.routes:
            if request.method == method and self._base(request).startswith(prefix):
                if callable(response):
                    response = response(request)
                    if inspect.isawaitable(response):
                        response = await response
                return response
        return httpx.Response(404, json={"error": f"No stub for {request.method} {request.url}"})


@pytest.fixture(scope="function")
def vendor() -> VendorStub:
    return VendorStub()

@pytest.fixture(scope="function")
async def http_client(vendor: VendorStub) -> AsyncGenerator[httpx.AsyncClient, None]:
    async with httpx.AsyncClient(transport=httpx.MockTransport(vendor.handler)) as client:
        yield client

@pytest.fixture
def slow():
    """Builds a stub that answers only after `delay` seconds."""
    def _slow(delay: float, response: Optional[httpx.Response] = None) -> Callable:
        async def _respond(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(delay)
            return response or httpx.Response(200, json={})
        return _respond
    return _slow

# ==============================================================================
# 3. 核心 AppContext 和 Client Fixtures
# ==============================================================================

@pytest.fixture(scope="function")
def app_context(session_factory: SessionFactory, http_client: httpx.AsyncClient) -> AppContext:
    return AppContext(session_factory=session_factory, http_client=http_client)

@pytest.fixture(scope="function")
async def client(
    session_factory: SessionFactory,
    http_client: httpx.AsyncClient
) -> AsyncGenerator[AsyncClient, None]:
    """
    模拟 lifespan 在 app.state 上设置的全局依赖，然后通过 ASGITransport 在进程内驱动应用。
    """
    app.state.session_factory = session_factory
    app.state.http_client = http_client

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c

    # 删除 app.state 上的属性以保持隔离性
    del app.state.session_factory
    del app.state.http_client

# ==============================================================================
# 4. 可复用的工厂 Fixtures (Profile, Auth)
# ==============================================================================

@pytest.fixture(scope="function")
def profile_factory(session_factory: SessionFactory):
    """一个工厂fixture，用于直接在数据库中创建 Credit Account。"""
    async def _factory(
        plan: PlanTier = PlanTier.FREE,
        credits: int = 0,
        user_id: Optional[str] = None,
        email: Optional[str] = None
    ) -> Profile:
        user_id = user_id or f"user-{uuid.uuid4()}"
        async with unit_of_work(session_factory) as session:
            return await ProfileDao(session).add(Profile(
                id=user_id,
                email=email or f"{user_id}@example.com",
                plan=plan,
                credits=credits
            ))
    return _factory

@pytest.fixture(scope="function")
def auth_headers_factory():
    """一个工厂fixture，用于为给定的用户 id 签发认证头。"""
    def _factory(user_id: str) -> dict:
        token = create_access_token(subject=user_id)
        return {"Authorization": f"Bearer {token}"}
    return _factory

@pytest.fixture
async def free_user(profile_factory: Callable) -> Profile:
    """FREE 套餐，余额 10。"""
    return await profile_factory(plan=PlanTier.FREE, credits=10)

@pytest.fixture
async def creator_user(profile_factory: Callable) -> Profile:
    """CREATOR 套餐 (不限额度)，余额字段为 0。"""
    return await profile_factory(plan=PlanTier.CREATOR, credits=0)

@pytest.fixture(scope="function")
def get_profile(session_factory: SessionFactory):
    """Reads a fresh copy of a profile in its own transaction."""
    async def _get(user_id: str) -> Optional[Profile]:
        async with unit_of_work(session_factory) as session:
            return await ProfileDao(session).get_by_id(user_id)
    return _get

@pytest.fixture(scope="function")
def list_usage(session_factory: SessionFactory):
    """Returns the usage audit entries of a user in insertion order."""
    async def _list(user_id: str) -> List[ApiUsage]:
        async with unit_of_work(session_factory) as session:
            return await ApiUsageDao(session).get_list(where={"user_id": user_id}, order=[ApiUsage.id.asc()])
    return _list
