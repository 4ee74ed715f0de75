# src/app/engine/verification/base.py

import json
import shlex
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple
from urllib.parse import urlencode
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.core.encryption import mask_secret
from app.models import ServiceName

# --- 数据模型 (Data Models) ---

class CredentialPayload(BaseModel):
    """
    One credential as submitted by the caller: the secret plus any auxiliary
    parameters the service needs (e.g. senderEmail for resend, phantomId for phantom).
    Immutable once built.
    """
    model_config = ConfigDict(frozen=True)

    secret: str = Field("", description="The API key/token. Never logged in full.")
    aux_params: Dict[str, Any] = Field(default_factory=dict)

    @property
    def masked_secret(self) -> str:
        return mask_secret(self.secret)

    def aux(self, name: str, default: Any = None) -> Any:
        value = self.aux_params.get(name)
        return value if value not in (None, "") else default


class ValidationOutcome(BaseModel):
    """标准化的单个服务验证结果。只有 valid=True 的结果才会被持久化。"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    service: str
    valid: bool
    error: Optional[str] = None
    suggestion: Optional[str] = None
    status_code: Optional[int] = None
    diagnostic_command: Optional[str] = None
    response_body: Optional[Any] = None
    # 探测请求本身的耗时；本地校验失败 (未发出请求) 时为 None
    response_time_ms: Optional[int] = None


class ProbeRequest(BaseModel):
    """A single, side-effect-minimal HTTP request that proves a key works."""
    model_config = ConfigDict(frozen=True)

    method: str = "GET"
    url: str
    headers: Dict[str, str] = Field(default_factory=dict)
    params: Dict[str, str] = Field(default_factory=dict)
    json_body: Optional[Dict[str, Any]] = None

    def to_curl(self, secret: str) -> str:
        """Builds a reproduction command with the secret masked."""
        url = self.url
        if self.params:
            url = f"{url}?{urlencode(self.params)}"
        parts = ["curl", "-X", self.method, shlex.quote(url)]
        for name, value in self.headers.items():
            parts += ["-H", shlex.quote(f"{name}: {value}")]
        if self.json_body is not None:
            parts += ["-H", shlex.quote("Content-Type: application/json"), "-d", shlex.quote(json.dumps(self.json_body))]
        command = " ".join(parts)
        if secret:
            command = command.replace(secret, mask_secret(secret))
        return command


# --- 密钥获取手册 ---

class ManualField(BaseModel):
    """An auxiliary parameter the service needs besides the key itself."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    name: str
    description: str
    required: bool = False
    example: Optional[str] = None


class KeyManual(BaseModel):
    """
    How a user obtains a working key for one service: prerequisites, the
    steps in the vendor dashboard, and what a valid key looks like.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    name: str
    description: str
    requirements: List[str] = Field(default_factory=list)
    steps: List[str] = Field(default_factory=list)
    key_format: str
    docs_url: str
    pricing: Optional[str] = None
    extra_fields: List[ManualField] = Field(default_factory=list)
    notes: List[str] = Field(default_factory=list)


# 返回 None 表示响应体满足成功条件，否则返回失败原因
ResponseCheck = Callable[[Any], Optional[str]]


def accept_any(body: Any) -> Optional[str]:
    return None


@dataclass(frozen=True)
class ProbeSpec:
    """
    Descriptor of one verifiable service: how to build its probe, how to judge
    a 2xx body, and what to tell the user when it fails.
    """
    service: ServiceName
    build_request: Callable[[CredentialPayload], ProbeRequest]
    suggestion: str
    check: ResponseCheck = accept_any
    aux_fields: Tuple[str, ...] = field(default_factory=tuple)
    manual: Optional[KeyManual] = None


class ProbeNotFoundError(Exception):
    """Raised when no probe is registered for a service name."""
    pass
