# src/app/schemas/credential/api_key_schemas.py

from datetime import datetime
from pydantic import BaseModel, Field, ConfigDict
from pydantic.alias_generators import to_camel
from typing import Optional, List, Dict, Any

from app.engine.verification import ValidationOutcome, KeyManual

# 对外 JSON 统一使用 camelCase
class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

# --- Input Schemas ---

class ValidateAllKeysRequest(CamelModel):
    # 两个字段都声明为可选：缺失时由服务层返回 400，而不是 422
    user_id: Optional[str] = Field(None, description="The user the verified keys belong to.")
    keys: Optional[Dict[str, Any]] = Field(
        None,
        description="service → secret string, or an object {key, ...auxiliary params}."
    )

class ApiKeyTestRequest(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    service: Optional[str] = None
    api_key: Optional[str] = None

    @property
    def aux_params(self) -> Dict[str, Any]:
        """Any additional body fields (senderEmail, phantomId, model, ...)."""
        return dict(self.model_extra or {})

# --- Output Schemas ---

class FailedService(CamelModel):
    service: str
    error: str
    suggestion: Optional[str] = None

class ValidationSummary(CamelModel):
    total: int
    verified: int
    failed: int

class ValidateAllKeysResponse(CamelModel):
    success: bool = True
    message: str
    verified: List[str]
    failed: List[FailedService]
    stored_in_supabase: bool
    results: List[ValidationOutcome]
    summary: ValidationSummary

class ApiKeyTestResponse(CamelModel):
    status: str = "success"
    message: str
    service: str
    valid: bool
    data: Optional[Any] = None
    diagnostic_command: Optional[str] = None

class VerifiedKeyRead(CamelModel):
    service: str
    status: str
    tested_at: Optional[datetime] = None
    # 只暴露非敏感信息，密钥本身永不返回
    extra_params: Optional[Dict[str, Any]] = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

class KeyManualRead(KeyManual):
    """A key manual plus the live probe facts the UI shows next to it."""
    service: str
    suggestion: str
    test_endpoint: str

class KeyManualsResponse(CamelModel):
    success: bool = True
    manuals: Dict[str, KeyManualRead]
    total_services: int
    last_updated: datetime

class LiveTestResult(CamelModel):
    success: bool
    status_code: Optional[int] = None
    response_time_ms: Optional[int] = None
    data: Optional[Any] = None
    error: Optional[str] = None
    suggestion: Optional[str] = None
    diagnostic_command: Optional[str] = None

class LiveTestResponse(CamelModel):
    success: bool = True
    service: str
    result: LiveTestResult
    timestamp: datetime
