# src/app/services/credential/validation_service.py

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from app.core.config import settings
from app.core.context import AppContext
from app.models import ServiceName
from app.engine.verification import (
    CredentialVerifier,
    CredentialPayload,
    ValidationOutcome,
    get_probe_spec,
    list_probe_specs
)
from app.schemas.credential.api_key_schemas import (
    ValidateAllKeysResponse,
    ApiKeyTestResponse,
    FailedService,
    ValidationSummary,
    VerifiedKeyRead,
    KeyManualRead,
    KeyManualsResponse,
    LiveTestResult,
    LiveTestResponse
)
from app.services.credential.credential_store import CredentialStore
from app.services.exceptions import InvalidRequestError, UnsupportedServiceError, CredentialProbeError

# 兼容旧客户端使用的服务名
SERVICE_ALIASES: Dict[str, ServiceName] = {
    "phantombuster": ServiceName.PHANTOM,
    "uploadpost": ServiceName.UPLOAD_POST,
}

SECRET_FIELDS = ("key", "apiKey")


def resolve_service(name: str) -> Optional[ServiceName]:
    """Maps a client-supplied service name to a ServiceName, or None if unknown."""
    if not isinstance(name, str):
        return None
    try:
        return ServiceName(name)
    except ValueError:
        return SERVICE_ALIASES.get(name.lower())


def to_credential_payload(entry: Any) -> CredentialPayload:
    """
    Normalizes one `keys` entry: either a bare secret string, or an object
    carrying the secret under `key` plus auxiliary params.
    """
    if isinstance(entry, str):
        return CredentialPayload(secret=entry)
    if isinstance(entry, dict):
        secret = next((entry[f] for f in SECRET_FIELDS if entry.get(f)), "")
        if not isinstance(secret, str):
            raise ValueError("Credential 'key' must be a string.")
        aux_params = {k: v for k, v in entry.items() if k not in SECRET_FIELDS}
        return CredentialPayload(secret=secret, aux_params=aux_params)
    raise ValueError("Credential must be a string or an object with a 'key' field.")


def _supported_services_hint() -> str:
    return f"Supported services: {', '.join(s.value for s in ServiceName)}"


def build_key_manuals() -> KeyManualsResponse:
    """
    Setup guides for every verifiable service; testEndpoint is the URL the
    registered probe calls.
    """
    manuals: Dict[str, KeyManualRead] = {}
    for spec in list_probe_specs():
        probe = spec.build_request(CredentialPayload(secret="YOUR_API_KEY"))
        manuals[spec.service.value] = KeyManualRead(
            **spec.manual.model_dump(),
            service=spec.service.value,
            suggestion=spec.suggestion,
            test_endpoint=probe.url
        )
    return KeyManualsResponse(
        manuals=manuals,
        total_services=len(manuals),
        last_updated=datetime.now(timezone.utc)
    )


class KeyValidationService:
    """
    Validates a user's third-party API keys concurrently and persists the
    ones that work.
    """
    def __init__(self, context: AppContext):
        self.context = context
        self.verifier = CredentialVerifier(context.http_client, timeout=settings.VALIDATION_TIMEOUT_SECONDS)
        self.store = CredentialStore(context.session_factory)

    async def validate_all(self, user_id: Optional[str], keys: Optional[Dict[str, Any]]) -> ValidateAllKeysResponse:
        if not user_id or not str(user_id).strip() or not keys:
            raise InvalidRequestError("Missing userId or keys in request body")

        # 与旧接口一致：值为空的条目视为未提供；别名指向同一服务时只保留第一个
        entries: List[Tuple[str, Any]] = []
        seen: set = set()
        for name, entry in keys.items():
            if entry in (None, "", {}):
                continue
            service = resolve_service(name)
            if service is not None:
                if service in seen:
                    logging.warning(f"[KeyValidationService] Duplicate entry '{name}' for service '{service.value}' ignored.")
                    continue
                seen.add(service)
            entries.append((name, entry))
        if not entries:
            raise InvalidRequestError("Missing userId or keys in request body")

        logging.info(f"[KeyValidationService] Starting validation of {len(entries)} keys for user {user_id}.")

        # 每个任务都自行返回 outcome，gather 只是等待全部完成的屏障
        settled = await asyncio.gather(
            *(self._validate_entry(name, entry) for name, entry in entries),
            return_exceptions=True
        )

        results: List[ValidationOutcome] = []
        verified: List[str] = []
        failed: List[FailedService] = []
        to_store: List[Tuple[ServiceName, CredentialPayload]] = []

        for (name, _), item in zip(entries, settled):
            if isinstance(item, BaseException):
                logging.error(f"[KeyValidationService] Validation task for '{name}' raised: {item!r}")
                item = (ValidationOutcome(service=name, valid=False, error=str(item) or "Unknown error"), None, None)
            outcome, service, payload = item

            results.append(outcome)
            if outcome.valid:
                verified.append(outcome.service)
                to_store.append((service, payload))
            else:
                failed.append(FailedService(
                    service=outcome.service,
                    error=outcome.error or "Unknown error",
                    suggestion=outcome.suggestion
                ))
                logging.info(f"[KeyValidationService] '{outcome.service}' failed for user {user_id}: {outcome.error}")

        stored = False
        if to_store:
            try:
                await self.store.save_verified(str(user_id), to_store)
                stored = True
            except Exception as e:
                # 存储失败不影响已验证结果
                logging.error(f"[KeyValidationService] Failed to store verified keys for user {user_id}: {e}", exc_info=True)

        logging.info(f"[KeyValidationService] Validation complete for user {user_id}: {len(verified)} verified, {len(failed)} failed.")

        return ValidateAllKeysResponse(
            success=True,
            message=f"Validated {len(results)} API keys: {len(verified)} verified, {len(failed)} failed.",
            verified=verified,
            failed=failed,
            stored_in_supabase=stored,
            results=results,
            summary=ValidationSummary(total=len(results), verified=len(verified), failed=len(failed))
        )

    async def _validate_entry(
        self, name: str, entry: Any
    ) -> Tuple[ValidationOutcome, Optional[ServiceName], Optional[CredentialPayload]]:
        service = resolve_service(name)
        if service is None:
            return ValidationOutcome(
                service=name, valid=False, error="Unsupported service", suggestion=_supported_services_hint()
            ), None, None

        try:
            payload = to_credential_payload(entry)
        except ValueError as e:
            return ValidationOutcome(
                service=service.value, valid=False, error=str(e), suggestion=get_probe_spec(service).suggestion
            ), service, None

        outcome = await self.verifier.verify(service, payload)
        return outcome, service, payload

    async def test_single_key(self, service_name: Optional[str], api_key: Optional[str], aux_params: Dict[str, Any]) -> ApiKeyTestResponse:
        """Probes one key without persisting it."""
        if not service_name or not api_key:
            raise InvalidRequestError("Missing required fields: both service and apiKey are required")

        service = resolve_service(service_name)
        if service is None:
            raise UnsupportedServiceError(f'Service "{service_name}" is not supported. {_supported_services_hint()}')

        payload = CredentialPayload(secret=api_key, aux_params=aux_params)
        logging.info(f"[KeyValidationService] Testing single '{service.value}' key {payload.masked_secret}.")
        outcome = await self.verifier.verify(service, payload)

        if not outcome.valid:
            raise CredentialProbeError(
                f"Failed to test API key: {outcome.error}",
                suggestion=outcome.suggestion,
                status_code=outcome.status_code
            )

        return ApiKeyTestResponse(
            message=f"{service.value} API key is valid and working",
            service=service.value,
            valid=True,
            data=outcome.response_body,
            diagnostic_command=outcome.diagnostic_command
        )

    async def list_verified_keys(self, user_id: str) -> List[VerifiedKeyRead]:
        return await self.store.list_for_user(user_id)

    async def live_test(
        self, service_name: str, api_key: Optional[str], aux_params: Dict[str, Any], user_id: Optional[str] = None
    ) -> LiveTestResponse:
        """
        Probes one key and reports the vendor's raw answer with its round-trip time.
        An invalid key is a normal result here (success=False inside `result`), not an error.
        """
        if not service_name or not api_key:
            raise InvalidRequestError("Missing service or apiKey parameter")

        service = resolve_service(service_name)
        if service is None:
            raise UnsupportedServiceError(f"Unsupported service: {service_name}. {_supported_services_hint()}")

        logging.info(f"[KeyValidationService] Live testing '{service.value}' for user {user_id or '-'}.")
        outcome = await self.verifier.verify(service, CredentialPayload(secret=api_key, aux_params=aux_params))

        return LiveTestResponse(
            service=service.value,
            result=LiveTestResult(
                success=outcome.valid,
                status_code=outcome.status_code,
                response_time_ms=outcome.response_time_ms,
                data=outcome.response_body,
                error=outcome.error,
                suggestion=outcome.suggestion,
                diagnostic_command=outcome.diagnostic_command
            ),
            timestamp=datetime.now(timezone.utc)
        )
