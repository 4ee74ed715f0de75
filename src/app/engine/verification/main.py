# src/app/engine/verification/main.py

import asyncio
import logging
import time
from typing import Any, Dict, List, Optional, Tuple

import httpx

from app.models import ServiceName
from .base import (
    CredentialPayload, ValidationOutcome, ProbeRequest, ProbeSpec, KeyManual,
    ResponseCheck, accept_any, ProbeNotFoundError
)

# --- 探针注册表 ---
_probe_registry: Dict[ServiceName, ProbeSpec] = {}

def register_probe(
    service: ServiceName,
    suggestion: str,
    check: ResponseCheck = accept_any,
    aux_fields: Tuple[str, ...] = (),
    manual: Optional[KeyManual] = None
):
    """一个装饰器，用于将某个服务的探针请求构建函数注册到表中。"""
    def decorator(build_request):
        _probe_registry[service] = ProbeSpec(
            service=service,
            build_request=build_request,
            suggestion=suggestion,
            check=check,
            aux_fields=aux_fields,
            manual=manual
        )
        return build_request
    return decorator

def get_probe_spec(service: ServiceName) -> ProbeSpec:
    spec = _probe_registry.get(service)
    if spec is None:
        raise ProbeNotFoundError(
            f"No probe registered for service '{service.value}'. "
            f"Available services: {[s.value for s in _probe_registry]}"
        )
    return spec

def ensure_registry_complete() -> None:
    """Every ServiceName must have exactly one probe with a key manual; checked once at import."""
    missing = [s.value for s in ServiceName if s not in _probe_registry]
    if missing:
        raise RuntimeError(f"Credential probes missing for services: {missing}")
    without_manual = [s.value for s, spec in _probe_registry.items() if spec.manual is None]
    if without_manual:
        raise RuntimeError(f"Key manuals missing for services: {without_manual}")

def list_probe_specs() -> List[ProbeSpec]:
    """All registered probes in ServiceName declaration order."""
    return [_probe_registry[s] for s in ServiceName if s in _probe_registry]


def _extract_upstream_error(body: Any) -> Optional[str]:
    """Pulls a human-readable message out of the vendor error shapes we know about."""
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str) and error:
            return error
        for key in ("message", "detail", "msg"):
            if body.get(key):
                return str(body[key])
    if isinstance(body, str) and body:
        return body[:500]
    return None


def _parse_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


class CredentialVerifier:
    """
    纯粹的、无状态的凭证探测引擎。
    For one (service, credential) it issues exactly one probe, bounded by a
    fixed timeout, and classifies the result into a ValidationOutcome.
    It never raises past this boundary and never retries.
    """
    def __init__(self, http_client: httpx.AsyncClient, timeout: float = 10.0):
        self.http_client = http_client
        self.timeout = timeout

    async def verify(self, service: ServiceName, payload: CredentialPayload) -> ValidationOutcome:
        spec = get_probe_spec(service)

        if not payload.secret or not payload.secret.strip():
            return ValidationOutcome(
                service=service.value,
                valid=False,
                error="API key is empty.",
                suggestion=spec.suggestion
            )

        request = spec.build_request(payload)
        diagnostic_command = request.to_curl(payload.secret)
        started = time.monotonic()

        def elapsed_ms() -> int:
            return int((time.monotonic() - started) * 1000)

        try:
            # httpx 的 timeout 约束网络阶段，wait_for 给整个调用一个硬上限
            response = await asyncio.wait_for(self._send(request), timeout=self.timeout)
        except asyncio.TimeoutError:
            logging.warning(f"[CredentialVerifier] Probe for '{service.value}' timed out after {self.timeout}s.")
            return self._failure(spec, f"Request timed out after {self.timeout:g} seconds.", diagnostic_command, elapsed_ms())
        except httpx.TimeoutException as e:
            logging.warning(f"[CredentialVerifier] Probe for '{service.value}' timed out: {e!r}")
            return self._failure(spec, f"Request timed out after {self.timeout:g} seconds.", diagnostic_command, elapsed_ms())
        except httpx.RequestError as e:
            logging.warning(f"[CredentialVerifier] Probe for '{service.value}' failed at network level: {e!r}")
            return self._failure(spec, f"Could not reach {service.value}: {e}", diagnostic_command, elapsed_ms())
        except Exception as e:
            logging.error(f"[CredentialVerifier] Unexpected error probing '{service.value}': {e}", exc_info=True)
            return self._failure(spec, str(e) or e.__class__.__name__, diagnostic_command, elapsed_ms())

        response_time_ms = elapsed_ms()
        body = _parse_body(response)

        if not response.is_success:
            message = _extract_upstream_error(body) or f"HTTP {response.status_code}"
            return self._failure(
                spec, message, diagnostic_command, response_time_ms, status_code=response.status_code, body=body
            )

        reason = spec.check(body)
        if reason:
            return self._failure(
                spec, reason, diagnostic_command, response_time_ms, status_code=response.status_code, body=body
            )

        return ValidationOutcome(
            service=service.value,
            valid=True,
            status_code=response.status_code,
            diagnostic_command=diagnostic_command,
            response_body=body,
            response_time_ms=response_time_ms
        )

    async def _send(self, request: ProbeRequest) -> httpx.Response:
        return await self.http_client.request(
            method=request.method,
            url=request.url,
            headers=request.headers,
            params=request.params or None,
            json=request.json_body,
            timeout=self.timeout
        )

    def _failure(
        self,
        spec: ProbeSpec,
        error: str,
        diagnostic_command: str,
        response_time_ms: int,
        status_code: Optional[int] = None,
        body: Any = None
    ) -> ValidationOutcome:
        return ValidationOutcome(
            service=spec.service.value,
            valid=False,
            error=error,
            suggestion=spec.suggestion,
            status_code=status_code,
            diagnostic_command=diagnostic_command,
            response_body=body,
            response_time_ms=response_time_ms
        )
