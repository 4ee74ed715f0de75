# src/app/engine/verification/__init__.py
from .main import CredentialVerifier, register_probe, get_probe_spec, list_probe_specs, ensure_registry_complete
from .base import (
    CredentialPayload,
    ValidationOutcome,
    KeyManual,
    ManualField,
    ProbeRequest,
    ProbeSpec,
    ProbeNotFoundError
)

# 确保探针被加载和注册
from . import probes

ensure_registry_complete()
