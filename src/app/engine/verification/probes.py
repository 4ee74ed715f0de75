# src/app/engine/verification/probes.py

from typing import Any, Optional

from app.core.config import settings
from app.models import ServiceName
from .base import CredentialPayload, ProbeRequest
from .main import register_probe
from . import manuals

GEMINI_API_URL = "https://generativelanguage.googleapis.com/v1beta/models"
UNDETECTABLE_API_URL = "https://api.undetectable.ai/api/rewrite"
SAPLING_API_URL = "https://api.sapling.ai/api/v1/aidetect"
RESEND_API_URL = "https://api.resend.com/emails"
PHANTOMBUSTER_API_URL = "https://api.phantombuster.com/api/v2"
APIFY_API_URL = "https://api.apify.com/v2/acts"


def _bearer(secret: str) -> dict:
    return {"Authorization": f"Bearer {secret}"}


# --- 成功条件 ---

def _gemini_has_text(body: Any) -> Optional[str]:
    try:
        text = body["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        text = None
    if not text or not str(text).strip():
        return "Gemini responded without generated text."
    return None

def _sapling_has_score(body: Any) -> Optional[str]:
    score = body.get("score") if isinstance(body, dict) else None
    if isinstance(score, bool) or not isinstance(score, (int, float)):
        return "Sapling responded without a numeric score."
    return None

def _resend_has_id(body: Any) -> Optional[str]:
    if not isinstance(body, dict) or not body.get("id"):
        return "Resend responded without an email id."
    return None


# --- 探针定义 ---

@register_probe(
    ServiceName.GEMINI,
    suggestion="Verify API key is correct and has Generative Language API enabled",
    check=_gemini_has_text,
    aux_fields=("model",),
    manual=manuals.GEMINI_MANUAL
)
def gemini_probe(payload: CredentialPayload) -> ProbeRequest:
    model = payload.aux("model", settings.GEMINI_MODEL)
    return ProbeRequest(
        method="POST",
        url=f"{GEMINI_API_URL}/{model}:generateContent",
        params={"key": payload.secret},
        json_body={"contents": [{"parts": [{"text": "Test"}]}]}
    )

@register_probe(
    ServiceName.UNDETECTABLE,
    suggestion="Ensure you have a paid subscription and valid API key",
    manual=manuals.UNDETECTABLE_MANUAL
)
def undetectable_probe(payload: CredentialPayload) -> ProbeRequest:
    return ProbeRequest(
        method="POST",
        url=UNDETECTABLE_API_URL,
        headers=_bearer(payload.secret),
        json_body={"content": "Hello", "rewrite_mode": "high", "output_mode": "general"}
    )

@register_probe(
    ServiceName.SAPLING,
    suggestion="Verify API key and ensure you have an active subscription",
    check=_sapling_has_score,
    manual=manuals.SAPLING_MANUAL
)
def sapling_probe(payload: CredentialPayload) -> ProbeRequest:
    return ProbeRequest(
        method="POST",
        url=SAPLING_API_URL,
        headers=_bearer(payload.secret),
        json_body={"text": "This is test content for AI detection."}
    )

@register_probe(
    ServiceName.RESEND,
    suggestion="Verify domain is verified and sender email is authorized",
    check=_resend_has_id,
    aux_fields=("senderEmail",),
    manual=manuals.RESEND_MANUAL
)
def resend_probe(payload: CredentialPayload) -> ProbeRequest:
    # 注意：该探针会真实发送一封测试邮件
    sender = payload.aux("senderEmail", settings.DEFAULT_SENDER_EMAIL)
    return ProbeRequest(
        method="POST",
        url=RESEND_API_URL,
        headers=_bearer(payload.secret),
        json_body={
            "from": f"Chaitra <{sender}>",
            "to": [settings.PROBE_RECIPIENT_EMAIL],
            "subject": "API Key Validation",
            "html": "<p>Testing email validation</p>"
        }
    )

@register_probe(
    ServiceName.PHANTOM,
    suggestion="Verify API key and Phantom ID are correct",
    aux_fields=("phantomId",),
    manual=manuals.PHANTOM_MANUAL
)
def phantom_probe(payload: CredentialPayload) -> ProbeRequest:
    headers = {"X-Phantombuster-Key-1": payload.secret}
    phantom_id = payload.aux("phantomId")
    if phantom_id:
        # 只读取该自动化的状态，不触发 launch
        return ProbeRequest(url=f"{PHANTOMBUSTER_API_URL}/agents/fetch", headers=headers, params={"id": str(phantom_id)})
    return ProbeRequest(url=f"{PHANTOMBUSTER_API_URL}/agents/fetch-all", headers=headers)

@register_probe(
    ServiceName.APIFY,
    suggestion="Verify API key and ensure you have credits in your Apify account",
    manual=manuals.APIFY_MANUAL
)
def apify_probe(payload: CredentialPayload) -> ProbeRequest:
    return ProbeRequest(url=APIFY_API_URL, params={"token": payload.secret})

@register_probe(
    ServiceName.UPLOAD_POST,
    suggestion="Verify API key and ensure account has API access",
    manual=manuals.UPLOAD_POST_MANUAL
)
def upload_post_probe(payload: CredentialPayload) -> ProbeRequest:
    return ProbeRequest(
        url=f"{str(settings.UPLOAD_POST_API_URL).rstrip('/')}/user/profile",
        headers=_bearer(payload.secret)
    )
