# src/app/api/v1/keys.py

from fastapi import APIRouter, Query, Request
from typing import List, Optional
from app.core.context import AppContext
from app.api.dependencies.context import AuthContextDep, PublicContextDep
from app.schemas.common import JsonResponse
from app.schemas.credential.api_key_schemas import (
    ValidateAllKeysRequest,
    ValidateAllKeysResponse,
    ApiKeyTestRequest,
    ApiKeyTestResponse,
    VerifiedKeyRead,
    KeyManualsResponse,
    LiveTestResponse
)
from app.services.credential.validation_service import KeyValidationService, build_key_manuals

# live-test 中不作为辅助参数转发给探针的查询参数
RESERVED_QUERY_PARAMS = ("apiKey", "userId")

router = APIRouter()

@router.post("/validate-all-keys", response_model=ValidateAllKeysResponse, summary="Validate and store a user's API keys")
async def validate_all_keys(body: ValidateAllKeysRequest, context: AppContext = PublicContextDep):
    service = KeyValidationService(context)
    return await service.validate_all(body.user_id, body.keys)

@router.post("/test-api-key", response_model=ApiKeyTestResponse, summary="Probe a single API key")
async def test_api_key(body: ApiKeyTestRequest, context: AppContext = PublicContextDep):
    service = KeyValidationService(context)
    return await service.test_single_key(body.service, body.api_key, body.aux_params)

@router.get("/keys", response_model=JsonResponse[List[VerifiedKeyRead]], summary="List the caller's verified services")
async def list_verified_keys(context: AppContext = AuthContextDep):
    service = KeyValidationService(context)
    keys = await service.list_verified_keys(context.actor_id)
    return JsonResponse(data=keys)

@router.get("/key-manuals", response_model=KeyManualsResponse, summary="Setup guides for every supported service")
async def list_key_manuals():
    return build_key_manuals()

@router.get("/live-test/{service}", response_model=LiveTestResponse, summary="Probe a key and time the vendor round trip")
async def live_test(
    service: str,
    request: Request,
    api_key: Optional[str] = Query(None, alias="apiKey"),
    user_id: Optional[str] = Query(None, alias="userId"),
    context: AppContext = PublicContextDep
):
    aux_params = {k: v for k, v in request.query_params.items() if k not in RESERVED_QUERY_PARAMS}
    return await KeyValidationService(context).live_test(service, api_key, aux_params, user_id=user_id)
