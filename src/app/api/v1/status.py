# src/app/api/v1/status.py

from fastapi import APIRouter
from app.core.context import AppContext
from app.api.dependencies.context import PublicContextDep
from app.schemas.common import JsonResponse
from app.schemas.system.status_schemas import StatusRead
from app.services.system.status_service import StatusService

router = APIRouter()

@router.get("/status", response_model=JsonResponse[StatusRead], summary="Backend and integration status")
async def get_status(context: AppContext = PublicContextDep):
    status_read = await StatusService(context).get_status()
    return JsonResponse(data=status_read)
