# src/app/api/v1/content.py

from fastapi import APIRouter
from app.core.context import AppContext
from app.api.dependencies.context import AuthContextDep
from app.engine.publishing import UploadSummary
from app.schemas.common import JsonResponse
from app.schemas.publishing.upload_schemas import UploadContentRequest
from app.services.publishing.upload_service import ContentUploadService

router = APIRouter()

@router.post("/upload-content", response_model=JsonResponse[UploadSummary], summary="Publish content to several platforms")
async def upload_content(body: UploadContentRequest, context: AppContext = AuthContextDep):
    service = ContentUploadService(context)
    summary = await service.upload(body)
    message = (
        f"Content uploaded to {summary.summary.successful} of {summary.summary.total} platforms"
    )
    return JsonResponse(message=message, data=summary)
