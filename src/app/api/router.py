# src/app/api/router.py

from fastapi import APIRouter
from app.api.v1 import keys
from app.api.v1 import credits
from app.api.v1 import content
from app.api.v1 import status

router = APIRouter(prefix="/api")

router.include_router(keys.router, tags=["API Keys"])
router.include_router(credits.router, prefix="/credits", tags=["Credits"])
router.include_router(content.router, tags=["Content"])
router.include_router(status.router, tags=["System"])
