# src/app/schemas/system/status_schemas.py

from datetime import datetime
from pydantic import BaseModel
from typing import Dict

class StatusRead(BaseModel):
    backend: str
    apis: Dict[str, bool]
    health: Dict[str, bool]
    timestamp: datetime
    environment: str
