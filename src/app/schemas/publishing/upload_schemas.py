# src/app/schemas/publishing/upload_schemas.py

from pydantic import BaseModel, Field, ConfigDict, HttpUrl
from pydantic.alias_generators import to_camel
from typing import List

class UploadContentRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    file_url: HttpUrl = Field(..., description="Public http(s) URL of the media to publish.")
    description: str = Field(..., description="Caption used on every platform.")
    platforms: List[str] = Field(..., min_length=1, description="Target platforms, e.g. ['linkedin', 'twitter'].")
    user_id: str = Field(..., min_length=1)
