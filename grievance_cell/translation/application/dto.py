"""
Translation Application DTOs
=============================
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class TranslateRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    texts: List[str] = Field(..., max_length=128)
    target_language: str = Field(..., min_length=2, max_length=8)
    source_language: Optional[str] = Field(None, min_length=2, max_length=8)


class TranslateResponse(BaseModel):
    target_language: str
    translations: List[str]


class DetectRequest(BaseModel):
    text: str = Field(..., min_length=1, max_length=5000)


class DetectResponse(BaseModel):
    language: str
