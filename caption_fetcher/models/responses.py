from typing import List
from pydantic import BaseModel, ConfigDict, Field
from caption_fetcher.models.transcript import CacheStatus, LanguageOption, TranscriptResult

class LanguagesResponse(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    video_id: str = Field(alias="videoId")
    options: List[LanguageOption]
    cache_status: CacheStatus = Field(alias="cacheStatus")

class TranscriptResponse(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    video_id: str = Field(alias="videoId")
    language: str
    result: TranscriptResult
    cache_status: CacheStatus = Field(alias="cacheStatus")
