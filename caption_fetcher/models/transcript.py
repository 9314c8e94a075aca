from typing import List, Literal
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

CacheStatus = Literal["hit", "miss"]

class LanguageOption(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    language: str
    language_code: str = Field(alias="languageCode")
    kind: str = "manual"

class TranscriptSegment(BaseModel):
    model_config = ConfigDict(frozen=True)

    start: float = Field(ge=0)
    duration: float = Field(ge=0)
    text: str

    @field_validator("text")
    @classmethod
    def _text_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("segment text must not be empty")
        return v

    @property
    def end(self) -> float:
        return self.start + self.duration

class TranscriptResult(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    language_code: str = Field(alias="languageCode")
    kind: str
    language: str
    transcript: str
    parts: List[TranscriptSegment]

    @model_validator(mode="after")
    def _transcript_matches_parts(self) -> "TranscriptResult":
        expected = join_parts(self.parts)
        if self.transcript != expected:
            raise ValueError("transcript does not match the joined text of its parts")
        return self

    @classmethod
    def from_parts(cls, option: LanguageOption, parts: List[TranscriptSegment]) -> "TranscriptResult":
        return cls(
            language_code=option.language_code,
            kind=option.kind,
            language=option.language,
            transcript=join_parts(parts),
            parts=parts,
        )

def join_parts(parts: List[TranscriptSegment]) -> str:
    return " ".join(p.text for p in parts).strip()
