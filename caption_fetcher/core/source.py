from abc import ABC, abstractmethod
from typing import List
from caption_fetcher.models.lookup import Lookup
from caption_fetcher.models.transcript import LanguageOption, TranscriptResult

class CaptionSource(ABC):
    @abstractmethod
    def list_languages(self, video_id: str) -> Lookup[List[LanguageOption]]:
        """List the caption tracks available for a video."""
        pass

    @abstractmethod
    def fetch_transcript(self, video_id: str, option: LanguageOption) -> Lookup[TranscriptResult]:
        """Fetch and parse one caption track."""
        pass
