from typing import List, Optional
from pydantic import TypeAdapter
from caption_fetcher.config import Settings, settings as default_settings
from caption_fetcher.core.source import CaptionSource
from caption_fetcher.errors import NoTranscriptFound, ValidationError
from caption_fetcher.models.responses import LanguagesResponse, TranscriptResponse
from caption_fetcher.models.transcript import LanguageOption, TranscriptResult
from caption_fetcher.providers.youtube import YouTubeProvider
from caption_fetcher.utils.cache import CacheAside, Cached, build_store, languages_key, transcript_key
from caption_fetcher.utils.logger import logger
from caption_fetcher.utils.retry import with_retry
from caption_fetcher.utils.video_id import resolve_video_id

LANGUAGES_ADAPTER = TypeAdapter(List[LanguageOption])
TRANSCRIPT_ADAPTER = TypeAdapter(TranscriptResult)


class TranscriptService:
    def __init__(
        self,
        provider: Optional[CaptionSource] = None,
        cache: Optional[CacheAside] = None,
        settings: Settings = default_settings,
        use_cache: bool = True,
    ):
        self.settings = settings
        self.provider = provider or YouTubeProvider(settings=settings)
        self._owns_cache = cache is None
        self.cache = cache or CacheAside(build_store(settings), settings=settings)
        self.use_cache = use_cache

    def __enter__(self) -> "TranscriptService":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        """Stop the background cache writer, letting queued writes finish. A cache passed in stays open."""
        if self._owns_cache:
            self.cache.close(wait=True)

    def _resolve(self, identifier: Optional[str]) -> str:
        if not identifier:
            raise ValidationError("Missing video URL or video ID.")
        video_id = resolve_video_id(identifier)
        if not video_id:
            raise ValidationError("Invalid YouTube URL or video ID provided.")
        return video_id

    def _cached(self, key: str, compute, adapter: TypeAdapter) -> Cached:
        if not self.use_cache:
            return Cached(compute(), "miss")
        return self.cache.cached(key, compute, adapter)

    def list_languages(self, identifier: str) -> LanguagesResponse:
        video_id = self._resolve(identifier)
        cached = self._cached(
            languages_key(video_id),
            lambda: with_retry(
                lambda: self.provider.list_languages(video_id),
                max_attempts=self.settings.MAX_ATTEMPTS,
                initial_delay=self.settings.INITIAL_DELAY_MS / 1000,
            ),
            LANGUAGES_ADAPTER,
        )
        options = cached.lookup.value if cached.lookup.is_found else []
        return LanguagesResponse(video_id=video_id, options=options, cache_status=cached.status)

    def _option(self, video_id: str, language: str, kind: str) -> LanguageOption:
        # Display names only come from discovery; reuse a cached listing when there is one.
        name = language
        if self.use_cache:
            for option in self.cache.peek(languages_key(video_id), LANGUAGES_ADAPTER) or []:
                if option.language_code == language and option.kind == kind:
                    name = option.language
                    break
        return LanguageOption(language=name, language_code=language, kind=kind)

    def get_transcript(self, identifier: str, language: Optional[str] = None, kind: Optional[str] = None) -> TranscriptResponse:
        video_id = self._resolve(identifier)
        language = language or self.settings.DEFAULT_LANGUAGE
        kind = kind or self.settings.DEFAULT_KIND
        cached = self._cached(
            transcript_key(video_id, language, kind),
            lambda: self.provider.fetch_transcript(video_id, self._option(video_id, language, kind)),
            TRANSCRIPT_ADAPTER,
        )
        if not cached.lookup.is_found:
            logger.info(f"No transcript for {video_id} ({language}/{kind}): {cached.lookup.reason}")
            raise NoTranscriptFound(cached.lookup.reason)
        return TranscriptResponse(
            video_id=video_id,
            language=language,
            result=cached.lookup.value,
            cache_status=cached.status,
        )
