from caption_fetcher.services.transcripts import TranscriptService
from caption_fetcher.utils.logger import logger

if __name__ == "__main__":
    url = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"
    with TranscriptService() as service:
        try:
            langs = service.list_languages(url)
            print("languages:", [(o.language, o.language_code, o.kind) for o in langs.options])
            resp = service.get_transcript(url, language="en", kind="asr")
            print("cache:", resp.cache_status)
            print("segments:", len(resp.result.parts))
            for s in resp.result.parts[:5]:
                print(f"[{s.start:.2f} -> {s.end:.2f}] {s.text}")
        except Exception as e:
            logger.error(f"Transcript fetch failed: {e}")
            raise
