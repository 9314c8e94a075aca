import os
import sys

import pytest

# Add project root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from caption_fetcher.config import Settings
from caption_fetcher.models.transcript import LanguageOption
from caption_fetcher.utils.cache import CacheAside, MemoryCacheStore

VIDEO_ID = "dQw4w9WgXcQ"


@pytest.fixture
def fast_settings():
    return Settings(INITIAL_DELAY_MS=0, CACHE_BACKEND="memory")


@pytest.fixture
def memory_store():
    return MemoryCacheStore()


@pytest.fixture
def cache(memory_store, fast_settings):
    aside = CacheAside(memory_store, settings=fast_settings)
    yield aside
    aside.close()


@pytest.fixture
def english_options():
    return [
        LanguageOption(language="English", language_code="en", kind="manual"),
        LanguageOption(language="English (auto-generated)", language_code="en", kind="asr"),
    ]


def segment(start_ms, end_ms, *texts):
    return {
        "transcriptSegmentRenderer": {
            "startMs": str(start_ms),
            "endMs": str(end_ms),
            "snippet": {"runs": [{"text": t} for t in texts]},
        }
    }


def transcript_payload(segments):
    return {
        "actions": [{
            "updateEngagementPanelAction": {
                "targetId": "engagement-panel-searchable-transcript",
                "content": {
                    "transcriptRenderer": {
                        "content": {
                            "transcriptSearchPanelRenderer": {
                                "body": {
                                    "transcriptSegmentListRenderer": {
                                        "initialSegments": segments,
                                    }
                                }
                            }
                        }
                    }
                },
            }
        }]
    }
