import json
import random
import re
from datetime import date, timedelta
from functools import cmp_to_key
from typing import Any, Callable, Dict, List, Optional
import requests
from caption_fetcher.config import Settings, settings as default_settings
from caption_fetcher.core.source import CaptionSource
from caption_fetcher.errors import EmptyTranscript, ParseError, UpstreamUnavailable
from caption_fetcher.models.lookup import Lookup
from caption_fetcher.models.transcript import LanguageOption, TranscriptResult, TranscriptSegment
from caption_fetcher.utils.logger import logger
from caption_fetcher.utils.params import build_transcript_params

CAPTIONS_MARKER = '"captions":'
NEXT_KEY_MARKER = ',"videoDetails'
TRANSCRIPT_PANEL_TARGET = "engagement-panel-searchable-transcript"

SEGMENTS_PATH = [
    "actions", 0, "updateEngagementPanelAction", "content", "transcriptRenderer",
    "content", "transcriptSearchPanelRenderer", "body", "transcriptSegmentListRenderer",
    "initialSegments",
]

_WHITESPACE_RE = re.compile(r"\s+")


class YouTubeProvider(CaptionSource):
    def __init__(
        self,
        session: Optional[requests.Session] = None,
        settings: Settings = default_settings,
        rng: Optional[random.Random] = None,
        today: Callable[[], date] = date.today,
    ):
        self.session = session or requests.Session()
        self.settings = settings
        self.rng = rng or random.Random()
        self.today = today

    def _user_agent(self) -> str:
        return self.rng.choice(self.settings.USER_AGENTS)

    def client_version(self) -> str:
        """A "2.YYYYMMDD.00.00" version dated somewhere in the last few weeks, like real clients send."""
        days_back = self.rng.randrange(self.settings.CLIENT_VERSION_WINDOW_DAYS)
        day = self.today() - timedelta(days=days_back)
        return f"2.{day:%Y%m%d}.00.00"

    def _request(self, method: str, url: str, **kwargs) -> requests.Response:
        try:
            resp = self.session.request(method, url, timeout=self.settings.HTTP_TIMEOUT, **kwargs)
        except requests.exceptions.RequestException as e:
            raise UpstreamUnavailable(f"Request to {url} failed: {e}") from e
        if not resp.ok:
            logger.error(f"Upstream returned {resp.status_code} for {url}: {resp.text[:500]}")
            raise UpstreamUnavailable(f"Upstream request failed. Status code: {resp.status_code}")
        return resp

    # Caption discovery

    def list_languages(self, video_id: str) -> Lookup[List[LanguageOption]]:
        headers = {
            "User-Agent": self._user_agent(),
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.9",
        }
        resp = self._request("GET", self.settings.WATCH_URL, params={"v": video_id}, headers=headers)
        options = parse_caption_tracks(resp.text)
        if options is None:
            logger.info(f"No captions found for video {video_id}")
            return Lookup.not_found(f"Video {video_id} has no captions.")
        return Lookup.found(sort_languages(options))

    # Transcript fetch

    def fetch_transcript(self, video_id: str, option: LanguageOption) -> Lookup[TranscriptResult]:
        body = {
            "context": {
                "client": {
                    "clientName": self.settings.CLIENT_NAME,
                    "clientVersion": self.client_version(),
                }
            },
            "params": build_transcript_params(video_id, option.language_code, option.kind),
        }
        headers = {
            "Content-Type": "application/json",
            "User-Agent": self._user_agent(),
        }
        resp = self._request("POST", self.settings.TRANSCRIPT_API_URL, json=body, headers=headers)
        try:
            payload = resp.json()
        except ValueError as e:
            logger.error(f"Transcript response for {video_id} is not JSON: {resp.text[:500]}")
            raise ParseError("Could not parse transcript data. The API structure might have changed.") from e
        return parse_transcript_response(payload, option)


def parse_caption_tracks(html: str) -> Optional[List[LanguageOption]]:
    """
    Extract caption tracks from watch-page markup.

    Returns None when the page carries no captions object at all, which is an
    ordinary answer for videos without captions. A malformed or reshaped
    captions object raises ``ParseError``.
    """
    pieces = html.split(CAPTIONS_MARKER)
    if len(pieces) <= 1:
        return None
    fragment = pieces[1].split(NEXT_KEY_MARKER)[0].replace("\n", "")
    try:
        captions = json.loads(fragment)
    except ValueError as e:
        raise ParseError(f"Malformed captions JSON in watch page: {e}") from e

    renderer = captions.get("playerCaptionsTracklistRenderer") if isinstance(captions, dict) else None
    tracks = renderer.get("captionTracks") if isinstance(renderer, dict) else None
    if not isinstance(tracks, list):
        raise ParseError("Caption track list not found in watch page; the layout may have changed.")

    options = []
    for track in tracks:
        if not isinstance(track, dict) or not track.get("languageCode"):
            continue
        options.append(LanguageOption(
            language=_track_name(track),
            language_code=track["languageCode"],
            kind=track.get("kind") or "manual",
        ))
    return options


def _track_name(track: Dict[str, Any]) -> str:
    name = track.get("name")
    if not isinstance(name, dict):
        return track["languageCode"]
    if name.get("simpleText"):
        return name["simpleText"]
    runs = name.get("runs") or []
    text = "".join(r.get("text", "") for r in runs if isinstance(r, dict))
    return text or track["languageCode"]


def _english_first(a: LanguageOption, b: LanguageOption) -> int:
    if "English" in a.language:
        return -1
    if "English" in b.language:
        return 1
    return 0


def _exact_english_first(a: LanguageOption, b: LanguageOption) -> int:
    if a.language == "English":
        return -1
    if b.language == "English":
        return 1
    return 0


def sort_languages(options: List[LanguageOption]) -> List[LanguageOption]:
    """English-ish names first, then plain "English" at the very front. Two passes, not one key."""
    ordered = sorted(options, key=cmp_to_key(_english_first))
    return sorted(ordered, key=cmp_to_key(_exact_english_first))


def _walk(payload: Any, path: List[Any]) -> Any:
    """Follow ``path`` through nested dicts/lists; raise ``ParseError`` at the first missing step."""
    node = payload
    for i, step in enumerate(path):
        if isinstance(step, int):
            ok = isinstance(node, list) and len(node) > step
        else:
            ok = isinstance(node, dict) and node.get(step) is not None
        if not ok:
            trail = ".".join(str(s) for s in path[:i + 1])
            raise ParseError(f"Missing '{trail}' in transcript response.")
        node = node[step]
    return node


def parse_transcript_response(payload: Any, option: LanguageOption) -> Lookup[TranscriptResult]:
    try:
        raw_segments = _walk(payload, SEGMENTS_PATH)
    except ParseError:
        target = None
        try:
            target = _walk(payload, ["actions", 0, "updateEngagementPanelAction", "targetId"])
        except ParseError:
            pass
        if target == TRANSCRIPT_PANEL_TARGET:
            return Lookup.not_found(
                f"No transcript found for this video in the specified language ('{option.language_code}')."
            )
        logger.warning(
            "Transcript data structure not found or unexpectedly changed in response: "
            + json.dumps(payload, indent=2, ensure_ascii=False)
        )
        raise

    if not isinstance(raw_segments, list):
        raise ParseError("Transcript segment list has an unexpected type.")

    parts = [seg for seg in (_parse_segment(raw) for raw in raw_segments) if seg is not None]
    if not parts:
        raise EmptyTranscript(
            f"Transcript was found but contained no text segments for language '{option.language_code}'."
        )
    return Lookup.found(TranscriptResult.from_parts(option, parts))


def _parse_segment(raw: Any) -> Optional[TranscriptSegment]:
    renderer = raw.get("transcriptSegmentRenderer") if isinstance(raw, dict) else None
    if not isinstance(renderer, dict):
        return None
    snippet = renderer.get("snippet")
    if not isinstance(snippet, dict):
        return None
    runs = snippet.get("runs")
    if renderer.get("startMs") is None or renderer.get("endMs") is None:
        return None
    if not isinstance(runs, list) or not runs:
        return None

    text = "".join(r["text"] for r in runs if isinstance(r, dict) and isinstance(r.get("text"), str))
    text = _WHITESPACE_RE.sub(" ", text.strip())
    if not text:
        return None

    try:
        # Fractional strings like "1000.5" are truncated to whole milliseconds
        start_ms = int(float(renderer["startMs"]))
        end_ms = int(float(renderer["endMs"]))
    except (TypeError, ValueError, OverflowError):
        logger.warning(f"Skipping segment with invalid timing: {renderer}")
        return None
    if start_ms < 0 or end_ms < start_ms:
        logger.warning(f"Skipping segment with invalid timing: {renderer}")
        return None

    return TranscriptSegment(
        start=start_ms / 1000,
        duration=(end_ms - start_ms) / 1000,
        text=text,
    )
