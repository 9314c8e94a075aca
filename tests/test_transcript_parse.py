import json
import random
from datetime import date
from unittest.mock import MagicMock

import pytest
from caption_fetcher.config import Settings
from caption_fetcher.errors import EmptyTranscript, ParseError, UpstreamUnavailable
from caption_fetcher.models.transcript import LanguageOption
from caption_fetcher.providers.youtube import YouTubeProvider, parse_transcript_response
from caption_fetcher.utils.params import build_transcript_params
from conftest import VIDEO_ID, segment, transcript_payload

ASR_EN = LanguageOption(language="English (auto-generated)", language_code="en", kind="asr")

def test_segments_are_normalized_and_timed():
    payload = transcript_payload([
        segment(0, 1500, "  hello ", "\n world"),
        segment(1500, 3250, "again"),
    ])
    result = parse_transcript_response(payload, ASR_EN).value

    assert [(p.start, p.duration, p.text) for p in result.parts] == [
        (0.0, 1.5, "hello world"),
        (1.5, 1.75, "again"),
    ]
    assert result.transcript == "hello world again"
    assert result.language_code == "en"
    assert result.kind == "asr"
    assert result.language == "English (auto-generated)"
    assert result.parts[1].end == pytest.approx(3.25)

def test_integer_timing_fields_are_accepted():
    raw = segment(100, 200, "x")
    raw["transcriptSegmentRenderer"]["startMs"] = 100
    raw["transcriptSegmentRenderer"]["endMs"] = 200
    result = parse_transcript_response(transcript_payload([raw]), ASR_EN).value
    assert result.parts[0].start == 0.1

def test_invalid_segments_are_skipped():
    no_end = segment(0, 0, "missing end")
    del no_end["transcriptSegmentRenderer"]["endMs"]
    no_runs = segment(0, 100)
    non_text_runs = {"transcriptSegmentRenderer": {"startMs": "0", "endMs": "10", "snippet": {"runs": [{"text": 5}, {"emoji": "x"}]}}}
    string_snippet = {"transcriptSegmentRenderer": {"startMs": "0", "endMs": "10", "snippet": "oops"}}
    string_runs = {"transcriptSegmentRenderer": {"startMs": "0", "endMs": "10", "snippet": {"runs": "not a list"}}}
    dict_runs = {"transcriptSegmentRenderer": {"startMs": "0", "endMs": "10", "snippet": {"runs": {"text": "x"}}}}
    payload = transcript_payload([
        {"transcriptSectionHeaderRenderer": {}},
        no_end,
        no_runs,
        non_text_runs,
        string_snippet,
        string_runs,
        dict_runs,
        segment(5000, 4000, "backwards"),
        segment("abc", 10, "bad timing"),
        segment("nan", 10, "nan timing"),
        segment("inf", "inf", "infinite timing"),
        segment(10, 20, "   "),
        segment(2000, 2000, "kept"),
    ])
    result = parse_transcript_response(payload, ASR_EN).value
    assert [p.text for p in result.parts] == ["kept"]
    assert result.parts[0].duration == 0.0
    assert result.transcript == "kept"

def test_fractional_timing_strings_are_truncated():
    payload = transcript_payload([segment("1000.5", "2500.9", "fractional")])
    part = parse_transcript_response(payload, ASR_EN).value.parts[0]
    assert part.start == 1.0
    assert part.duration == 1.5

def test_malformed_snippet_does_not_hide_valid_segments():
    payload = transcript_payload([
        {"transcriptSegmentRenderer": {"startMs": "0", "endMs": "500", "snippet": "oops"}},
        segment(500, 1500, "still here"),
    ])
    result = parse_transcript_response(payload, ASR_EN).value
    assert result.transcript == "still here"

def test_all_segments_filtered_is_empty_transcript():
    payload = transcript_payload([segment(10, 5, "backwards"), segment(0, 1, " ")])
    with pytest.raises(EmptyTranscript):
        parse_transcript_response(payload, ASR_EN)

def test_empty_segment_list_is_empty_transcript():
    with pytest.raises(EmptyTranscript):
        parse_transcript_response(transcript_payload([]), ASR_EN)

def test_panel_without_segments_is_not_found():
    payload = {"actions": [{"updateEngagementPanelAction": {"targetId": "engagement-panel-searchable-transcript"}}]}
    lookup = parse_transcript_response(payload, ASR_EN)
    assert not lookup.is_found
    assert "'en'" in lookup.reason

@pytest.mark.parametrize("payload", [
    {"responseContext": {}},
    {"actions": []},
    {"actions": [{"updateEngagementPanelAction": {"targetId": "something-else"}}]},
    [],
])
def test_unexpected_shape_is_parse_error(payload):
    with pytest.raises(ParseError):
        parse_transcript_response(payload, ASR_EN)

def test_parse_error_names_missing_step():
    with pytest.raises(ParseError, match="actions.0.updateEngagementPanelAction"):
        parse_transcript_response({"actions": [{}]}, ASR_EN)

def _provider(response):
    session = MagicMock()
    session.request.return_value = response
    rng = random.Random(3)
    provider = YouTubeProvider(session=session, settings=Settings(), rng=rng, today=lambda: date(2024, 7, 10))
    return provider, session

def test_fetch_transcript_posts_encoded_params():
    payload = transcript_payload([segment(0, 1000, "hi")])
    provider, session = _provider(MagicMock(ok=True, status_code=200, json=MagicMock(return_value=payload)))

    lookup = provider.fetch_transcript(VIDEO_ID, ASR_EN)

    assert lookup.value.transcript == "hi"
    method, url = session.request.call_args.args
    kwargs = session.request.call_args.kwargs
    assert (method, url) == ("POST", "https://www.youtube.com/youtubei/v1/get_transcript")
    body = kwargs["json"]
    assert body["params"] == build_transcript_params(VIDEO_ID, "en", "asr")
    client = body["context"]["client"]
    assert client["clientName"] == "WEB"
    major, day, minor, patch = client["clientVersion"].split(".")
    assert (major, minor, patch) == ("2", "00", "00")
    assert 20240611 <= int(day) <= 20240710
    assert kwargs["headers"]["Content-Type"] == "application/json"

def test_fetch_transcript_http_failure():
    provider, session = _provider(MagicMock(ok=False, status_code=500, text="err"))
    with pytest.raises(UpstreamUnavailable):
        provider.fetch_transcript(VIDEO_ID, ASR_EN)
    session.request.assert_called_once()

def test_fetch_transcript_non_json_body():
    response = MagicMock(ok=True, status_code=200, text="<html>")
    response.json.side_effect = json.JSONDecodeError("Expecting value", "<html>", 0)
    provider, _ = _provider(response)
    with pytest.raises(ParseError):
        provider.fetch_transcript(VIDEO_ID, ASR_EN)
