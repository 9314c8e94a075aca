import re
from typing import Optional

VIDEO_ID_RE = re.compile(r"^[A-Za-z0-9_-]{11}$")

_URL_PATTERNS = [
    re.compile(r"(?:youtube\.com/(?:[^/\n\s]+/\S+/|(?:v|e(?:mbed)?)/|\S*?[?&]v=)|youtu\.be/)([A-Za-z0-9_-]{11})"),
    re.compile(r"youtube\.com/shorts/([A-Za-z0-9_-]{11})"),
]

def resolve_video_id(value: Optional[str]) -> Optional[str]:
    """Return the 11-character video ID for a bare ID or a watch/short/embed/shorts URL, else None."""
    if not value:
        return None
    value = value.strip()
    if VIDEO_ID_RE.match(value):
        return value
    for pattern in _URL_PATTERNS:
        m = pattern.search(value)
        if m:
            return m.group(1)
    return None
