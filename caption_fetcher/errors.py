from typing import Optional


class CaptionError(Exception):
    """Base error for the caption pipeline. ``status_code`` tells client faults from upstream ones."""
    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        if status_code is not None:
            self.status_code = status_code


class ValidationError(CaptionError):
    status_code = 400


class UpstreamUnavailable(CaptionError):
    status_code = 502


class NoTranscriptFound(CaptionError):
    status_code = 404


class ParseError(CaptionError):
    status_code = 500


class EmptyTranscript(CaptionError):
    status_code = 404


class CacheUnavailable(CaptionError):
    # Raised by stores, absorbed by the cache-aside layer.
    status_code = 503
