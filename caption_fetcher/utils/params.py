"""
Encoder for the ``params`` value of the internal get_transcript endpoint.

The endpoint expects a base64 blob in a protobuf-like tag/length/value layout.
Only the tiny subset needed here is supported: every field is either a
length-delimited string or a one-byte varint flag, field numbers fit in a
single tag byte and values are shorter than 128 bytes so that the length is a
single byte. Anything outside that subset raises ``ValueError`` instead of
producing a truncated blob.
"""
import base64
from typing import List, NamedTuple, Union
from urllib.parse import quote

WIRE_VARINT = 0
WIRE_LENGTH_DELIMITED = 2

MAX_FIELD_NUMBER = 15
MAX_VALUE_LENGTH = 127

TRANSCRIPT_PANEL = "engagement-panel-searchable-transcript-search-panel"
ASR_KIND = "asr"


class Text(NamedTuple):
    number: int
    value: str


class Flag(NamedTuple):
    number: int
    value: int = 1


Field = Union[Text, Flag]


def _tag(number: int, wire_type: int) -> int:
    if not 1 <= number <= MAX_FIELD_NUMBER:
        raise ValueError(f"Field number {number} does not fit in a single tag byte")
    return (number << 3) | wire_type


def encode(fields: List[Field]) -> bytes:
    out = bytearray()
    for field in fields:
        if isinstance(field, Text):
            data = field.value.encode("utf-8")
            if len(data) > MAX_VALUE_LENGTH:
                raise ValueError(
                    f"Field {field.number} is {len(data)} bytes; at most {MAX_VALUE_LENGTH} are supported"
                )
            out.append(_tag(field.number, WIRE_LENGTH_DELIMITED))
            out.append(len(data))
            out.extend(data)
        elif isinstance(field, Flag):
            if not 0 <= field.value <= MAX_VALUE_LENGTH:
                raise ValueError(f"Flag {field.number} value {field.value} needs a multi-byte varint")
            out.append(_tag(field.number, WIRE_VARINT))
            out.append(field.value)
        else:
            raise TypeError(f"Unsupported field: {field!r}")
    return bytes(out)


def decode(data: bytes) -> List[Field]:
    """Inverse of :func:`encode` for the same restricted subset."""
    fields: List[Field] = []
    i = 0
    while i < len(data):
        if i + 1 >= len(data):
            raise ValueError(f"Truncated field at offset {i}")
        tag = data[i]
        number, wire_type = tag >> 3, tag & 0x07
        if wire_type == WIRE_VARINT:
            fields.append(Flag(number, data[i + 1]))
            i += 2
        elif wire_type == WIRE_LENGTH_DELIMITED:
            length = data[i + 1]
            end = i + 2 + length
            if length > MAX_VALUE_LENGTH or end > len(data):
                raise ValueError(f"Invalid length {length} at offset {i}")
            fields.append(Text(number, data[i + 2:end].decode("utf-8")))
            i = end
        else:
            raise ValueError(f"Unsupported wire type {wire_type} at offset {i}")
    return fields


def b64(fields: List[Field]) -> str:
    return base64.b64encode(encode(fields)).decode("ascii")


def build_transcript_params(video_id: str, language_code: str, kind: str) -> str:
    """Build the percent-encoded ``params`` string for one caption track."""
    inner = b64([
        Text(1, ASR_KIND if kind == ASR_KIND else ""),
        Text(2, language_code),
        Text(3, ""),
    ])
    outer = b64([
        Text(1, video_id),
        Text(2, inner),
        Text(5, TRANSCRIPT_PANEL),
        Flag(6),
        Flag(7),
    ])
    return quote(outer, safe="")
