"""
Text codec for probe and reply datagrams.

A probe is ``b"Timestamp: " + <date-time>``, a reply is
``b"Round-trip time: " + <date-time>``. The date-time is RFC 3339 with a
numeric UTC offset and microsecond resolution, e.g.
``2026-10-19T09:15:02.123456+02:00``.

This is a simplified textual framing and is not wire compatible with the
binary test packets of RFC 5357.
"""

from datetime import datetime

from tinytwamp.constants import PROBE_LABEL, REPLY_LABEL
from tinytwamp.errors import FormatError


def format_timestamp(ts):
    if ts.tzinfo is None or ts.utcoffset() is None:
        raise ValueError("timestamp must carry a UTC offset: %r" % ts)
    return ts.isoformat(timespec="microseconds")


def parse_timestamp(text):
    try:
        ts = datetime.fromisoformat(text)
    except ValueError:
        raise FormatError("invalid timestamp: %r" % text)
    if ts.tzinfo is None:
        raise FormatError("timestamp without UTC offset: %r" % text)
    # only the exact rendering produced by format_timestamp is accepted
    if format_timestamp(ts) != text:
        raise FormatError("unexpected timestamp format: %r" % text)
    return ts


def _encode(label, ts):
    return label + format_timestamp(ts).encode("ascii")


def _decode(label, data):
    data = data.rstrip(b"\x00").strip()
    if not data.startswith(label):
        raise FormatError("missing %r label in %r" % (label.decode("ascii"), data[:64]))
    try:
        text = data[len(label):].decode("ascii")
    except UnicodeDecodeError:
        raise FormatError("payload is not ASCII: %r" % data[:64])
    return parse_timestamp(text)


def encode_probe(send_time):
    return _encode(PROBE_LABEL, send_time)


def decode_probe(data):
    return _decode(PROBE_LABEL, data)


def encode_reply(echoed_time):
    return _encode(REPLY_LABEL, echoed_time)


def decode_reply(data):
    return _decode(REPLY_LABEL, data)
