"""
Canonical hashing of track requests.

The digest a host signs is SHA-256 over a fixed byte layout of the request
fields ``(clientPubkey, trackId, r, timestamp)``, in that order. Every
participant has to produce the same bytes, so the layout is versioned:

Version 1 (``HashEncoding.LENGTH_PREFIXED_V1``)::

    0x01
    u32be(len) || clientPubkey (UTF-8)
    u32be(len) || trackId      (UTF-8)
    u32be(len) || r            (UTF-8)
    i64be(timestamp)

``HashEncoding.JSON_ARRAY`` reproduces the compact
``JSON.stringify([clientPubkey, trackId, r, timestamp])`` form used by
earlier JavaScript clients and is only meant for interoperating with them.
"""
import json
import struct
import hashlib
import logging
from enum import Enum
from typing import Union

from .exceptions import PreconditionError, RecordError
from .models import Record, TrackRequest, parse_request

logger = logging.getLogger(__name__)

ENCODING_VERSION_1 = 0x01
DIGEST_SIZE = 32


class HashEncoding(str, Enum):
    """Byte layouts available for request hashing"""
    LENGTH_PREFIXED_V1 = "v1"
    JSON_ARRAY = "json-array"


def _prefixed(value: str) -> bytes:
    data = value.encode("utf-8")
    return struct.pack(">I", len(data)) + data


def _encode_v1(request: TrackRequest) -> bytes:
    return b"".join([
        bytes([ENCODING_VERSION_1]),
        _prefixed(request.client_pubkey),
        _prefixed(request.track_id),
        _prefixed(request.r),
        struct.pack(">q", request.timestamp),
    ])


def _encode_json_array(request: TrackRequest) -> bytes:
    fields = [request.client_pubkey, request.track_id, request.r, request.timestamp]
    return json.dumps(fields, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


_ENCODERS = {
    HashEncoding.LENGTH_PREFIXED_V1: _encode_v1,
    HashEncoding.JSON_ARRAY: _encode_json_array,
}


def canonical_request_bytes(
    request: Record,
    encoding: Union[HashEncoding, str] = HashEncoding.LENGTH_PREFIXED_V1
) -> bytes:
    """
    Serialize the request fields into the canonical byte layout.

    Args:
        request: Request-shaped record (model or mapping)
        encoding: Byte layout to use

    Returns:
        Encoded bytes

    Raises:
        PreconditionError: If the request is not structurally valid
    """
    try:
        parsed = parse_request(request)
    except RecordError as e:
        raise PreconditionError("can't serialize invalid request") from e
    return _ENCODERS[HashEncoding(encoding)](parsed)


def request_hash(
    request: Record,
    encoding: Union[HashEncoding, str] = HashEncoding.LENGTH_PREFIXED_V1
) -> bytes:
    """
    Compute the 32-byte digest a host signs for a request.

    Raises:
        PreconditionError: If the request is not structurally valid
    """
    return hashlib.sha256(canonical_request_bytes(request, encoding)).digest()


def request_hash_hex(
    request: Record,
    encoding: Union[HashEncoding, str] = HashEncoding.LENGTH_PREFIXED_V1
) -> str:
    """Hex form of ``request_hash``"""
    return request_hash(request, encoding).hex()
