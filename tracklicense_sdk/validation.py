"""
Structural and cryptographic validation of track records.

Each tier re-validates the tier below it on every call: checking a receipt
re-checks the license, which re-checks the request. Nothing is cached.
"""
import logging
from typing import Optional, Union

from .exceptions import RecordError, RejectionReason
from .hashing import HashEncoding, request_hash
from .models import Record, TrackLicense, parse_license, parse_receipt, parse_request
from .signer import SignatureScheme, get_default_scheme

logger = logging.getLogger(__name__)


def _verify_host_signature(
    license: TrackLicense,
    scheme: SignatureScheme,
    encoding: Union[HashEncoding, str]
) -> bool:
    digest = request_hash(license.request, encoding)
    return scheme.verify(
        bytes.fromhex(license.host_signature),
        digest,
        bytes.fromhex(license.host_pubkey),
    )


def diagnose_request(request: Record) -> Optional[RejectionReason]:
    """
    Explain why a request is structurally invalid.

    Returns:
        None if the request is valid, otherwise ``RejectionReason.MALFORMED``
    """
    try:
        parse_request(request)
    except RecordError as e:
        logger.debug("Malformed request: %s", e)
        return RejectionReason.MALFORMED
    return None


def diagnose_license(
    license: Record,
    scheme: Optional[SignatureScheme] = None,
    encoding: Union[HashEncoding, str] = HashEncoding.LENGTH_PREFIXED_V1
) -> Optional[RejectionReason]:
    """
    Explain why a license is invalid.

    Args:
        license: License-shaped record (model or mapping)
        scheme: Signature scheme (defaults to BIP-340 Schnorr)
        encoding: Request hash encoding the host signed with

    Returns:
        None if valid, ``MALFORMED`` or ``BAD_HOST_SIGNATURE`` otherwise
    """
    try:
        parsed = parse_license(license)
    except RecordError as e:
        logger.debug("Malformed license: %s", e)
        return RejectionReason.MALFORMED
    if not _verify_host_signature(parsed, scheme or get_default_scheme(), encoding):
        logger.debug("Host signature does not verify under %s…", parsed.host_pubkey[:8])
        return RejectionReason.BAD_HOST_SIGNATURE
    return None


def diagnose_receipt(
    receipt: Record,
    scheme: Optional[SignatureScheme] = None,
    encoding: Union[HashEncoding, str] = HashEncoding.LENGTH_PREFIXED_V1
) -> Optional[RejectionReason]:
    """
    Explain why a receipt is invalid.

    The client signature covers the hex-decoded bytes of the host signature,
    not the request digest.

    Returns:
        None if valid, ``MALFORMED``, ``BAD_HOST_SIGNATURE`` or
        ``BAD_CLIENT_SIGNATURE`` otherwise
    """
    try:
        parsed = parse_receipt(receipt)
    except RecordError as e:
        logger.debug("Malformed receipt: %s", e)
        return RejectionReason.MALFORMED
    scheme = scheme or get_default_scheme()
    reason = diagnose_license(parsed.license, scheme, encoding)
    if reason is not None:
        return reason
    if not scheme.verify(
        bytes.fromhex(parsed.client_signature),
        bytes.fromhex(parsed.host_signature),
        bytes.fromhex(parsed.client_pubkey),
    ):
        logger.debug("Client signature does not verify under %s…", parsed.client_pubkey[:8])
        return RejectionReason.BAD_CLIENT_SIGNATURE
    return None


def validate_request(request: Record) -> bool:
    """True iff the request's fields are present, typed and well-formed"""
    return diagnose_request(request) is None


def validate_license(
    license: Record,
    scheme: Optional[SignatureScheme] = None,
    encoding: Union[HashEncoding, str] = HashEncoding.LENGTH_PREFIXED_V1
) -> bool:
    """True iff the license is well-formed and its host signature verifies"""
    return diagnose_license(license, scheme, encoding) is None


def validate_receipt(
    receipt: Record,
    scheme: Optional[SignatureScheme] = None,
    encoding: Union[HashEncoding, str] = HashEncoding.LENGTH_PREFIXED_V1
) -> bool:
    """True iff the receipt is well-formed and both signatures verify"""
    return diagnose_receipt(receipt, scheme, encoding) is None
