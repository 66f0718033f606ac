"""
TrackLicense SDK - signed request → license → receipt chains for single tracks.
"""
from .version import __version__
from .models import TrackRequest, TrackLicense, TrackReceipt, parse_request, parse_license, parse_receipt
from .exceptions import (
    TrackLicenseError, PreconditionError, RecordError, InvalidPrivateKeyError, RejectionReason
)
from .config import LicenseConfig
from .hashing import HashEncoding, canonical_request_bytes, request_hash, request_hash_hex
from .freshness import is_current, now_seconds
from .validation import (
    validate_request, validate_license, validate_receipt,
    diagnose_request, diagnose_license, diagnose_receipt,
)
from .signer import SignatureScheme, SchnorrSecp256k1, get_default_scheme
from .keys import generate_private_key, derive_public_key, random_nonce
from .chain import (
    LicenseChain,
    approve_request,
    confirm_license,
    is_track_request_valid,
    is_track_request_current,
    is_track_license_valid,
    is_track_receipt_valid,
)

__all__ = [
    "__version__",
    "TrackRequest",
    "TrackLicense",
    "TrackReceipt",
    "parse_request",
    "parse_license",
    "parse_receipt",
    "TrackLicenseError",
    "PreconditionError",
    "RecordError",
    "InvalidPrivateKeyError",
    "RejectionReason",
    "LicenseConfig",
    "HashEncoding",
    "canonical_request_bytes",
    "request_hash",
    "request_hash_hex",
    "is_current",
    "now_seconds",
    "validate_request",
    "validate_license",
    "validate_receipt",
    "diagnose_request",
    "diagnose_license",
    "diagnose_receipt",
    "SignatureScheme",
    "SchnorrSecp256k1",
    "get_default_scheme",
    "generate_private_key",
    "derive_public_key",
    "random_nonce",
    "LicenseChain",
    "approve_request",
    "confirm_license",
    "is_track_request_valid",
    "is_track_request_current",
    "is_track_license_valid",
    "is_track_receipt_valid",
]
