"""
Exceptions for the TrackLicense SDK.
"""
from enum import Enum


class RejectionReason(str, Enum):
    """
    Why a request, license or receipt was turned down.

    The boolean predicates and ``approve_request``/``confirm_license`` collapse
    all of these into ``False``/``None``; the ``diagnose_*`` and ``check_*``
    helpers return the reason instead.
    """
    MALFORMED = "MALFORMED"
    STALE = "STALE"
    BAD_HOST_SIGNATURE = "BAD_HOST_SIGNATURE"
    BAD_CLIENT_SIGNATURE = "BAD_CLIENT_SIGNATURE"
    KEY_MISMATCH = "KEY_MISMATCH"


class TrackLicenseError(Exception):
    """Base exception for TrackLicense SDK errors."""
    pass


class PreconditionError(TrackLicenseError, ValueError):
    """Raised when a request is hashed without being structurally valid."""
    pass


class RecordError(TrackLicenseError, ValueError):
    """Raised when a serialized record violates the record field contracts."""
    pass


class InvalidPrivateKeyError(TrackLicenseError, ValueError):
    """Raised when a private key cannot be used for signing or derivation."""
    pass
