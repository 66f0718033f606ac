"""
LicenseChain - builds and checks the request → license → receipt chain.
"""
import logging
from typing import Optional

from .config import LicenseConfig
from .exceptions import RejectionReason
from .freshness import Clock, is_current
from .hashing import request_hash
from .keys import PrivateKey, private_key_bytes
from .models import Record, TrackLicense, TrackReceipt, parse_license, parse_request
from .signer import SignatureScheme, get_default_scheme
from .validation import diagnose_license, diagnose_receipt, diagnose_request


class LicenseChain:
    """
    Host and client side of the single-track licensing handshake.

    1. A client builds a ``TrackRequest`` and hands it to a host
    2. The host calls ``approve_request`` to sign it into a ``TrackLicense``
    3. The client calls ``confirm_license`` to countersign it into a ``TrackReceipt``

    Records received from another party should always be checked with the
    ``is_track_*_valid`` predicates before being trusted. Validation, expiry
    and signature failures are reported as ``False``/``None``, never raised.
    """

    def __init__(
        self,
        scheme: Optional[SignatureScheme] = None,
        config: Optional[LicenseConfig] = None,
        clock: Optional[Clock] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the LicenseChain

        Args:
            scheme: Signature scheme (defaults to BIP-340 Schnorr over secp256k1)
            config: Freshness window and hash encoding (defaults to LicenseConfig())
            clock: Callable returning Unix time, read on every freshness check
            logger: Optional logger instance to use for debug/info logging
        """
        self.scheme = scheme or get_default_scheme()
        self.config = config or LicenseConfig()
        self.clock = clock
        self.logger = logger or logging.getLogger(__name__)

    def check_request(self, request: Record) -> Optional[RejectionReason]:
        """
        Return why a host would refuse to approve a request, or None.

        Structure is checked before freshness.
        """
        reason = diagnose_request(request)
        if reason is not None:
            return reason
        if not is_current(request, self.config.freshness_window, self.clock):
            return RejectionReason.STALE
        return None

    def check_license(self, license: Record) -> Optional[RejectionReason]:
        return diagnose_license(license, self.scheme, self.config.hash_encoding)

    def check_receipt(self, receipt: Record) -> Optional[RejectionReason]:
        return diagnose_receipt(receipt, self.scheme, self.config.hash_encoding)

    def is_track_request_valid(self, request: Record) -> bool:
        return diagnose_request(request) is None

    def is_track_request_current(self, request: Record) -> bool:
        return is_current(request, self.config.freshness_window, self.clock)

    def is_track_license_valid(self, license: Record) -> bool:
        return self.check_license(license) is None

    def is_track_receipt_valid(self, receipt: Record) -> bool:
        return self.check_receipt(receipt) is None

    def approve_request(self, request: Record, host_private_key: PrivateKey) -> Optional[TrackLicense]:
        """
        (Host) Sign a request and return the resulting license.

        Args:
            request: Request-shaped record (model or mapping)
            host_private_key: Host private key as hex string or raw bytes

        Returns:
            TrackLicense, or None if the request is malformed or not current

        Raises:
            InvalidPrivateKeyError: If the host private key is unusable
        """
        key = private_key_bytes(host_private_key)
        reason = self.check_request(request)
        if reason is not None:
            self.logger.debug("Refusing to approve request: %s", reason.value)
            return None

        parsed = parse_request(request)
        digest = request_hash(parsed, self.config.hash_encoding)
        signature = self.scheme.sign(digest, key)
        host_pubkey = self.scheme.derive_public_key(key).hex()

        self.logger.info("Approved track %r for client %s…", parsed.track_id, parsed.client_pubkey[:8])
        return TrackLicense(request=parsed, host_signature=signature.hex(), host_pubkey=host_pubkey)

    def confirm_license(self, license: Record, client_private_key: PrivateKey) -> Optional[TrackReceipt]:
        """
        (Client) Countersign a license and return the resulting receipt.

        The client signs the hex-decoded bytes of the host signature, attesting
        that it saw the host's approval.

        Args:
            license: License-shaped record (model or mapping)
            client_private_key: Client private key as hex string or raw bytes

        Returns:
            TrackReceipt, or None if the license does not validate or the key
            does not belong to the requesting client

        Raises:
            InvalidPrivateKeyError: If the client private key is unusable
        """
        key = private_key_bytes(client_private_key)
        reason = self.check_license(license)
        if reason is not None:
            self.logger.debug("Refusing to confirm license: %s", reason.value)
            return None

        parsed = parse_license(license)
        client_pubkey = self.scheme.derive_public_key(key).hex()
        if client_pubkey != parsed.client_pubkey:
            self.logger.warning(
                "Client key %s… does not match requesting client %s…: %s",
                client_pubkey[:8], parsed.client_pubkey[:8], RejectionReason.KEY_MISMATCH.value
            )
            return None

        signature = self.scheme.sign(bytes.fromhex(parsed.host_signature), key)
        self.logger.info("Confirmed license for track %r", parsed.track_id)
        return TrackReceipt(license=parsed, client_signature=signature.hex())


# Shared chain used by the module-level helpers
_default_chain: Optional[LicenseChain] = None


def get_default_chain() -> LicenseChain:
    """Get or create the shared LicenseChain configured from the environment"""
    global _default_chain
    if _default_chain is None:
        _default_chain = LicenseChain(config=LicenseConfig.from_env())
    return _default_chain


def reset_default_chain() -> None:
    """Drop the shared chain so the next call re-reads the environment"""
    global _default_chain
    _default_chain = None


def approve_request(request: Record, host_private_key: PrivateKey) -> Optional[TrackLicense]:
    return get_default_chain().approve_request(request, host_private_key)


def confirm_license(license: Record, client_private_key: PrivateKey) -> Optional[TrackReceipt]:
    return get_default_chain().confirm_license(license, client_private_key)


def is_track_request_valid(request: Record) -> bool:
    return get_default_chain().is_track_request_valid(request)


def is_track_request_current(request: Record) -> bool:
    return get_default_chain().is_track_request_current(request)


def is_track_license_valid(license: Record) -> bool:
    return get_default_chain().is_track_license_valid(license)


def is_track_receipt_valid(receipt: Record) -> bool:
    return get_default_chain().is_track_receipt_valid(receipt)
