"""
Key and nonce helpers for clients and hosts.

Private keys cross the record boundary as 64-character hex strings; nonces
(the request ``r`` field) as 32-character hex strings.
"""
import logging
from typing import Optional, Union

import nacl.utils

from .exceptions import InvalidPrivateKeyError
from .signer import SignatureScheme, get_default_scheme
from .signer.ec_constants import PRIVATE_KEY_SIZE, SECP256K1_MIN, SECP256K1_MAX

logger = logging.getLogger(__name__)

NONCE_SIZE = 16

PrivateKey = Union[str, bytes]


def generate_private_key() -> str:
    """
    Generate a random secp256k1 private key.

    Returns:
        64-character lowercase hex string
    """
    while True:
        candidate = nacl.utils.random(PRIVATE_KEY_SIZE)
        # Reject the (astronomically rare) values outside [1, N-1]
        if SECP256K1_MIN <= int.from_bytes(candidate, "big") <= SECP256K1_MAX:
            return candidate.hex()


def random_nonce() -> str:
    """
    Generate the per-request nonce ``r``.

    Returns:
        32-character lowercase hex string (16 random bytes)
    """
    return nacl.utils.random(NONCE_SIZE).hex()


def private_key_bytes(private_key: PrivateKey) -> bytes:
    """
    Normalize a private key given as hex or raw bytes.

    Raises:
        InvalidPrivateKeyError: If the key is not 32 bytes of key material
    """
    if isinstance(private_key, str):
        try:
            raw = bytes.fromhex(private_key)
        except ValueError as e:
            raise InvalidPrivateKeyError("Private key must be a hex string") from e
    elif isinstance(private_key, (bytes, bytearray)):
        raw = bytes(private_key)
    else:
        raise InvalidPrivateKeyError(f"Unsupported private key type: {type(private_key).__name__}")
    if len(raw) != PRIVATE_KEY_SIZE:
        raise InvalidPrivateKeyError(f"Private key must be {PRIVATE_KEY_SIZE} bytes, got {len(raw)}")
    return raw


def derive_public_key(private_key: PrivateKey, scheme: Optional[SignatureScheme] = None) -> str:
    """
    Derive the hex public key for a private key.

    Args:
        private_key: Private key as hex string or raw bytes
        scheme: Signature scheme (defaults to BIP-340 Schnorr)

    Returns:
        64-character lowercase hex x-only public key

    Raises:
        InvalidPrivateKeyError: If the key is unusable
    """
    scheme = scheme or get_default_scheme()
    return scheme.derive_public_key(private_key_bytes(private_key)).hex()
