"""
BIP-340 Schnorr signatures over secp256k1.

Curve arithmetic comes from the ``ecdsa`` package; this module adds the
BIP-340 layer on top: tagged hashes, x-only public keys, the even-Y
convention and variable-length messages.
"""
import hashlib
import logging
from typing import Optional

import nacl.utils
from ecdsa import SECP256k1
from ecdsa.ellipticcurve import INFINITY, PointJacobi

from tracklicense_sdk.exceptions import InvalidPrivateKeyError
from tracklicense_sdk.signer.ec_constants import (
    SECP256K1_N, SECP256K1_P, SECP256K1_MIN, SECP256K1_MAX,
    PRIVATE_KEY_SIZE, PUBLIC_KEY_SIZE, SIGNATURE_SIZE, AUX_RAND_SIZE,
)

logger = logging.getLogger(__name__)

_G = SECP256k1.generator
_CURVE = SECP256k1.curve


def tagged_hash(tag: str, msg: bytes) -> bytes:
    """SHA256(SHA256(tag) || SHA256(tag) || msg)"""
    tag_hash = hashlib.sha256(tag.encode("utf-8")).digest()
    return hashlib.sha256(tag_hash + tag_hash + msg).digest()


def _int(b: bytes) -> int:
    return int.from_bytes(b, byteorder="big")


def _bytes32(x: int) -> bytes:
    return x.to_bytes(32, byteorder="big")


def _has_even_y(point) -> bool:
    return point.y() % 2 == 0


def _xonly(point) -> bytes:
    return _bytes32(point.x())


def _lift_x(x: int) -> Optional[PointJacobi]:
    """Return the curve point with the given x and an even y, if one exists"""
    if x >= SECP256K1_P:
        return None
    c = (pow(x, 3, SECP256K1_P) + 7) % SECP256K1_P
    y = pow(c, (SECP256K1_P + 1) // 4, SECP256K1_P)
    if pow(y, 2, SECP256K1_P) != c:
        return None
    if y % 2:
        y = SECP256K1_P - y
    return PointJacobi(_CURVE, x, y, 1, SECP256K1_N)


def _secret_scalar(private_key: bytes) -> int:
    if not isinstance(private_key, (bytes, bytearray)) or len(private_key) != PRIVATE_KEY_SIZE:
        raise InvalidPrivateKeyError(f"Private key must be {PRIVATE_KEY_SIZE} bytes")
    d = _int(private_key)
    if not SECP256K1_MIN <= d <= SECP256K1_MAX:
        raise InvalidPrivateKeyError("Private key is outside the secp256k1 scalar range")
    return d


class SchnorrSecp256k1:
    """
    BIP-340 Schnorr signature scheme.

    Keys and signatures are raw bytes: 32-byte private keys, 32-byte x-only
    public keys and 64-byte signatures.
    """
    name = "bip340-secp256k1"

    def derive_public_key(self, private_key: bytes) -> bytes:
        """
        Derive the x-only public key for a private key.

        Raises:
            InvalidPrivateKeyError: If the key is not a usable secp256k1 scalar
        """
        d = _secret_scalar(private_key)
        return _xonly(_G * d)

    def sign(self, message: bytes, private_key: bytes, aux_rand: Optional[bytes] = None) -> bytes:
        """
        Sign a message of any length.

        Args:
            message: Message bytes
            private_key: 32-byte private key
            aux_rand: 32 bytes of auxiliary randomness; drawn fresh when omitted

        Returns:
            64-byte signature

        Raises:
            InvalidPrivateKeyError: If the key is not a usable secp256k1 scalar
            ValueError: If aux_rand has the wrong size
        """
        d0 = _secret_scalar(private_key)
        if aux_rand is None:
            aux_rand = nacl.utils.random(AUX_RAND_SIZE)
        if len(aux_rand) != AUX_RAND_SIZE:
            raise ValueError(f"aux_rand must be {AUX_RAND_SIZE} bytes")

        P = _G * d0
        d = d0 if _has_even_y(P) else SECP256K1_N - d0
        t = bytes(a ^ b for a, b in zip(_bytes32(d), tagged_hash("BIP0340/aux", aux_rand)))
        k0 = _int(tagged_hash("BIP0340/nonce", t + _xonly(P) + message)) % SECP256K1_N
        if k0 == 0:
            raise RuntimeError("Failure. This happens only with negligible probability.")
        R = _G * k0
        k = k0 if _has_even_y(R) else SECP256K1_N - k0
        e = _int(tagged_hash("BIP0340/challenge", _xonly(R) + _xonly(P) + message)) % SECP256K1_N
        sig = _xonly(R) + _bytes32((k + e * d) % SECP256K1_N)

        if not self.verify(sig, message, _xonly(P)):
            raise RuntimeError("Produced signature does not verify")
        return sig

    def verify(self, signature: bytes, message: bytes, public_key: bytes) -> bool:
        """
        Verify a signature. Malformed inputs fail verification instead of raising.
        """
        if len(public_key) != PUBLIC_KEY_SIZE or len(signature) != SIGNATURE_SIZE:
            return False
        P = _lift_x(_int(public_key))
        if P is None:
            logger.debug("Public key %s… is not on the curve", public_key.hex()[:8])
            return False
        r = _int(signature[:32])
        s = _int(signature[32:])
        if r >= SECP256K1_P or s >= SECP256K1_N:
            return False
        e = _int(tagged_hash("BIP0340/challenge", signature[:32] + public_key + message)) % SECP256K1_N
        R = _G.mul_add(s, P, (SECP256K1_N - e) % SECP256K1_N)
        if R == INFINITY or not _has_even_y(R) or R.x() != r:
            return False
        return True
