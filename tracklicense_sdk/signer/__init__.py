"""
Signature schemes used to approve and confirm track licenses.

The chain orchestrator only depends on the ``SignatureScheme`` protocol, so a
different curve or a fake scheme in tests can be swapped in.
"""
from typing import Optional, Protocol, runtime_checkable

from tracklicense_sdk.signer.schnorr import SchnorrSecp256k1


@runtime_checkable
class SignatureScheme(Protocol):
    """Protocol for signature schemes over raw bytes"""
    name: str

    def sign(self, message: bytes, private_key: bytes) -> bytes:
        """Sign message and return the raw signature"""
        ...

    def verify(self, signature: bytes, message: bytes, public_key: bytes) -> bool:
        """Return True if signature is valid for message under public_key"""
        ...

    def derive_public_key(self, private_key: bytes) -> bytes:
        """Return the public key matching private_key"""
        ...


_default_scheme: Optional[SignatureScheme] = None


def get_default_scheme() -> SignatureScheme:
    """Get or create the shared BIP-340 Schnorr scheme"""
    global _default_scheme
    if _default_scheme is None:
        _default_scheme = SchnorrSecp256k1()
    return _default_scheme


__all__ = ["SignatureScheme", "SchnorrSecp256k1", "get_default_scheme"]
