"""
Pytest fixtures for the TrackLicense SDK tests.
"""
import hashlib

import pytest

from tracklicense_sdk import LicenseChain, TrackRequest, derive_public_key, generate_private_key, random_nonce
from tracklicense_sdk.chain import reset_default_chain

# Fixed "now" for tests that should not depend on the wall clock
FIXED_NOW = 1_700_000_000


class FakeScheme:
    """Insecure hash-based signature scheme used to test the orchestrator in isolation"""
    name = "fake-sha512"

    def __init__(self):
        self.signed = []

    def derive_public_key(self, private_key: bytes) -> bytes:
        return hashlib.sha256(b"pub:" + private_key).digest()

    def sign(self, message: bytes, private_key: bytes) -> bytes:
        self.signed.append(message)
        return hashlib.sha512(self.derive_public_key(private_key) + message).digest()

    def verify(self, signature: bytes, message: bytes, public_key: bytes) -> bool:
        return signature == hashlib.sha512(public_key + message).digest()


@pytest.fixture(autouse=True)
def _reset_default_chain():
    """Make sure module-level helpers pick up per-test environment"""
    reset_default_chain()
    yield
    reset_default_chain()


@pytest.fixture(scope="session")
def host_key():
    return generate_private_key()


@pytest.fixture(scope="session")
def client_key():
    return generate_private_key()


@pytest.fixture(scope="session")
def host_pubkey(host_key):
    return derive_public_key(host_key)


@pytest.fixture(scope="session")
def client_pubkey(client_key):
    return derive_public_key(client_key)


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def clock():
    """Clock frozen at FIXED_NOW"""
    return lambda: FIXED_NOW


@pytest.fixture
def chain(clock):
    """LicenseChain with the real Schnorr scheme and a frozen clock"""
    return LicenseChain(clock=clock)


@pytest.fixture
def request_factory(client_pubkey):
    """Build valid requests, overriding selected fields"""
    def make(**overrides):
        fields = {
            "client_pubkey": client_pubkey,
            "track_id": "some-track-id",
            "r": random_nonce(),
            "timestamp": FIXED_NOW,
        }
        fields.update(overrides)
        return TrackRequest(**fields)
    return make


@pytest.fixture
def track_request(request_factory):
    return request_factory()


@pytest.fixture
def track_license(chain, track_request, host_key):
    license = chain.approve_request(track_request, host_key)
    assert license is not None
    return license


@pytest.fixture
def track_receipt(chain, track_license, client_key):
    receipt = chain.confirm_license(track_license, client_key)
    assert receipt is not None
    return receipt


@pytest.fixture
def fake_scheme():
    return FakeScheme()
