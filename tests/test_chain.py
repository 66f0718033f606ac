"""
Tests for building and checking license chains.
"""
import json
import logging

import pytest

from tracklicense_sdk import (
    HashEncoding, LicenseChain, LicenseConfig, TrackLicense, TrackReceipt, TrackRequest,
    approve_request, confirm_license, derive_public_key, generate_private_key, get_default_scheme,
    is_track_license_valid, is_track_receipt_valid, is_track_request_current, is_track_request_valid,
    now_seconds, random_nonce,
)
from tracklicense_sdk.exceptions import InvalidPrivateKeyError, RejectionReason


class TestApproveRequest:
    """Test the host side of the handshake."""

    def test_valid_request(self, chain, track_request, host_key, host_pubkey):
        license = chain.approve_request(track_request, host_key)
        assert isinstance(license, TrackLicense)
        assert chain.is_track_license_valid(license) is True
        assert license.host_pubkey == host_pubkey
        assert license.request == track_request

    def test_accepts_wire_mapping(self, chain, track_request, host_key):
        license = chain.approve_request(track_request.to_wire(), host_key)
        assert license is not None
        assert license.request == track_request

    def test_accepts_raw_key_bytes(self, chain, track_request, host_key, host_pubkey):
        license = chain.approve_request(track_request, bytes.fromhex(host_key))
        assert license.host_pubkey == host_pubkey

    def test_invalid_request(self, chain, track_request, host_key):
        data = {**track_request.to_wire(), "clientPubkey": "invalid-pubkey"}
        assert chain.approve_request(data, host_key) is None
        assert chain.check_request(data) == RejectionReason.MALFORMED

    @pytest.mark.parametrize("offset", [-301, 301, -6 * 60])
    def test_stale_request(self, chain, request_factory, fixed_now, host_key, offset):
        req = request_factory(timestamp=fixed_now + offset)
        assert chain.approve_request(req, host_key) is None
        assert chain.check_request(req) == RejectionReason.STALE

    def test_structure_checked_before_freshness(self, chain, track_request, host_key):
        data = {**track_request.to_wire(), "trackId": "", "timestamp": 0}
        assert chain.check_request(data) == RejectionReason.MALFORMED

    def test_does_not_mutate_request(self, chain, track_request, host_key):
        before = track_request.to_wire()
        chain.approve_request(track_request, host_key)
        assert track_request.to_wire() == before

    def test_invalid_host_key_raises(self, chain, track_request):
        with pytest.raises(InvalidPrivateKeyError):
            chain.approve_request(track_request, "00" * 32)

    def test_distinct_nonces_give_distinct_signatures(self, chain, request_factory, host_key):
        first = chain.approve_request(request_factory(), host_key)
        second = chain.approve_request(request_factory(), host_key)
        assert first.host_signature != second.host_signature


class TestConfirmLicense:
    """Test the client side of the handshake."""

    def test_valid_license(self, chain, track_license, client_key, client_pubkey):
        receipt = chain.confirm_license(track_license, client_key)
        assert isinstance(receipt, TrackReceipt)
        assert chain.is_track_receipt_valid(receipt) is True
        assert receipt.client_pubkey == client_pubkey
        assert receipt.license == track_license

    def test_tampered_host_signature(self, chain, track_license, client_key):
        sig = track_license.host_signature
        tampered = sig[:-1] + ("0" if sig[-1] != "0" else "1")
        data = {**track_license.to_wire(), "hostSignature": tampered}
        assert chain.confirm_license(data, client_key) is None

    def test_fabricated_license(self, chain, track_request, client_key):
        nonce = random_nonce()
        data = {**track_request.to_wire(), "hostPubkey": "invalid-pubkey", "hostSignature": nonce * 4}
        assert chain.confirm_license(data, client_key) is None

    def test_key_mismatch(self, chain, track_license, caplog):
        """Only the requesting client can confirm its license"""
        with caplog.at_level(logging.WARNING, logger="tracklicense_sdk.chain"):
            assert chain.confirm_license(track_license, generate_private_key()) is None
        assert RejectionReason.KEY_MISMATCH.value in caplog.text

    def test_freshness_not_rechecked(self, track_license, client_key, fixed_now):
        """Staleness is only enforced when the host approves"""
        later = LicenseChain(clock=lambda: fixed_now + 3600)
        assert later.confirm_license(track_license, client_key) is not None

    def test_client_signs_host_signature_bytes(self, track_receipt):
        scheme = get_default_scheme()
        assert scheme.verify(
            bytes.fromhex(track_receipt.client_signature),
            bytes.fromhex(track_receipt.host_signature),
            bytes.fromhex(track_receipt.client_pubkey),
        ) is True


class TestChainPredicates:
    """Test the public is_track_* predicates."""

    def test_unrelated_host_pubkey(self, chain, track_license):
        data = {**track_license.to_wire(), "hostPubkey": derive_public_key(generate_private_key())}
        assert chain.is_track_license_valid(data) is False
        assert chain.check_license(data) == RejectionReason.BAD_HOST_SIGNATURE

    def test_receipt_with_random_client_signature(self, chain, track_license, client_pubkey):
        data = {**track_license.to_wire(), "clientSignature": random_nonce() + random_nonce() + random_nonce() + random_nonce()}
        assert chain.is_track_receipt_valid(data) is False
        assert chain.check_receipt(data) == RejectionReason.BAD_CLIENT_SIGNATURE

    def test_records_survive_json_transport(self, chain, track_receipt):
        received = TrackReceipt.from_json(track_receipt.to_json())
        assert received == track_receipt
        assert chain.is_track_receipt_valid(json.loads(track_receipt.to_json())) is True

    def test_request_predicates(self, chain, track_request, request_factory, fixed_now):
        assert chain.is_track_request_valid(track_request) is True
        assert chain.is_track_request_current(track_request) is True
        stale = request_factory(timestamp=fixed_now - 301)
        assert chain.is_track_request_valid(stale) is True
        assert chain.is_track_request_current(stale) is False


class TestChainConfiguration:
    """Test injected schemes and configuration."""

    def test_fake_scheme(self, fake_scheme, track_request, host_key, client_key, clock):
        chain = LicenseChain(scheme=fake_scheme, clock=clock)
        # Receipts require the client key to derive the request's client pubkey
        req = track_request.model_copy(update={
            "client_pubkey": fake_scheme.derive_public_key(bytes.fromhex(client_key)).hex()
        })
        license = chain.approve_request(req, host_key)
        receipt = chain.confirm_license(license, client_key)
        assert chain.is_track_receipt_valid(receipt) is True
        assert fake_scheme.signed[1] == bytes.fromhex(license.host_signature)
        # The real scheme rejects what the fake one produced
        assert LicenseChain(clock=clock).is_track_license_valid(license) is False

    def test_json_array_encoding(self, track_request, host_key, clock):
        legacy = LicenseChain(config=LicenseConfig(hash_encoding=HashEncoding.JSON_ARRAY), clock=clock)
        current = LicenseChain(clock=clock)
        license = legacy.approve_request(track_request, host_key)
        assert legacy.is_track_license_valid(license) is True
        assert current.is_track_license_valid(license) is False

    def test_custom_freshness_window(self, request_factory, fixed_now, host_key, clock):
        chain = LicenseChain(config=LicenseConfig(freshness_window=3600), clock=clock)
        assert chain.approve_request(request_factory(timestamp=fixed_now - 1800), host_key) is not None


class TestModuleLevelHelpers:
    """Test the module-level functions against the wall clock."""

    def test_end_to_end(self):
        """Client → host → client handshake with fresh keys"""
        client_key = generate_private_key()
        host_key = generate_private_key()
        request = TrackRequest(
            client_pubkey=derive_public_key(client_key),
            track_id="track-42",
            r=random_nonce(),
            timestamp=now_seconds(),
        )
        assert is_track_request_valid(request) is True
        assert is_track_request_current(request) is True

        license = approve_request(request, host_key)
        assert license is not None
        assert is_track_license_valid(license) is True
        assert license.host_pubkey == derive_public_key(host_key)

        receipt = confirm_license(license, client_key)
        assert receipt is not None
        assert is_track_receipt_valid(receipt) is True
        assert receipt.client_pubkey == derive_public_key(client_key)
        assert get_default_scheme().verify(
            bytes.fromhex(receipt.client_signature),
            bytes.fromhex(license.host_signature),
            bytes.fromhex(receipt.client_pubkey),
        ) is True

    def test_window_from_environment(self, monkeypatch, client_pubkey, host_key):
        monkeypatch.setenv("TRACK_LICENSE_FRESHNESS_WINDOW", "7200")
        request = TrackRequest(
            client_pubkey=client_pubkey, track_id="track-42", r=random_nonce(), timestamp=now_seconds() - 3600
        )
        assert approve_request(request, host_key) is not None
