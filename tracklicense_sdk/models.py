"""
Data models for the TrackLicense SDK.

The three records form a chain of custody: a ``TrackRequest`` is approved by
a host into a ``TrackLicense``, which the client confirms into a
``TrackReceipt``. Each tier embeds the previous one rather than extending it.

On the wire the records are flat JSON objects using the field names
``clientPubkey``, ``trackId``, ``r``, ``timestamp``, ``hostSignature``,
``hostPubkey`` and ``clientSignature``.
"""
import json
from typing import Any, Dict, Mapping, Union

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, ValidationError, model_validator

from .exceptions import RecordError

HEX_PUBKEY_PATTERN = r"^[0-9a-f]{64}$"
HEX_NONCE_PATTERN = r"^[0-9a-f]{32}$"
HEX_SIGNATURE_PATTERN = r"^[0-9a-f]{128}$"

# The canonical encoding stores the timestamp as a signed 64-bit integer
TIMESTAMP_MIN = -(2 ** 63)
TIMESTAMP_MAX = 2 ** 63 - 1

REQUEST_FIELDS = ("clientPubkey", "trackId", "r", "timestamp")
LICENSE_FIELDS = REQUEST_FIELDS + ("hostSignature", "hostPubkey")
RECEIPT_FIELDS = LICENSE_FIELDS + ("clientSignature",)


class _Record(BaseModel):
    """Common behaviour for the three record tiers"""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    def to_wire(self) -> Dict[str, Any]:
        raise NotImplementedError

    def to_json(self, **kwargs) -> str:
        """Serialize the record to its flat JSON wire form"""
        return json.dumps(self.to_wire(), **kwargs)

    @classmethod
    def from_wire(cls, data: Any):
        """
        Build a record from its wire form, enforcing every field contract.

        Args:
            data: Flat (or nested) mapping, or an existing record

        Returns:
            A validated record of this class

        Raises:
            RecordError: If any field is missing, mistyped or malformed
        """
        if isinstance(data, _Record):
            data = data.to_wire()
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise RecordError(f"Invalid {cls.__name__}: {e}") from e

    @classmethod
    def from_json(cls, text: Union[str, bytes]):
        """
        Parse a record from JSON text.

        Raises:
            RecordError: If the text is not JSON or the record is malformed
        """
        try:
            data = json.loads(text)
        except ValueError as e:
            raise RecordError(f"Invalid JSON for {cls.__name__}: {e}") from e
        return cls.from_wire(data)


class TrackRequest(_Record):
    """A client's request to use a single track"""
    client_pubkey: StrictStr = Field(..., alias="clientPubkey", pattern=HEX_PUBKEY_PATTERN)
    track_id: StrictStr = Field(..., alias="trackId", min_length=1)
    r: StrictStr = Field(..., pattern=HEX_NONCE_PATTERN)
    timestamp: StrictInt = Field(..., ge=TIMESTAMP_MIN, le=TIMESTAMP_MAX)

    def to_wire(self) -> Dict[str, Any]:
        return {
            "clientPubkey": self.client_pubkey,
            "trackId": self.track_id,
            "r": self.r,
            "timestamp": self.timestamp,
        }


def _split_flat(data: Any, nested_key: str, own_fields) -> Any:
    # Flat wire dicts are regrouped so the embedded record validates on its own
    if isinstance(data, Mapping) and nested_key not in data:
        outer = {k: v for k, v in data.items() if k in own_fields}
        outer[nested_key] = {k: v for k, v in data.items() if k not in own_fields}
        return outer
    return data


class TrackLicense(_Record):
    """A request approved and signed by a host"""
    request: TrackRequest
    host_signature: StrictStr = Field(..., alias="hostSignature", pattern=HEX_SIGNATURE_PATTERN)
    host_pubkey: StrictStr = Field(..., alias="hostPubkey", pattern=HEX_PUBKEY_PATTERN)

    @model_validator(mode="before")
    @classmethod
    def _nest_request(cls, data: Any) -> Any:
        return _split_flat(data, "request", ("hostSignature", "hostPubkey", "host_signature", "host_pubkey"))

    @property
    def client_pubkey(self) -> str:
        return self.request.client_pubkey

    @property
    def track_id(self) -> str:
        return self.request.track_id

    @property
    def r(self) -> str:
        return self.request.r

    @property
    def timestamp(self) -> int:
        return self.request.timestamp

    def to_wire(self) -> Dict[str, Any]:
        wire = self.request.to_wire()
        wire["hostSignature"] = self.host_signature
        wire["hostPubkey"] = self.host_pubkey
        return wire


class TrackReceipt(_Record):
    """A license acknowledged and countersigned by the requesting client"""
    license: TrackLicense
    client_signature: StrictStr = Field(..., alias="clientSignature", pattern=HEX_SIGNATURE_PATTERN)

    @model_validator(mode="before")
    @classmethod
    def _nest_license(cls, data: Any) -> Any:
        return _split_flat(data, "license", ("clientSignature", "client_signature"))

    @property
    def request(self) -> TrackRequest:
        return self.license.request

    @property
    def client_pubkey(self) -> str:
        return self.license.request.client_pubkey

    @property
    def track_id(self) -> str:
        return self.license.request.track_id

    @property
    def r(self) -> str:
        return self.license.request.r

    @property
    def timestamp(self) -> int:
        return self.license.request.timestamp

    @property
    def host_signature(self) -> str:
        return self.license.host_signature

    @property
    def host_pubkey(self) -> str:
        return self.license.host_pubkey

    def to_wire(self) -> Dict[str, Any]:
        wire = self.license.to_wire()
        wire["clientSignature"] = self.client_signature
        return wire


Record = Union[_Record, Mapping[str, Any]]


def parse_request(record: Record) -> TrackRequest:
    """Re-validate any request-shaped record (a license or receipt also qualifies)"""
    return TrackRequest.from_wire(record)


def parse_license(record: Record) -> TrackLicense:
    """Re-validate any license-shaped record (a receipt also qualifies)"""
    return TrackLicense.from_wire(record)


def parse_receipt(record: Record) -> TrackReceipt:
    """Re-validate a receipt-shaped record"""
    return TrackReceipt.from_wire(record)
