"""
Configuration for license chain construction and validation.
"""
import os
import logging
from dataclasses import dataclass
from typing import Mapping, Optional

from tracklicense_sdk.hashing import HashEncoding

logger = logging.getLogger(__name__)

DEFAULT_FRESHNESS_WINDOW = 300

FRESHNESS_WINDOW_ENV = "TRACK_LICENSE_FRESHNESS_WINDOW"
HASH_ENCODING_ENV = "TRACK_LICENSE_HASH_ENCODING"


@dataclass(frozen=True)
class LicenseConfig:
    """
    Settings shared by every participant of a license chain.

    Attributes:
        freshness_window: Allowed distance in seconds between a request's
            timestamp and "now" at approval time (inclusive on both sides)
        hash_encoding: Byte layout used to hash request fields
    """
    freshness_window: int = DEFAULT_FRESHNESS_WINDOW
    hash_encoding: HashEncoding = HashEncoding.LENGTH_PREFIXED_V1

    def __post_init__(self):
        if isinstance(self.freshness_window, bool) or not isinstance(self.freshness_window, int):
            raise TypeError("freshness_window must be an integer number of seconds")
        if self.freshness_window < 0:
            raise ValueError("freshness_window must not be negative")
        # Accept the enum's string value as well
        object.__setattr__(self, "hash_encoding", HashEncoding(self.hash_encoding))

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "LicenseConfig":
        """
        Build a configuration from environment variables.

        Args:
            environ: Mapping to read from (defaults to ``os.environ``)

        Returns:
            LicenseConfig with defaults for unset or invalid values
        """
        env = os.environ if environ is None else environ

        window = DEFAULT_FRESHNESS_WINDOW
        raw_window = env.get(FRESHNESS_WINDOW_ENV)
        if raw_window:
            try:
                window = int(raw_window)
                if window < 0:
                    raise ValueError(raw_window)
            except ValueError:
                logger.warning("Invalid %s value %r, using %d",
                               FRESHNESS_WINDOW_ENV, raw_window, DEFAULT_FRESHNESS_WINDOW)
                window = DEFAULT_FRESHNESS_WINDOW

        encoding = HashEncoding.LENGTH_PREFIXED_V1
        raw_encoding = env.get(HASH_ENCODING_ENV)
        if raw_encoding:
            try:
                encoding = HashEncoding(raw_encoding.strip().lower())
            except ValueError:
                logger.warning("Invalid %s value %r, using %s",
                               HASH_ENCODING_ENV, raw_encoding, encoding.value)

        return cls(freshness_window=window, hash_encoding=encoding)
