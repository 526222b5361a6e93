"""Client configuration loaded from the environment.

Environment variables:
    REMOTE_ENTITIES_API_KEY   API key sent with every call (required).
    REMOTE_ENTITIES_ENDPOINT  REST endpoint URL (default: Flickr REST API).
    REMOTE_ENTITIES_TIMEOUT   Request timeout in seconds (default: 30).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from .errors import ConfigurationError

DEFAULT_ENDPOINT = "https://api.flickr.com/services/rest/"
DEFAULT_TIMEOUT = 30.0


@dataclass
class ClientConfig:
    """Settings for :class:`~remote_entities.client.RestClient`.

    Args:
        api_key: Key identifying the calling application.
        endpoint: URL every remote method is sent to.
        timeout: Per-request timeout in seconds.
    """

    api_key: Optional[str] = None
    endpoint: str = DEFAULT_ENDPOINT
    timeout: float = DEFAULT_TIMEOUT

    @classmethod
    def from_env(cls) -> "ClientConfig":
        raw_timeout = os.getenv("REMOTE_ENTITIES_TIMEOUT", str(DEFAULT_TIMEOUT))
        try:
            timeout = float(raw_timeout)
        except ValueError:
            raise ConfigurationError(
                f"REMOTE_ENTITIES_TIMEOUT must be a number, got {raw_timeout!r}"
            ) from None
        return cls(
            api_key=os.getenv("REMOTE_ENTITIES_API_KEY") or None,
            endpoint=os.getenv("REMOTE_ENTITIES_ENDPOINT", DEFAULT_ENDPOINT),
            timeout=timeout,
        )
