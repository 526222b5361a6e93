"""Remote call collaborator used by generated finders.

Finders only depend on the :class:`RemoteCall` contract: a method name and a
parameter mapping go in, a :class:`Response` whose ``body`` is an XML element
comes out, or an exception propagates. :class:`RestClient` implements that
contract for REST endpoints answering with an ``<rsp stat="...">`` envelope
(the Flickr REST format); tests and other transports can :func:`configure`
any object with a compatible ``call`` method.

Example::

    from remote_entities import RestClient, configure

    configure(RestClient(api_key="..."))
    user = User.find_by_username("fleakr")
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Protocol

import httpx

from .config import DEFAULT_ENDPOINT, DEFAULT_TIMEOUT, ClientConfig
from .errors import ConfigurationError, RemoteCallError
from .populator import parse_document

logger = logging.getLogger(__name__)

ENVELOPE_TAG = "rsp"


@dataclass
class Response:
    """Result of a successful remote call.

    Attributes:
        method: Remote method that produced the response.
        body: Parsed response document (the ``rsp`` envelope for REST calls).
        status_code: HTTP status code, when the transport is HTTP.
    """

    method: str
    body: ET.Element
    status_code: int = 200


class RemoteCall(Protocol):
    def call(self, method: str, params: Mapping[str, Any]) -> Response: ...


def _encode_params(params: Mapping[str, Any]) -> Dict[str, str]:
    encoded = {}
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, bool):
            encoded[key] = "1" if value else "0"
        elif isinstance(value, (list, tuple)):
            encoded[key] = ",".join(str(v) for v in value)
        else:
            encoded[key] = str(value)
    return encoded


class RestClient:
    """Issue remote method calls over HTTP GET using ``httpx``."""

    def __init__(
        self,
        api_key: str,
        endpoint: str = DEFAULT_ENDPOINT,
        timeout: float = DEFAULT_TIMEOUT,
        http_client: Optional[httpx.Client] = None,
    ) -> None:
        self.api_key = api_key
        self.endpoint = endpoint
        self.client = http_client or httpx.Client(timeout=timeout)

    @classmethod
    def from_config(cls, config: ClientConfig) -> "RestClient":
        if not config.api_key:
            raise ConfigurationError("An API key is required to build a RestClient")
        return cls(config.api_key, endpoint=config.endpoint, timeout=config.timeout)

    def __enter__(self) -> "RestClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        self.client.close()

    def call(self, method: str, params: Optional[Mapping[str, Any]] = None) -> Response:
        """Invoke ``method`` with ``params``.

        Args:
            method: Remote method name, e.g. ``people.getInfo``.
            params: Method arguments; values are sent as strings.

        Returns:
            Response wrapping the parsed ``rsp`` envelope.

        Raises:
            httpx.HTTPError: On transport failures and HTTP error statuses.
            RemoteCallError: If the API reports a failure or answers with a
                malformed document.
        """
        query = {"method": method, "api_key": self.api_key}
        query.update(_encode_params(params or {}))
        logger.debug(f"Calling {method} with {sorted(query)}")

        http_response = self.client.get(self.endpoint, params=query)
        http_response.raise_for_status()

        try:
            body = parse_document(http_response.content)
        except ET.ParseError as e:
            raise RemoteCallError(f"Malformed response: {e}", method=method) from e

        if body.tag == ENVELOPE_TAG and body.get("stat") == "fail":
            error = body.find("err")
            code = error.get("code") if error is not None else None
            message = error.get("msg", "") if error is not None else ""
            logger.warning(f"{method} failed: {message} (code {code})")
            raise RemoteCallError(message or "Remote call failed", code=code, method=method)

        return Response(method=method, body=body, status_code=http_response.status_code)


_client: Optional[RemoteCall] = None


def configure(client: RemoteCall) -> RemoteCall:
    """Set the client used by every finder and association."""
    global _client
    _client = client
    return client


def reset_client() -> None:
    global _client
    _client = None


def get_client() -> RemoteCall:
    """Return the configured client, building one from the environment if needed.

    Raises:
        ConfigurationError: If nothing is configured and no API key is set.
    """
    global _client
    if _client is None:
        config = ClientConfig.from_env()
        if not config.api_key:
            raise ConfigurationError(
                "No remote client configured: call remote_entities.configure() "
                "or set REMOTE_ENTITIES_API_KEY"
            )
        _client = RestClient.from_config(config)
    return _client
