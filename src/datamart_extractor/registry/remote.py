# src/datamart_extractor/registry/remote.py
# Registry client speaking the Jolokia HTTP/JSON protocol.

"""
RemoteRegistry reads a registry exposed over HTTP with JSON requests in the
Jolokia style::

    POST {url}  {"type": "search", "mbean": "java.lang:type=*"}
    POST {url}  {"type": "read", "mbean": "java.lang:type=Memory",
                 "attribute": "HeapMemoryUsage"}

Every response carries its own ``status``; anything other than 200 is an
error described by ``error_type`` and ``error``.
"""

import logging
from typing import Any, Optional
from urllib.parse import urlparse

import httpx

from datamart_extractor.errors import (
    AttributeReadError,
    MalformedObjectNameError,
    RegistryConnectionError,
    RegistryIOError,
)
from datamart_extractor.registry.base import NameLike, RegistryConnection, as_object_name
from datamart_extractor.registry.object_name import ObjectName

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0


def validate_url(url: str) -> str:
    """Return the URL without a trailing slash. Raises RegistryConnectionError."""
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise RegistryConnectionError(f"Malformed registry URL: {url!r}")
    return url.rstrip("/")


def _json_object(response: httpx.Response) -> dict[str, Any]:
    """Decode a response body that must be a single JSON object."""
    payload = response.json()
    if not isinstance(payload, dict):
        raise ValueError(f"expected a JSON object, got {type(payload).__name__}")
    return payload


class RemoteRegistry(RegistryConnection):
    """
    Connection to a remote registry.

    Construct through ``RemoteRegistry.connect(url)``, which verifies the
    agent answers before returning.
    """

    def __init__(
        self,
        url: str,
        client: Optional[httpx.Client] = None,
        timeout: Optional[float] = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self.url = validate_url(url)
        self.timeout = timeout
        self._client = client or httpx.Client(timeout=timeout)
        self.agent_info: dict[str, Any] = {}

    @classmethod
    def connect(
        cls,
        url: str,
        client: Optional[httpx.Client] = None,
        timeout: Optional[float] = DEFAULT_TIMEOUT_SECONDS,
    ) -> "RemoteRegistry":
        """Open a connection and perform the version handshake."""
        registry = cls(url, client=client, timeout=timeout)
        try:
            response = registry._client.get(f"{registry.url}/version")
            response.raise_for_status()
            payload = _json_object(response)
        except (httpx.HTTPError, ValueError) as e:
            registry.close()
            raise RegistryConnectionError(f"Cannot connect to registry at {url}: {e}") from e

        if payload.get("status") != 200:
            registry.close()
            raise RegistryConnectionError(
                f"Registry at {url} refused the handshake: {payload.get('error', payload)}"
            )
        info = payload.get("value")
        registry.agent_info = info if isinstance(info, dict) else {}
        logger.info(
            "Connected to registry at %s (agent %s)",
            registry.url,
            registry.agent_info.get("agent", "unknown"),
        )
        return registry

    @property
    def description(self) -> str:
        return f"remote registry at {self.url}"

    def _request(self, body: dict[str, Any]) -> dict[str, Any]:
        try:
            response = self._client.post(self.url, json=body)
            response.raise_for_status()
            return _json_object(response)
        except (httpx.HTTPError, ValueError) as e:
            raise RegistryIOError(f"{body.get('type')} request to {self.url} failed: {e}") from e

    def query_names(self, pattern: NameLike) -> list[ObjectName]:
        selector = as_object_name(pattern)
        payload = self._request({"type": "search", "mbean": selector.canonical_name})
        if payload.get("status") != 200:
            error_type = payload.get("error_type", "")
            message = payload.get("error", "unknown error")
            if "MalformedObjectName" in error_type:
                raise MalformedObjectNameError(message)
            raise RegistryIOError(f"Search for {selector} failed: {message}")
        names = [ObjectName.parse(n) for n in payload.get("value") or []]
        return sorted(names, key=lambda n: n.canonical_name)

    def get_attribute(self, name: NameLike, attribute: str) -> Any:
        object_name = as_object_name(name)
        payload = self._request(
            {"type": "read", "mbean": object_name.canonical_name, "attribute": attribute}
        )
        if payload.get("status") != 200:
            raise AttributeReadError(
                f"Reading {attribute!r} from {object_name} failed: "
                f"{payload.get('error', 'unknown error')}"
            )
        return payload.get("value")

    def close(self) -> None:
        self._client.close()
