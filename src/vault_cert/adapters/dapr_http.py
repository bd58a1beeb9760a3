from __future__ import annotations

import logging
from collections.abc import Mapping
from urllib.parse import quote

import httpx

from vault_cert.domain.errors import MetadataQueryError, SecretRetrievalError
from vault_cert.domain.models import ComponentRecord
from vault_cert.ports.metadata_client import MetadataClient
from vault_cert.ports.secret_client import SecretClient

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


def base_url_for_port(http_port: int, host: str = "127.0.0.1") -> str:
    return f"http://{host}:{http_port}"


class _DaprHttpApi:
    # Shared plumbing for the runtime's HTTP API; one request per call, no retries.
    def __init__(
        self,
        *,
        base_url: str,
        client: httpx.Client | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._owns_client = client is None
        self._client = client if client is not None else httpx.Client(base_url=base_url, timeout=timeout)
        self._base_url = base_url.rstrip("/")

    def _url(self, path: str) -> str:
        return f"{self._base_url}{path}"

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> _DaprHttpApi:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class DaprMetadataClient(_DaprHttpApi, MetadataClient):
    def list_components(self) -> list[ComponentRecord]:
        try:
            response = self._client.get(self._url("/v1.0/metadata"))
        except httpx.HTTPError as exc:
            raise MetadataQueryError(f"Metadata request failed: {exc}") from exc
        if response.status_code != httpx.codes.OK:
            raise MetadataQueryError(f"Metadata request returned HTTP {response.status_code}: {response.text}")
        try:
            payload = response.json()
        except ValueError as exc:
            raise MetadataQueryError("Metadata response is not JSON") from exc
        if not isinstance(payload, dict):
            raise MetadataQueryError("Metadata response root must be an object")

        # Newer runtimes use "components"; older ones reported "registeredComponents".
        raw_components = payload.get("components", payload.get("registeredComponents"))
        if raw_components is None:
            return []
        if not isinstance(raw_components, list):
            raise MetadataQueryError("Metadata components must be a list")
        return [_component_from_json(item) for item in raw_components]


class DaprSecretClient(_DaprHttpApi, SecretClient):
    def get_secret(self, store: str, key: str, options: Mapping[str, str] | None = None) -> dict[str, str]:
        path = f"/v1.0/secrets/{quote(store, safe='')}/{quote(key, safe='')}"
        payload = self._get_json(path, options, what=f"secret '{key}' from '{store}'")
        return _string_map(payload, what=f"secret '{key}'")

    def get_bulk_secret(
        self, store: str, options: Mapping[str, str] | None = None
    ) -> dict[str, dict[str, str]]:
        path = f"/v1.0/secrets/{quote(store, safe='')}/bulk"
        payload = self._get_json(path, options, what=f"bulk secrets from '{store}'")
        if not isinstance(payload, dict):
            raise SecretRetrievalError("Bulk secret response must be an object", kind="malformed")
        return {str(name): _string_map(values, what=f"secret '{name}'") for name, values in payload.items()}

    def _get_json(self, path: str, options: Mapping[str, str] | None, *, what: str) -> object:
        logger.debug("GET %s", path)
        try:
            response = self._client.get(self._url(path), params=_metadata_params(options))
        except httpx.HTTPError as exc:
            raise SecretRetrievalError(f"Request for {what} failed: {exc}", kind="unreachable") from exc

        # 204 is how the runtime reports "no such secret"; it must never read as an empty success.
        if response.status_code == httpx.codes.NO_CONTENT:
            raise SecretRetrievalError(f"No {what}", kind="not_found", status=response.status_code)
        if response.status_code != httpx.codes.OK:
            kind = "not_found" if response.status_code == httpx.codes.NOT_FOUND else "error"
            raise SecretRetrievalError(
                f"Request for {what} returned HTTP {response.status_code}: {_error_detail(response)}",
                kind=kind,
                status=response.status_code,
            )
        try:
            return response.json()
        except ValueError as exc:
            raise SecretRetrievalError(f"Response for {what} is not JSON", kind="malformed") from exc


def _metadata_params(options: Mapping[str, str] | None) -> dict[str, str]:
    # Per-request options travel as metadata.<name> query parameters.
    if not options:
        return {}
    return {f"metadata.{name}": value for name, value in options.items()}


def _component_from_json(item: object) -> ComponentRecord:
    if not isinstance(item, dict) or not isinstance(item.get("name"), str):
        raise MetadataQueryError(f"Malformed component entry: {item!r}")
    capabilities = item.get("capabilities") or []
    if not isinstance(capabilities, list):
        raise MetadataQueryError(f"Capabilities of '{item['name']}' must be a list")
    return ComponentRecord(
        name=item["name"],
        type=str(item.get("type", "")),
        version=str(item.get("version", "")),
        capabilities=frozenset(str(cap) for cap in capabilities),
    )


def _string_map(payload: object, *, what: str) -> dict[str, str]:
    if not isinstance(payload, dict):
        raise SecretRetrievalError(f"Response for {what} must be an object", kind="malformed")
    result: dict[str, str] = {}
    for key, value in payload.items():
        if not isinstance(value, str):
            raise SecretRetrievalError(f"Value of '{key}' in {what} is not a string", kind="malformed")
        result[str(key)] = value
    return result


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text
    if isinstance(body, dict):
        code = body.get("errorCode", "")
        message = body.get("message", "")
        return f"{code} {message}".strip() or response.text
    return response.text
