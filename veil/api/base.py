"""
Base HTTP client with envelope handling.

Serializes REST and GraphQL requests, attaches the bearer credential,
unwraps the {data, errors} envelope and raises typed errors. Does not retry;
session-expiry retries live in the domain client.

Responses are parsed with parse_float=Decimal so precision-sensitive values
never pass through binary floating point.
"""

import json
import re
import time
from decimal import Decimal
from enum import Enum
from typing import Optional, Any, Dict
from urllib.parse import urljoin
import logging

import orjson
import requests
from requests.adapters import HTTPAdapter

from ..config import VeilSettings
from ..exceptions import RequestError, TransportError, RequestTimeoutError, ValidationError
from ..metrics import Metrics

logger = logging.getLogger(__name__)

_UNDERSCORE_RE = re.compile(r"_([a-zA-Z0-9])")


def to_camel_case(key: str) -> str:
    """
    Convert an underscore_case key to camelCase.

    Leading underscores are kept so private keys like "_id" survive.

    Examples:
        >>> to_camel_case("token_amount_filled")
        'tokenAmountFilled'
        >>> to_camel_case("numTicks")
        'numTicks'
    """
    stripped = key.lstrip("_")
    prefix = key[: len(key) - len(stripped)]
    return prefix + _UNDERSCORE_RE.sub(lambda m: m.group(1).upper(), stripped)


def camelize_keys(value: Any) -> Any:
    """Recursively convert object keys to camelCase; values are untouched."""
    if isinstance(value, dict):
        return {
            (to_camel_case(k) if isinstance(k, str) else k): camelize_keys(v)
            for k, v in value.items()
        }
    if isinstance(value, list):
        return [camelize_keys(item) for item in value]
    return value


def _json_default(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    raise TypeError(f"Type is not JSON serializable: {type(value).__name__}")


def _query_value(value: Any) -> str:
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


class BaseAPIClient:
    """
    Base HTTP client for one API host.

    Thread-safe for concurrent use from worker threads.
    """

    def __init__(
        self,
        base_url: str,
        settings: VeilSettings,
        metrics: Optional[Metrics] = None,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize base API client.

        Args:
            base_url: API base URL
            settings: Client settings
            metrics: Optional metrics collector
            session: Optional preconfigured requests session
        """
        self.base_url = base_url.rstrip("/") + "/"
        self.settings = settings
        self.metrics = metrics

        self.session = session or requests.Session()

        adapter = HTTPAdapter(
            pool_connections=settings.pool_connections,
            pool_maxsize=settings.pool_maxsize,
            max_retries=0,  # No transport-level retries
            pool_block=False
        )
        self.session.mount('https://', adapter)
        self.session.mount('http://', adapter)

        self.session.headers.update({
            "Content-Type": "application/json",
            "Accept": "application/json",
        })

        self.timeout = (settings.connect_timeout, settings.request_timeout)

    def _build_url(self, path: str) -> str:
        return urljoin(self.base_url, path.lstrip("/"))

    def _build_params(self, params: Optional[Dict[str, Any]]) -> Optional[list[tuple[str, str]]]:
        """Drop None values and sort keys so the query string is stable."""
        if not params:
            return None
        return [
            (key, _query_value(value))
            for key, value in sorted(params.items())
            if value is not None
        ]

    def request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json_data: Optional[Dict[str, Any]] = None,
        token: Optional[str] = None
    ) -> Any:
        """
        Make HTTP request and unwrap the response envelope.

        Args:
            method: HTTP method
            path: Request path relative to the base URL
            params: Query parameters (GET)
            json_data: JSON body (POST/DELETE)
            token: Optional bearer credential

        Returns:
            The envelope's data payload with keys in camelCase

        Raises:
            RequestError: On an envelope with a non-empty errors array
            RequestTimeoutError: On timeout
            TransportError: On any other transport failure
            ValidationError: If the body cannot be serialized to JSON
        """
        method = method.upper()
        url = self._build_url(path)

        headers: Dict[str, str] = {}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        body = None
        if json_data is not None and method != "GET":
            try:
                body = orjson.dumps(json_data, default=_json_default)
            except orjson.JSONEncodeError as e:
                raise ValidationError(f"Request body for {url} is not serializable: {e}") from e

        if self.settings.log_requests:
            logger.debug(f"{method} {url} params={params}")

        start = time.time()
        status = "error"
        try:
            try:
                response = self.session.request(
                    method=method,
                    url=url,
                    headers=headers,
                    params=self._build_params(params) if method == "GET" else None,
                    data=body,
                    timeout=self.timeout
                )
            except requests.exceptions.Timeout as e:
                logger.error(f"Request timeout: {method} {url}")
                raise RequestTimeoutError(f"Request timeout: {e}", url=url) from e
            except requests.exceptions.RequestException as e:
                logger.error(f"Connection error: {method} {url}: {type(e).__name__}")
                raise TransportError(f"Connection error: {e}", url=url) from e

            status = str(response.status_code)
            return self._handle_response(method, url, response)
        finally:
            if self.metrics:
                endpoint = path.split("?")[0]
                self.metrics.track_api_request(method, endpoint, status)
                self.metrics.track_api_latency(method, endpoint, time.time() - start)

    def _handle_response(self, method: str, url: str, response: requests.Response) -> Any:
        status_code = response.status_code

        try:
            payload = json.loads(response.content, parse_float=Decimal)
        except ValueError:
            if status_code >= 400:
                logger.error(f"{method} {url} failed with {status_code}: {response.text[:200]}")
                raise TransportError(
                    f"Fetch error: {status_code} {response.reason}",
                    status_code=status_code,
                    url=url
                )
            logger.error(f"Invalid JSON response from {url}: {response.text[:200]}")
            raise TransportError(
                "Error when converting response to JSON",
                status_code=status_code,
                url=url
            )

        if not isinstance(payload, dict):
            raise TransportError(
                f"Unexpected response envelope from {url}: {type(payload).__name__}",
                status_code=status_code,
                url=url
            )

        errors = payload.get("errors")
        if errors:
            if not isinstance(errors, list):
                errors = [errors]
            logger.debug(f"{method} {url} returned {len(errors)} error(s)")
            raise RequestError(errors, url, status_code=status_code)

        if status_code >= 400:
            raise TransportError(
                f"{method} {url} failed with {status_code}",
                status_code=status_code,
                url=url
            )

        if "data" not in payload:
            raise TransportError(
                f"Response envelope from {url} has no data",
                status_code=status_code,
                url=url
            )

        return camelize_keys(payload["data"])

    def get(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        token: Optional[str] = None
    ) -> Any:
        """Make GET request."""
        return self.request("GET", path, params=params, token=token)

    def post(
        self,
        path: str,
        json_data: Optional[Dict[str, Any]] = None,
        token: Optional[str] = None
    ) -> Any:
        """Make POST request."""
        return self.request("POST", path, json_data=json_data, token=token)

    def delete(
        self,
        path: str,
        json_data: Optional[Dict[str, Any]] = None,
        token: Optional[str] = None
    ) -> Any:
        """Make DELETE request."""
        return self.request("DELETE", path, json_data=json_data, token=token)

    def graphql(
        self,
        query: str,
        variables: Optional[Dict[str, Any]] = None,
        token: Optional[str] = None
    ) -> Any:
        """
        Execute a GraphQL document against /graphql.

        Args:
            query: GraphQL document
            variables: Document variables
            token: Optional bearer credential

        Returns:
            The data payload
        """
        return self.post(
            "/graphql",
            json_data={"query": query, "variables": variables or {}},
            token=token
        )

    def close(self) -> None:
        """Close session and cleanup resources."""
        self.session.close()
        logger.info("API client session closed")
