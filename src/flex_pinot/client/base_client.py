"""Base HTTP client for Flex Pinot.

This module provides a synchronous HTTP client with Basic authentication,
request/response logging and mapping of error responses to exceptions.
"""

import json
import time
from typing import Any
from urllib.parse import urljoin

import httpx

from flex_pinot.client.exceptions import (
    APIError,
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ServerError,
    TransportError,
)
from flex_pinot.config import FlexInstanceConfig
from flex_pinot.utils.logging import (
    get_logger,
    log_exchange,
    sanitize_payload,
    truncate_payload,
)

logger = get_logger(__name__)

MEDIA_TYPE = "application/vnd.nativ.mio.v1+json"


class BaseAPIClient:
    """Synchronous HTTP client for the Flex REST API.

    This client provides:
    - HTTP Basic authentication and the vendor media type on every request
    - Request/response logging (payloads only when enabled)
    - Proper error handling and exception mapping
    """

    def __init__(
        self,
        config: FlexInstanceConfig,
        log_payloads: bool = False,
        max_payload_size: int = 10000,
        transport: httpx.BaseTransport | None = None,
    ):
        """Initialize base API client.

        Args:
            config: Flex instance connection settings
            log_payloads: Log request/response bodies at DEBUG level
            max_payload_size: Maximum payload size (chars) to log before truncation
            transport: Optional httpx transport (used by tests)
        """
        self.base_url = config.url.rstrip("/")
        self.log_payloads = log_payloads
        self.max_payload_size = max_payload_size

        self.client = httpx.Client(
            headers=self._build_headers(config.basic_auth),
            timeout=httpx.Timeout(config.timeout, connect=10.0),
            verify=config.verify_ssl,
            follow_redirects=True,
            transport=transport,
        )

        logger.debug("client_initialized", base_url=self.base_url)

    def _build_headers(self, basic_auth: str) -> dict[str, str]:
        """Build HTTP headers for requests."""
        return {
            "Authorization": f"Basic {basic_auth}",
            "Content-Type": MEDIA_TYPE,
        }

    def _build_url(self, endpoint: str) -> str:
        """Build full URL from endpoint.

        Args:
            endpoint: API endpoint path

        Returns:
            Full URL
        """
        endpoint = endpoint.lstrip("/")
        return urljoin(f"{self.base_url}/", endpoint)

    def _handle_error_response(self, response: httpx.Response) -> None:
        """Handle error responses by raising appropriate exceptions.

        Args:
            response: HTTP response object

        Raises:
            AuthenticationError: For 401 responses
            AuthorizationError: For 403 responses
            NotFoundError: For 404 responses
            ConflictError: For 409 responses
            ServerError: For 5xx responses
            APIError: For other error responses
        """
        status_code = response.status_code

        try:
            error_data = response.json()
        except ValueError:
            error_data = {"detail": response.text}

        if not isinstance(error_data, dict):
            error_data = {"detail": error_data}

        error_message = error_data.get("message", error_data.get("detail", "Unknown error"))

        if status_code == 401:
            raise AuthenticationError(
                message="Authentication failed", status_code=status_code, response=error_data
            )
        elif status_code == 403:
            raise AuthorizationError(
                message="Authorization failed", status_code=status_code, response=error_data
            )
        elif status_code == 404:
            raise NotFoundError(
                message="Resource not found", status_code=status_code, response=error_data
            )
        elif status_code == 409:
            raise ConflictError(
                message="Resource conflict (may already exist)",
                status_code=status_code,
                response=error_data,
            )
        elif 500 <= status_code < 600:
            raise ServerError(
                message=f"Server error: {error_message}",
                status_code=status_code,
                response=error_data,
            )
        else:
            raise APIError(
                message=f"API error: {error_message}",
                status_code=status_code,
                response=error_data,
            )

    def send(self, method: str, endpoint: str, json_data: Any = None) -> httpx.Response:
        """Send a request and return the raw response, whatever its status.

        Args:
            method: HTTP method (GET, POST, PUT, ...)
            endpoint: API endpoint path
            json_data: Optional JSON-serializable request body

        Returns:
            The httpx response

        Raises:
            TransportError: For network-related errors and timeouts
        """
        url = self._build_url(endpoint)
        content = json.dumps(json_data) if json_data is not None else None

        if self.log_payloads and json_data is not None:
            logger.debug(
                "api_request_payload",
                method=method,
                url=url,
                payload=truncate_payload(sanitize_payload(json_data), self.max_payload_size),
            )

        start_time = time.perf_counter()

        try:
            response = self.client.request(method=method, url=url, content=content)
        except httpx.TimeoutException as e:
            logger.error("timeout_error", method=method, url=url, error=str(e))
            raise TransportError(f"Request timeout: {e}") from e
        except httpx.TransportError as e:
            logger.error("network_error", method=method, url=url, error=str(e))
            raise TransportError(f"Network error: {e}") from e

        log_exchange(logger, response, (time.perf_counter() - start_time) * 1000)

        if self.log_payloads and response.text:
            try:
                body: Any = sanitize_payload(response.json())
            except ValueError:
                body = response.text
            logger.debug(
                "api_response_payload",
                method=method,
                url=url,
                status_code=response.status_code,
                payload=truncate_payload(body, self.max_payload_size),
            )

        return response

    def request(self, method: str, endpoint: str, json_data: Any = None) -> Any:
        """Make an HTTP request and decode the JSON response.

        Args:
            method: HTTP method
            endpoint: API endpoint path
            json_data: JSON request body

        Returns:
            Decoded response body ({} for an empty body)

        Raises:
            TransportError: For network-related errors
            Various APIError subclasses: For API errors
        """
        response = self.send(method, endpoint, json_data)

        if not response.is_success:
            self._handle_error_response(response)

        if not response.text:
            return {}

        try:
            return response.json()
        except ValueError as e:
            raise APIError(
                message="Response is not valid JSON",
                status_code=response.status_code,
                response={"detail": response.text},
            ) from e

    def get(self, endpoint: str) -> Any:
        """Make a GET request."""
        return self.request("GET", endpoint)

    def post(self, endpoint: str, json_data: Any = None) -> Any:
        """Make a POST request."""
        return self.request("POST", endpoint, json_data=json_data)

    def put(self, endpoint: str, json_data: Any = None) -> Any:
        """Make a PUT request."""
        return self.request("PUT", endpoint, json_data=json_data)

    def close(self) -> None:
        """Close the HTTP client and clean up resources."""
        self.client.close()
        logger.debug("client_closed", base_url=self.base_url)

    def __enter__(self) -> "BaseAPIClient":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Context manager exit."""
        self.close()
