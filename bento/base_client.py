"""
Base API Client with common functionality for HTTP requests.

Provides:
- Single-attempt dispatch with status code mapping
- Retries with exponential backoff (see retry.py)
- Error handling
- Logging
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import requests
from tenacity import RetryCallState

from .config import BentoConfig
from .errors import (
    AuthenticationFailedError,
    HttpClientError,
    InvalidRequestError,
    RateLimitError,
    UnexpectedResponseError,
)
from .retry import is_rate_limit, is_transient, with_retry

logger = logging.getLogger(__name__)


class BaseAPIClient(ABC):
    """Abstract base class for API clients.

    Provides common functionality:
    - Session management
    - HTTP request handling with retries
    - Rate limit handling
    - Error handling

    One ``requests.Session`` is shared by all calls for connection pooling.
    Nothing else on the client changes after construction. Sessions are not
    documented as thread-safe, so use one client per thread.
    """

    def __init__(self, config: BentoConfig):
        """Initialize base API client.

        Args:
            config: Credentials, base URL, timeouts and retry settings
        """
        self.config = config
        self.base_url = config.base_url.rstrip('/')
        self.session = requests.Session()

    def close(self):
        """Close the underlying HTTP session."""
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def _build_url(self, endpoint: str) -> str:
        return f"{self.base_url}/{endpoint.lstrip('/')}"

    def _default_params(self) -> Dict[str, Any]:
        """Query parameters added to every request. Override in subclasses."""
        return {}

    def _send(self,
              method: str,
              endpoint: str,
              params: Optional[Dict] = None,
              json: Optional[Any] = None) -> requests.Response:
        """Make exactly one HTTP round trip and map the status code.

        Args:
            method: HTTP method (GET, POST, ...)
            endpoint: API endpoint (without base URL)
            params: Query parameters
            json: JSON body for POST

        Returns:
            Response object for 2xx answers

        Raises:
            AuthenticationFailedError: 401/403
            RateLimitError: 429
            InvalidRequestError: Other 4xx
            UnexpectedResponseError: 5xx and other non-2xx answers
            HttpClientError: Transport failure
        """
        url = self._build_url(endpoint)
        query = self._default_params()
        if params:
            query.update(params)

        logger.debug(f"{method} {endpoint}")
        try:
            response = self.session.request(
                method, url, params=query, json=json, timeout=self.config.timeout
            )
        except requests.exceptions.Timeout as e:
            logger.warning(f"Request timeout: {method} {endpoint}")
            raise HttpClientError(f"Request timeout: {e}", is_transient=True) from e
        except requests.exceptions.ConnectionError as e:
            logger.warning(f"Connection error: {method} {endpoint}: {e}")
            raise HttpClientError(f"Connection failed: {e}", is_transient=True) from e
        except requests.exceptions.RequestException as e:
            logger.error(f"Request error: {e}")
            raise HttpClientError(f"Request failed: {e}") from e

        status = response.status_code

        if 200 <= status < 300:
            return response

        if status == 429:
            raise RateLimitError(self._extract_retry_after(response))

        if status in (401, 403):
            raise AuthenticationFailedError(
                f"Authentication failed ({status}): {self._extract_error_message(response)}"
            )

        error_msg = self._extract_error_message(response)
        logger.error(f"API request failed: {method} {endpoint} ({status}): {error_msg}")

        if 400 <= status < 500:
            raise InvalidRequestError(f"API error ({status}): {error_msg}", status_code=status)

        raise UnexpectedResponseError(f"API error ({status}): {error_msg}", status_code=status)

    def _make_request(self,
                      method: str,
                      endpoint: str,
                      params: Optional[Dict] = None,
                      json: Optional[Any] = None,
                      idempotent: bool = True) -> requests.Response:
        """Make HTTP request with retry logic and error handling.

        Idempotent calls are retried on rate limits and transient failures.
        Non-idempotent calls are only retried on 429, because a timed out
        send may already have been accepted by the server.

        Args:
            method: HTTP method
            endpoint: API endpoint (without base URL)
            params: Query parameters
            json: JSON body
            idempotent: Whether the call is safe to repeat

        Returns:
            Response object

        Raises:
            BentoError: The last error once retries are exhausted, or the
                first non-retryable one
        """
        retry_on = is_transient if idempotent else is_rate_limit
        send = with_retry(
            self.config, retry_on=retry_on, before_sleep=self._before_retry
        )(self._send)
        return send(method, endpoint, params=params, json=json)

    def _parse_json(self, response: requests.Response) -> Any:
        """Decode a JSON body.

        Returns:
            Decoded JSON, or None for an empty body

        Raises:
            UnexpectedResponseError: If the body is not valid JSON
        """
        if not response.content or not response.content.strip():
            return None
        try:
            return response.json()
        except ValueError as e:
            raise UnexpectedResponseError(
                f"Invalid JSON in response: {response.text[:200]}"
            ) from e

    def _extract_retry_after(self, response: requests.Response) -> Optional[int]:
        """Extract retry-after time from response headers.

        Returns:
            Retry after time in seconds, None if absent or not a number
        """
        value = response.headers.get('Retry-After')
        if value is None:
            return None
        try:
            return int(value)
        except ValueError:
            return None

    def _extract_error_message(self, response: requests.Response) -> str:
        """Extract error message from response.

        Uses the ``message`` or ``error`` key of a JSON body, falling back
        to the raw text.
        """
        error_msg = response.text or response.reason or "Unknown error"
        try:
            error_data = response.json()
        except ValueError:
            return error_msg
        if isinstance(error_data, dict):
            for key in ('message', 'error', 'errors'):
                if error_data.get(key):
                    return str(error_data[key])
        return error_msg

    def _before_retry(self, retry_state: RetryCallState):
        """Log and notify before sleeping between two attempts."""
        error = retry_state.outcome.exception()
        wait_time = retry_state.next_action.sleep if retry_state.next_action else 0
        attempt = retry_state.attempt_number
        max_attempts = self.config.max_attempts

        if isinstance(error, RateLimitError):
            logger.warning(f"Rate limit hit. Waiting {wait_time:.2f}s (attempt {attempt}/{max_attempts})")
            self._notify_rate_limit(wait_time, attempt, max_attempts)
        elif isinstance(error.__cause__, requests.exceptions.Timeout):
            logger.warning(f"Request timeout. Waiting {wait_time:.2f}s (attempt {attempt}/{max_attempts})")
            self._notify_timeout(wait_time, attempt, max_attempts)
        else:
            logger.warning(f"Request failed: {error}. Waiting {wait_time:.2f}s (attempt {attempt}/{max_attempts})")
            self._notify_error(str(error), wait_time, attempt, max_attempts)

    # Notification methods (can be overridden for custom behavior)

    def _notify_rate_limit(self, wait_time: float, attempt: int, max_attempts: int):
        """Notify about rate limit. Override for custom behavior."""
        pass

    def _notify_timeout(self, wait_time: float, attempt: int, max_attempts: int):
        """Notify about timeout. Override for custom behavior."""
        pass

    def _notify_error(self, error: str, wait_time: float, attempt: int, max_attempts: int):
        """Notify about request error. Override for custom behavior."""
        pass

    @abstractmethod
    def verify_token(self) -> bool:
        """Verify that the API credentials are valid.

        Returns:
            True if credentials are valid, False otherwise
        """
        pass
