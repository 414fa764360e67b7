"""HTTP client for the Gutendex catalog API."""
import time
import random
import requests
from typing import Dict
import logging

from litcatalog.errors import TransportError

logger = logging.getLogger(__name__)


class CatalogClient:
    """Fetches raw JSON text from the remote catalog with a timeout and optional backoff."""

    def __init__(
        self,
        timeout: int = 30,
        max_retries: int = 1,
        base_backoff: float = 1.0,
        user_agent: str = "litcatalog/0.1"
    ):
        """
        Initialize catalog client.

        Args:
            timeout: Request timeout in seconds
            max_retries: Total attempts per request (1 means no retry)
            base_backoff: Base delay for exponential backoff
            user_agent: Value sent in the User-Agent header
        """
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.base_backoff = base_backoff

        # Create session for connection pooling
        self.session = requests.Session()
        self.session.headers.update(self._default_headers(user_agent))

    @staticmethod
    def _default_headers(user_agent: str) -> Dict[str, str]:
        return {
            "User-Agent": user_agent,
            "Accept": "application/json",
        }

    def fetch(self, url: str) -> str:
        """
        GET a URL and return its body.

        Args:
            url: Fully built request URL

        Returns:
            Response body text

        Raises:
            TransportError: on timeout, connection failure or a non-2xx status
        """
        last_error = None

        for attempt in range(self.max_retries):
            try:
                logger.info(f"Request attempt {attempt + 1}/{self.max_retries}: {url}")
                response = self.session.get(url, timeout=self.timeout)

            except requests.exceptions.Timeout as e:
                logger.warning(f"Timeout on attempt {attempt + 1}")
                last_error = TransportError(f"Timed out after {self.timeout}s fetching {url}", url=url)
                last_error.__cause__ = e

            except requests.exceptions.RequestException as e:
                logger.warning(f"Connection error on attempt {attempt + 1}: {e}")
                last_error = TransportError(f"Network error while fetching {url}: {e}", url=url)
                last_error.__cause__ = e

            else:
                status = response.status_code
                if 200 <= status < 300:
                    logger.info(f"Success: {status}")
                    return response.text

                last_error = TransportError(
                    f"HTTP request failed with status code {status}: {response.text[:200]}",
                    url=url,
                    status_code=status
                )
                if status != 429 and status < 500:
                    # Client error - don't retry
                    logger.error(f"Client error ({status}) for {url}")
                    raise last_error
                logger.warning(f"Retryable status ({status}) on attempt {attempt + 1}")

            if attempt < self.max_retries - 1:
                self._backoff(attempt)

        logger.error(f"All {self.max_retries} attempts failed for {url}")
        raise last_error

    def _backoff(self, attempt: int):
        """
        Sleep with exponential backoff and jitter.

        Args:
            attempt: Current attempt number (0-indexed)
        """
        # Exponential backoff: base * 2^attempt
        delay = self.base_backoff * (2 ** attempt)

        # Add jitter: random value between 0 and delay
        jitter = random.uniform(0, delay)
        total_delay = delay + jitter

        logger.info(f"Backing off for {total_delay:.2f} seconds")
        time.sleep(total_delay)

    def close(self):
        """Close the session."""
        self.session.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
