"""
Claim API Client

This module provides a client for interacting with a running Claim Proofs API
server. It is used by the CLI to submit claims on behalf of accounts and to
query claim status.
"""

import logging
from typing import Any, Dict, Optional

import requests

from ..config import get_api_url

logger = logging.getLogger(__name__)


class ClaimAPIError(Exception):
    """
    Exception raised for claim API related errors.

    Attributes:
        code: Error code reported by the server (e.g. ALREADY_CLAIMED), if any
        status_code: HTTP status code, if a response was received
    """

    def __init__(self, message: str, code: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.code = code
        self.status_code = status_code


class ClaimAPIClient:
    """
    Client for interacting with the Claim Proofs REST API.

    Provides methods for submitting claims and reading distributor state
    with proper error handling.
    """

    def __init__(self, base_url: Optional[str] = None, timeout: float = 30):
        """
        Initialize the claim API client.

        Args:
            base_url: Base URL for the claim API. If None, uses CLAIM_API_URL.
            timeout: Request timeout in seconds
        """
        self.base_url = (base_url or get_api_url()).rstrip("/")
        self.timeout = timeout

        self.session = requests.Session()
        self.session.headers.update({
            'Content-Type': 'application/json',
            'Accept': 'application/json'
        })

        logger.info(f"Initialized ClaimAPIClient with base_url: {self.base_url}")

    def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.ConnectionError as e:
            raise ClaimAPIError(
                f"Failed to connect to claim API at {self.base_url}. "
                f"Check that the server is running (claim-proofs serve) "
                f"or set CLAIM_API_URL. Original error: {e}"
            )
        except requests.Timeout as e:
            raise ClaimAPIError(f"Timeout connecting to claim API at {self.base_url}: {e}")
        except requests.RequestException as e:
            raise ClaimAPIError(f"Request failed to claim API at {self.base_url}. Error: {e}")

        try:
            data = response.json()
        except ValueError:
            data = None

        if not response.ok:
            if isinstance(data, dict) and "code" in data:
                raise ClaimAPIError(
                    data.get("error", response.reason),
                    code=data["code"],
                    status_code=response.status_code,
                )
            raise ClaimAPIError(
                f"Claim API returned {response.status_code}: {response.text}",
                status_code=response.status_code,
            )

        if not isinstance(data, dict):
            raise ClaimAPIError(f"Invalid response format from {url}")
        return data

    def health_check(self) -> bool:
        """Return True if the API reports a healthy distributor."""
        try:
            return self._request("GET", "/health").get("status") == "healthy"
        except ClaimAPIError as e:
            logger.warning(f"Claim API health check failed: {e}")
            return False

    def get_distributor(self) -> Dict[str, Any]:
        return self._request("GET", "/distributor")

    def get_claim_status(self, account: str) -> Dict[str, Any]:
        return self._request("GET", f"/claims/{account}")

    def submit_claim(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Submit a claim.

        Args:
            payload: Dictionary with account, amount, proof, v, r and s

        Raises:
            ClaimAPIError: If the claim is rejected or the request fails
        """
        logger.info(f"Submitting claim for {payload.get('account')}")
        return self._request("POST", "/claims", json=payload)
