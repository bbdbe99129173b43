"""Async httpx client for the commerce platform customer API.

Auth: OAuth2 client credentials against ``{auth_url}/oauth/token``; the bearer
token is cached until shortly before it expires.
"""

from __future__ import annotations

import logging
import time
from urllib.parse import quote

import httpx

from src.config import CommercetoolsSettings
from src.integrations.commercetools.schemas import (
    Customer,
    CustomerUpdate,
    SetCustomerGroupAction,
)

logger = logging.getLogger(__name__)

# Refresh the token this many seconds before the platform expires it
_TOKEN_EXPIRY_MARGIN = 30


class CommercetoolsError(Exception):
    """Failed call to the commerce platform (transport error or non-2xx response)."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code

    @property
    def is_conflict(self) -> bool:
        """True for a version conflict (customer modified concurrently)."""
        return self.status_code == 409


def _error_message(response: httpx.Response) -> str:
    """Extract the platform's error message from an error response body."""
    try:
        payload = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(payload, dict) and payload.get("message"):
        return str(payload["message"])
    return f"HTTP {response.status_code}"


def _customer_path(customer_id: str) -> str:
    """Build the customer resource path; the id is always a single path segment."""
    if customer_id in (".", ".."):
        raise CommercetoolsError(f"Invalid customer id: {customer_id!r}")
    return f"/customers/{quote(customer_id, safe='')}"


class CommercetoolsClient:
    """Thin async wrapper around the customer read/update endpoints.

    Endpoints:
        GET  {api_url}/{project_key}/customers/{id}
        POST {api_url}/{project_key}/customers/{id}
    """

    def __init__(
        self,
        config: CommercetoolsSettings,
        http: httpx.AsyncClient | None = None,
    ) -> None:
        self._project_key = config.ctp_project_key
        self._client_id = config.ctp_client_id
        self._client_secret = config.ctp_client_secret
        self._scope = config.ctp_scope
        self._auth_url = config.ctp_auth_url.rstrip("/")
        self._api_url = config.ctp_api_url.rstrip("/")
        self._http = http or httpx.AsyncClient(timeout=httpx.Timeout(config.ctp_timeout, connect=5.0))

        self._access_token: str | None = None
        self._token_expires_at: float = 0.0

    async def close(self) -> None:
        await self._http.aclose()

    # ── Auth ─────────────────────────────────────────────────────────

    async def _get_token(self) -> str:
        """Return a valid bearer token, fetching a new one if needed."""
        if self._access_token and time.monotonic() < self._token_expires_at:
            return self._access_token

        form = {"grant_type": "client_credentials"}
        if self._scope:
            form["scope"] = self._scope

        try:
            response = await self._http.post(
                f"{self._auth_url}/oauth/token",
                data=form,
                auth=(self._client_id, self._client_secret),
            )
        except httpx.HTTPError as exc:
            logger.warning("Token request failed: %s", type(exc).__name__)
            raise CommercetoolsError(f"Token request failed: {exc}") from exc

        if response.is_error:
            raise CommercetoolsError(
                f"Token request failed: {_error_message(response)}",
                status_code=response.status_code,
            )

        payload: dict = response.json()
        self._access_token = payload["access_token"]
        expires_in = int(payload.get("expires_in", 0))
        self._token_expires_at = time.monotonic() + max(expires_in - _TOKEN_EXPIRY_MARGIN, 0)
        logger.debug("Fetched new access token (expires_in=%s)", expires_in)
        return self._access_token

    # ── Requests ─────────────────────────────────────────────────────

    async def _request(self, method: str, path: str, json: dict | None = None) -> dict:
        token = await self._get_token()
        url = f"{self._api_url}/{self._project_key}{path}"
        try:
            response = await self._http.request(
                method,
                url,
                json=json,
                headers={"Authorization": f"Bearer {token}"},
            )
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, path, type(exc).__name__)
            raise CommercetoolsError(f"{method} {path} failed: {exc}") from exc

        if response.is_error:
            if response.status_code == 401:
                # Token revoked or expired early; the next call fetches a new one
                self._access_token = None
            message = _error_message(response)
            logger.warning("%s %s returned %s: %s", method, path, response.status_code, message)
            raise CommercetoolsError(message, status_code=response.status_code)

        return response.json()

    async def get_customer(self, customer_id: str) -> Customer:
        """Fetch a customer by id."""
        payload = await self._request("GET", _customer_path(customer_id))
        return Customer.model_validate(payload)

    async def update_customer(
        self,
        customer_id: str,
        version: int,
        actions: list[SetCustomerGroupAction],
    ) -> Customer:
        """Apply update actions to a customer at the given version."""
        body = CustomerUpdate(version=version, actions=actions)
        payload = await self._request("POST", _customer_path(customer_id), json=body.to_payload())
        return Customer.model_validate(payload)
