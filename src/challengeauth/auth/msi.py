from __future__ import annotations

import logging

import requests

from .credentials import (
    IDENTITY_HEADER_API_VERSION,
    MSIAppServiceTokenCredentials,
    MSIVmTokenCredentials,
)
from .translate import ErrorResponse, TokenResponse, TokenResult

logger = logging.getLogger(__name__)


def _secret_header(credentials: MSIAppServiceTokenCredentials) -> dict[str, str]:
    # api-version values are ISO dates, so they order as strings.
    if credentials.msi_api_version >= IDENTITY_HEADER_API_VERSION:
        return {"X-IDENTITY-HEADER": credentials.msi_secret}
    return {"secret": credentials.msi_secret}


class ManagedIdentityClient:
    """Fetch tokens from the local managed identity endpoint.

    Args:
        timeout: Seconds to wait for the identity endpoint.
        session: Optional ``requests`` session to send requests with.
    """

    def __init__(
        self, timeout: float = 30.0, session: requests.Session | None = None
    ) -> None:
        self.timeout = timeout
        self._session = session or requests.Session()

    def get_token(
        self, credentials: MSIAppServiceTokenCredentials | MSIVmTokenCredentials
    ) -> TokenResponse:
        """Request a token for ``credentials.resource``.

        Returns:
            The token, or the endpoint's error response.

        Raises:
            requests.RequestException: If the endpoint is unreachable or
                fails without a JSON error body.
            TypeError: If ``credentials`` is not a concrete managed identity.
        """
        if isinstance(credentials, MSIAppServiceTokenCredentials):
            logger.debug(
                "Requesting App Service MSI token for %s from %s",
                credentials.resource,
                credentials.msi_endpoint,
            )
            response = self._session.get(
                credentials.msi_endpoint,
                params={
                    "resource": credentials.resource,
                    "api-version": credentials.msi_api_version,
                },
                headers=_secret_header(credentials),
                timeout=self.timeout,
            )
        elif isinstance(credentials, MSIVmTokenCredentials):
            url = f"http://localhost:{credentials.port}/oauth2/token"
            logger.debug("Requesting VM MSI token for %s from %s", credentials.resource, url)
            response = self._session.post(
                url,
                data={"resource": credentials.resource},
                headers={"Metadata": "true"},
                timeout=self.timeout,
            )
        else:
            raise TypeError(
                f"Unsupported managed identity credentials: {type(credentials).__name__}"
            )
        return self._parse(response)

    @staticmethod
    def _parse(response: requests.Response) -> TokenResponse:
        if response.status_code < 400:
            return TokenResult.from_json(response.json())
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and "error" in body:
            logger.warning(
                "Managed identity endpoint returned %s: %s",
                response.status_code,
                body["error"],
            )
            return ErrorResponse.from_json(body)
        raise requests.HTTPError(
            f"{response.status_code} error from managed identity endpoint: {response.url}",
            response=response,
        )
