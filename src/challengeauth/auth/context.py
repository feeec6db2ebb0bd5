"""Token acquisition against Azure AD.

:class:`AuthenticationContext` is the capability the authenticator drives for
directory credentials. :class:`MsalAuthenticationContext` implements it on
top of MSAL; tests and callers with their own token stack can supply any
object with the same three methods.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Any, Callable, Mapping, Protocol

import msal

from .credentials import DEFAULT_RESOURCE, DeviceTokenCredentials
from .errors import AcquisitionFailure
from .scopes import scope_from_resource
from .translate import ErrorResponse, TokenResponse, TokenResult

logger = logging.getLogger(__name__)


class AuthenticationContext(Protocol):
    """Per-authority token acquisition operations.

    Every method returns a :class:`TokenResult` or :class:`ErrorResponse`
    and raises on transport failures.
    """

    def acquire_token_with_client_credentials(
        self, resource: str, client_id: str, secret: str
    ) -> TokenResponse:
        """Client credentials grant for an application."""
        ...

    def acquire_token_with_username_password(
        self, resource: str, username: str, password: str, client_id: str
    ) -> TokenResponse:
        """Resource owner password grant for a user."""
        ...

    def acquire_token(
        self, resource: str, username: str, client_id: str
    ) -> TokenResponse:
        """Token for a user who already signed in, served from the cache."""
        ...


class AuthenticationContextFactory(Protocol):
    def __call__(
        self,
        authority: str,
        validate_authority: bool = True,
        cache: msal.TokenCache | None = None,
    ) -> AuthenticationContext: ...


def _to_response(result: Mapping[str, Any] | None) -> TokenResponse:
    if not result:
        return ErrorResponse(
            error={"code": "interaction_required", "message": "No cached token."}
        )
    if "error" in result:
        return ErrorResponse.from_json(result)
    return TokenResult.from_json(result)


class MsalAuthenticationContext:
    """:class:`AuthenticationContext` backed by MSAL applications.

    Args:
        authority: Authority URL, typically taken from the challenge.
        validate_authority: Whether MSAL validates the authority against
            known hosts.
        cache: Token cache shared with other contexts of the same credential.
    """

    def __init__(
        self,
        authority: str,
        validate_authority: bool = True,
        cache: msal.TokenCache | None = None,
    ) -> None:
        self.authority = authority
        self.validate_authority = validate_authority
        self.cache = cache

    def _public_app(self, client_id: str) -> msal.PublicClientApplication:
        return msal.PublicClientApplication(
            client_id,
            authority=self.authority,
            validate_authority=self.validate_authority,
            token_cache=self.cache,
        )

    def acquire_token_with_client_credentials(
        self, resource: str, client_id: str, secret: str
    ) -> TokenResponse:
        app = msal.ConfidentialClientApplication(
            client_id,
            client_credential=secret,
            authority=self.authority,
            validate_authority=self.validate_authority,
            token_cache=self.cache,
        )
        logger.debug("Client credentials grant for %s at %s", resource, self.authority)
        return _to_response(
            app.acquire_token_for_client(scopes=[scope_from_resource(resource)])
        )

    def acquire_token_with_username_password(
        self, resource: str, username: str, password: str, client_id: str
    ) -> TokenResponse:
        app = self._public_app(client_id)
        logger.debug("Password grant for %s at %s", resource, self.authority)
        return _to_response(
            app.acquire_token_by_username_password(
                username, password, scopes=[scope_from_resource(resource)]
            )
        )

    def acquire_token(
        self, resource: str, username: str, client_id: str
    ) -> TokenResponse:
        app = self._public_app(client_id)
        accounts = app.get_accounts(username=username)
        if not accounts:
            logger.debug("No cached account for %s at %s", username, self.authority)
            return _to_response(None)
        return _to_response(
            app.acquire_token_silent([scope_from_resource(resource)], account=accounts[0])
        )


def login_with_device_code(
    credentials: DeviceTokenCredentials,
    resource: str = DEFAULT_RESOURCE,
    prompt: Callable[[str], None] = print,
) -> DeviceTokenCredentials:
    """Run the device code flow and return credentials the authenticator can use.

    ``prompt`` receives the sign-in instructions (URL and user code) and
    should show them to the user; this call blocks until the user finishes
    signing in or the code expires.

    Args:
        credentials: Device credentials to complete. Their token cache is
            reused when set, otherwise a new one is created.
        resource: Resource to request the first token for.
        prompt: Displays the sign-in instructions.

    Returns:
        A copy of ``credentials`` carrying the signed-in username and the
        token cache holding the user's tokens.

    Raises:
        AcquisitionFailure: If the flow could not start or the sign-in failed.
    """
    cache = credentials.token_cache
    if cache is None:
        cache = msal.TokenCache()
    app = msal.PublicClientApplication(
        credentials.client_id,
        authority=credentials.authority,
        token_cache=cache,
    )

    flow = app.initiate_device_flow(scopes=[scope_from_resource(resource)])
    if "user_code" not in flow:
        raise AcquisitionFailure(flow.get("error"), flow.get("error_description"))
    prompt(flow["message"])

    result = app.acquire_token_by_device_flow(flow)
    if "error" in result:
        response = ErrorResponse.from_json(result)
        raise AcquisitionFailure(response.error, response.error_description)

    username = (result.get("id_token_claims") or {}).get("preferred_username")
    if not username:
        accounts = app.get_accounts()
        if not accounts:
            raise AcquisitionFailure("device code sign-in returned no account")
        username = accounts[0]["username"]
    logger.debug("Device code sign-in completed at %s", credentials.authority)
    return dataclasses.replace(credentials, username=username, token_cache=cache)
