"""Authenticators answering Bearer challenges for a credential.

An authenticator is created once per credential and invoked once per
challenge. Each invocation completes exactly once, either with an
``Authorization`` header value or with an error.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable

from .challenge import Challenge
from .config import ManagedIdentitySettings
from .context import (
    AuthenticationContext,
    AuthenticationContextFactory,
    MsalAuthenticationContext,
)
from .credentials import (
    ApplicationTokenCredentials,
    CredentialVariant,
    DeviceTokenCredentials,
    MSIAppServiceTokenCredentials,
    MSIVmTokenCredentials,
    TokenCredentialsBase,
    UserTokenCredentials,
)
from .errors import DeviceFlowNotCompleted, UnsupportedCredentialKind
from .msi import ManagedIdentityClient
from .normalize import normalize
from .translate import AuthorizationResult, TokenResponse, translate

logger = logging.getLogger(__name__)

Continuation = Callable[[Any, str | None], None]


class Authenticator:
    """Acquires authorization values for one normalized credential.

    Use :func:`create_authenticator` rather than instantiating directly.
    """

    def __init__(
        self,
        credentials: CredentialVariant,
        context_factory: AuthenticationContextFactory,
        msi_client: ManagedIdentityClient | None,
    ) -> None:
        self.credentials = credentials
        self._context_factory = context_factory
        self._msi_client = msi_client

    def __call__(
        self, challenge: Challenge, callback: Continuation
    ) -> asyncio.Task[AuthorizationResult]:
        """Schedule :meth:`acquire` and report its outcome to ``callback``.

        ``callback(error, None)`` or ``callback(None, value)`` is called
        exactly once. Must be called from a running event loop.
        """
        task = asyncio.get_running_loop().create_task(self.acquire(challenge))

        def _done(t: asyncio.Task[AuthorizationResult]) -> None:
            if t.cancelled():
                callback(asyncio.CancelledError(), None)
                return
            try:
                result = t.result()
            except Exception as exc:
                logger.warning("Authenticator task failed: %s", exc)
                callback(exc, None)
                return
            callback(result.error, result.value)

        task.add_done_callback(_done)
        return task

    async def authorize(self, challenge: Challenge) -> str:
        """Return the ``Authorization`` header value for ``challenge``.

        Raises:
            AcquisitionFailure: If the token endpoint reported an error.
            UnsupportedCredentialKind: If the credential cannot be dispatched.
            DeviceFlowNotCompleted: If a device credential has no completed login.
        """
        return (await self.acquire(challenge)).unwrap()

    async def acquire(self, challenge: Challenge) -> AuthorizationResult:
        """Run the token acquisition strategy for the credential.

        Every outcome, including transport errors, is returned as an
        :class:`AuthorizationResult`.
        """
        try:
            response = await self._dispatch(challenge)
            return translate(None, response)
        except (UnsupportedCredentialKind, DeviceFlowNotCompleted) as exc:
            return AuthorizationResult(error=exc)
        except Exception as exc:
            return translate(exc, None)

    async def _dispatch(self, challenge: Challenge) -> TokenResponse:
        credentials = self.credentials
        logger.debug(
            "Authenticating %s for resource %s",
            type(credentials).__name__,
            challenge.resource,
        )

        match credentials:
            case ApplicationTokenCredentials():
                context = self._context(challenge, credentials)
                return await asyncio.to_thread(
                    context.acquire_token_with_client_credentials,
                    challenge.resource,
                    credentials.client_id,
                    credentials.secret,
                )
            case UserTokenCredentials():
                context = self._context(challenge, credentials)
                return await asyncio.to_thread(
                    context.acquire_token_with_username_password,
                    challenge.resource,
                    credentials.username,
                    credentials.password,
                    credentials.client_id,
                )
            case DeviceTokenCredentials():
                if not credentials.username or credentials.token_cache is None:
                    raise DeviceFlowNotCompleted(
                        "DeviceTokenCredentials needs the username and token cache "
                        "of a completed device code login; see login_with_device_code."
                    )
                context = self._context(challenge, credentials)
                return await asyncio.to_thread(
                    context.acquire_token,
                    challenge.resource,
                    credentials.username,
                    credentials.client_id,
                )
            case MSIAppServiceTokenCredentials() | MSIVmTokenCredentials():
                return await asyncio.to_thread(self._msi_client.get_token, credentials)
            case _:
                raise UnsupportedCredentialKind(
                    "credentials must be one of: ApplicationTokenCredentials, "
                    "UserTokenCredentials, DeviceTokenCredentials, "
                    "MSIAppServiceTokenCredentials, MSIVmTokenCredentials"
                )

    def _context(
        self, challenge: Challenge, credentials: TokenCredentialsBase
    ) -> AuthenticationContext:
        return self._context_factory(
            challenge.authorization,
            validate_authority=True,
            cache=credentials.token_cache,
        )


def create_authenticator(
    credentials: object,
    *,
    context_factory: AuthenticationContextFactory | None = None,
    msi_client: ManagedIdentityClient | None = None,
) -> Authenticator:
    """Build an :class:`Authenticator` for ``credentials``.

    Args:
        credentials: A credential object; managed identity credentials are
            copied, so later changes to the caller's object are not seen.
        context_factory: Builds the authentication context for an authority.
            Defaults to :class:`MsalAuthenticationContext`.
        msi_client: Fetches managed identity tokens. For managed identity
            credentials it defaults to a :class:`ManagedIdentityClient` using
            the ``MSI_TIMEOUT`` setting; other credentials never read it.

    Raises:
        UnresolvableCredentialVariant: If ``credentials`` is a managed
            identity credential without a concrete hosting environment.
    """
    credentials = normalize(credentials)
    if msi_client is None and isinstance(
        credentials, (MSIAppServiceTokenCredentials, MSIVmTokenCredentials)
    ):
        msi_client = ManagedIdentityClient(timeout=ManagedIdentitySettings().msi_timeout)
    return Authenticator(
        credentials,
        context_factory=context_factory or MsalAuthenticationContext,
        msi_client=msi_client,
    )
