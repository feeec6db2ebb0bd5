from __future__ import annotations

from typing import Any


class AuthenticatorError(Exception):
    """Base class for errors raised by the authenticator layer."""


class UnresolvableCredentialVariant(AuthenticatorError, TypeError):
    """A managed identity credential does not name a concrete environment."""


class UnsupportedCredentialKind(AuthenticatorError, TypeError):
    """The credential is not one of the supported credential families."""


class DeviceFlowNotCompleted(AuthenticatorError):
    """A device credential was used before its device code exchange finished."""


class AcquisitionFailure(AuthenticatorError):
    """The token endpoint reported a failure.

    Args:
        error: The structured error payload returned by the endpoint.
        description: Optional human readable description.
    """

    def __init__(self, error: Any, description: str | None = None) -> None:
        self.error = error
        self.description = description
        message = str(error)
        if description:
            message = f"{message}: {description}"
        super().__init__(message)
