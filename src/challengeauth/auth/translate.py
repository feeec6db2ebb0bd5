"""Token responses and their translation into an ``Authorization`` value."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from time import time
from typing import Any, Final, Mapping, Union

from .errors import AcquisitionFailure

logger = logging.getLogger(__name__)

# App Service (api-version 2017-09-01) reports expiry as e.g.
# "09/14/2017 00:00:00 PM +00:00"; the hour is not always 12-hour clock.
_EXPIRES_ON_FORMATS: Final[tuple[str, ...]] = (
    "%m/%d/%Y %I:%M:%S %p %z",
    "%m/%d/%Y %H:%M:%S %p %z",
)


def _first(payload: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if payload.get(key) is not None:
            return payload[key]
    return None


def _parse_expires_on(value: Any) -> int | None:
    """Epoch seconds from an epoch number or an App Service date string.

    Returns ``None`` for values in neither form.
    """
    try:
        return int(value)
    except (TypeError, ValueError):
        pass
    for fmt in _EXPIRES_ON_FORMATS:
        try:
            return int(datetime.strptime(str(value), fmt).timestamp())
        except ValueError:
            continue
    logger.debug("Ignoring unparseable expires_on value %r", value)
    return None


@dataclass(frozen=True)
class TokenResult:
    """A successful token response."""

    token_type: str
    access_token: str = field(repr=False)
    expires_on: int | None = None

    @classmethod
    def from_json(cls, payload: Mapping[str, Any]) -> "TokenResult":
        """Build from a token endpoint body, snake_case or camelCase.

        ``expires_on`` is read as epoch seconds or an App Service date string,
        otherwise derived from ``expires_in``. An unreadable expiry is left as
        ``None``; it is not needed to build the authorization value.
        """
        token_type = _first(payload, "token_type", "tokenType")
        access_token = _first(payload, "access_token", "accessToken")
        if not token_type or not access_token:
            raise ValueError("Token response is missing token_type or access_token.")

        expires_on = _parse_expires_on(_first(payload, "expires_on", "expiresOn"))
        if expires_on is None:
            expires_in = _first(payload, "expires_in", "expiresIn")
            if expires_in is not None:
                expires_on = int(time()) + int(expires_in)
        return cls(
            token_type=token_type,
            access_token=access_token,
            expires_on=expires_on,
        )


@dataclass(frozen=True)
class ErrorResponse:
    """A token endpoint response reporting failure.

    ``error`` is the structured payload handed to callers untouched.
    """

    error: Any
    error_description: str | None = None

    @classmethod
    def from_json(cls, payload: Mapping[str, Any]) -> "ErrorResponse":
        """Build from an error body.

        OAuth style bodies (``{"error": "invalid_client", "error_description":
        ...}``) are folded into ``{"code": ..., "message": ...}``; bodies that
        already carry an object under ``error`` keep it as is.
        """
        error = payload["error"]
        description = _first(payload, "error_description", "errorDescription")
        if isinstance(error, str):
            error = {"code": error, "message": description}
        return cls(error=error, error_description=description)


TokenResponse = Union[TokenResult, ErrorResponse]


@dataclass(frozen=True)
class AuthorizationResult:
    """The single outcome of one authenticator invocation.

    Exactly one of ``value`` and ``error`` is set.
    """

    value: str | None = field(default=None, repr=False)
    error: Any = None

    def __post_init__(self) -> None:
        if (self.value is None) == (self.error is None):
            raise ValueError("AuthorizationResult needs exactly one of value or error.")

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> str:
        """Return the authorization value or raise the error."""
        if self.error is None:
            return self.value
        if isinstance(self.error, BaseException):
            raise self.error
        message = None
        if isinstance(self.error, Mapping):
            message = self.error.get("message")
        raise AcquisitionFailure(self.error, message)


def translate(
    error: BaseException | None, response: TokenResponse | None
) -> AuthorizationResult:
    """Map a token acquisition outcome onto an :class:`AuthorizationResult`.

    Args:
        error: Transport or protocol error raised by the acquisition call.
        response: The token endpoint response, if one was received.

    Returns:
        An error result carrying ``error`` or ``response.error`` unchanged,
        or a value result of the form ``"<token_type> <access_token>"``.
    """
    if error is not None:
        logger.warning("Token acquisition failed: %s", error)
        return AuthorizationResult(error=error)

    if isinstance(response, ErrorResponse):
        logger.warning("Token endpoint returned an error: %s", response.error)
        if response.error is None:
            return AuthorizationResult(
                error=AcquisitionFailure(
                    "token endpoint reported an empty error", response.error_description
                )
            )
        return AuthorizationResult(error=response.error)

    if response is None:
        return AuthorizationResult(error=AcquisitionFailure("no token response"))

    return AuthorizationResult(value=f"{response.token_type} {response.access_token}")
