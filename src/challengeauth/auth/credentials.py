"""Credential value objects.

Every credential is an immutable dataclass. Directory credentials (user,
application, device) authenticate against Azure AD and may carry an MSAL
token cache that is shared between authenticator invocations. Managed
identity credentials fetch tokens from the hosting environment instead.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final, Union

if TYPE_CHECKING:
    from msal import TokenCache

DEFAULT_AUTHORITY_HOST: Final[str] = "https://login.microsoftonline.com"
DEFAULT_DOMAIN: Final[str] = "common"
DEFAULT_RESOURCE: Final[str] = "https://management.azure.com/"
# Public client id of the Azure CLI, used for device code logins.
AZURE_CLI_CLIENT_ID: Final[str] = "04b07795-8ddb-461a-bbee-02f9e1bf7b46"
DEFAULT_MSI_API_VERSION: Final[str] = "2017-09-01"
# First App Service api-version that takes the X-IDENTITY-HEADER header
# (IDENTITY_ENDPOINT/IDENTITY_HEADER hosts).
IDENTITY_HEADER_API_VERSION: Final[str] = "2019-08-01"
DEFAULT_MSI_VM_PORT: Final[int] = 50342


def _require(owner: object, *names: str) -> None:
    for name in names:
        if not getattr(owner, name):
            raise ValueError(
                f"{type(owner).__name__}.{name} must be a non-empty value."
            )


@dataclass(frozen=True, kw_only=True)
class TokenCredentialsBase:
    """Shared fields for credentials that authenticate against Azure AD."""

    client_id: str
    domain: str = DEFAULT_DOMAIN
    authority_host: str = DEFAULT_AUTHORITY_HOST
    token_cache: TokenCache | None = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        _require(self, "client_id", "domain", "authority_host")

    @property
    def authority(self) -> str:
        """The tenant authority URL, e.g. ``https://login.microsoftonline.com/common``."""
        return f"{self.authority_host.rstrip('/')}/{self.domain}"


@dataclass(frozen=True, kw_only=True)
class ApplicationTokenCredentials(TokenCredentialsBase):
    """Service principal authenticating with a client secret."""

    secret: str = field(repr=False)

    def __post_init__(self) -> None:
        super().__post_init__()
        _require(self, "secret")


@dataclass(frozen=True, kw_only=True)
class UserTokenCredentials(TokenCredentialsBase):
    """Organizational user authenticating with username and password."""

    username: str
    password: str = field(repr=False)

    def __post_init__(self) -> None:
        super().__post_init__()
        _require(self, "username", "password")


@dataclass(frozen=True, kw_only=True)
class DeviceTokenCredentials(TokenCredentialsBase):
    """User that signed in through the device code flow.

    ``username`` and ``token_cache`` are filled in by
    :func:`~challengeauth.auth.context.login_with_device_code`; until then
    the credential cannot acquire tokens.
    """

    client_id: str = AZURE_CLI_CLIENT_ID
    username: str | None = None


@dataclass(frozen=True, kw_only=True)
class MSITokenCredentials:
    """Managed identity credential without a concrete hosting environment.

    Use :class:`MSIAppServiceTokenCredentials` or
    :class:`MSIVmTokenCredentials`; instances of this class cannot be used
    to build an authenticator.
    """

    resource: str = DEFAULT_RESOURCE

    def __post_init__(self) -> None:
        _require(self, "resource")


@dataclass(frozen=True, kw_only=True)
class MSIAppServiceTokenCredentials(MSITokenCredentials):
    """Managed identity exposed by App Service / Functions through a local endpoint.

    ``msi_secret`` is sent as the ``secret`` header before api-version
    2019-08-01 and as ``X-IDENTITY-HEADER`` from then on.
    """

    msi_endpoint: str
    msi_secret: str = field(repr=False)
    msi_api_version: str = DEFAULT_MSI_API_VERSION

    def __post_init__(self) -> None:
        super().__post_init__()
        _require(self, "msi_endpoint", "msi_secret", "msi_api_version")


@dataclass(frozen=True, kw_only=True)
class MSIVmTokenCredentials(MSITokenCredentials):
    """Managed identity served by the VM extension on ``localhost:<port>``."""

    port: int = DEFAULT_MSI_VM_PORT

    def __post_init__(self) -> None:
        super().__post_init__()
        if not 0 < self.port < 65536:
            raise ValueError(f"MSIVmTokenCredentials.port out of range: {self.port}")


CredentialVariant = Union[
    ApplicationTokenCredentials,
    UserTokenCredentials,
    DeviceTokenCredentials,
    MSIAppServiceTokenCredentials,
    MSIVmTokenCredentials,
]
