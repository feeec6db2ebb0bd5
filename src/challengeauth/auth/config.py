from __future__ import annotations

from enum import Enum

from pydantic import AliasChoices, Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .credentials import (
    DEFAULT_AUTHORITY_HOST,
    DEFAULT_DOMAIN,
    DEFAULT_MSI_API_VERSION,
    DEFAULT_MSI_VM_PORT,
    DEFAULT_RESOURCE,
)


class Strategy(str, Enum):
    """Supported credential kinds."""

    CLIENT_SECRET = "client_secret"
    USERNAME_PASSWORD = "username_password"
    DEVICE_CODE = "device_code"
    MSI_APP_SERVICE = "msi_app_service"
    MSI_VM = "msi_vm"


class ManagedIdentitySettings(BaseSettings):
    """Managed identity endpoint settings read from the hosting environment.

    App Service and Functions publish ``MSI_ENDPOINT``/``MSI_SECRET`` for the
    2017-09-01 protocol; newer hosts also publish
    ``IDENTITY_ENDPOINT``/``IDENTITY_HEADER`` for the 2019-08-01 protocol.

    Environment variables:
        - IDENTITY_ENDPOINT
        - IDENTITY_HEADER
        - MSI_ENDPOINT
        - MSI_SECRET
        - MSI_API_VERSION
        - MSI_PORT
        - MSI_TIMEOUT
    """

    model_config = SettingsConfigDict(case_sensitive=False, extra="ignore")

    identity_endpoint: str | None = None
    identity_header: SecretStr | None = None
    msi_endpoint: str | None = None
    msi_secret: SecretStr | None = None
    msi_api_version: str = DEFAULT_MSI_API_VERSION
    msi_port: int = DEFAULT_MSI_VM_PORT
    msi_timeout: float = Field(default=30.0, gt=0)


class AuthConfig(BaseSettings):
    """Configuration for selecting and constructing credentials.

    This model reads environment variables automatically using the ``AZURE_``
    prefix (e.g., ``AZURE_TENANT_ID``) and performs cross-field validation
    based on the selected :class:`Strategy`. Managed identity endpoint details
    live in :class:`ManagedIdentitySettings`.

    Environment variables:
        - AZURE_AUTH_STRATEGY
        - AZURE_TENANT_ID
        - AZURE_CLIENT_ID
        - AZURE_CLIENT_SECRET
        - AZURE_USERNAME
        - AZURE_PASSWORD
        - AZURE_AUTHORITY_HOST
        - AZURE_RESOURCE
    """

    model_config = SettingsConfigDict(
        env_prefix="AZURE_",
        case_sensitive=False,
        extra="ignore",
    )

    # A validation_alias bypasses env_prefix and replaces the field name as an
    # input key, so both are listed explicitly.
    strategy: Strategy = Field(
        default=Strategy.MSI_APP_SERVICE,
        validation_alias=AliasChoices("strategy", "AZURE_AUTH_STRATEGY"),
    )
    tenant_id: str = DEFAULT_DOMAIN
    client_id: str | None = None
    client_secret: SecretStr | None = None
    username: str | None = None
    password: SecretStr | None = None
    authority_host: str = DEFAULT_AUTHORITY_HOST
    resource: str = DEFAULT_RESOURCE

    @model_validator(mode="after")
    def _cross_field_validation(self) -> "AuthConfig":
        """Validate required fields for the selected strategy."""
        s = self.strategy
        if s is Strategy.CLIENT_SECRET:
            if not (self.client_id and self.client_secret):
                raise ValueError("client_secret requires client_id and client_secret.")
        elif s is Strategy.USERNAME_PASSWORD:
            if not (self.client_id and self.username and self.password):
                raise ValueError(
                    "username_password requires client_id, username and password."
                )
        # DEVICE_CODE falls back to the Azure CLI client id; the MSI strategies
        # are validated against ManagedIdentitySettings in get_credentials().
        return self
