from __future__ import annotations

from .config import AuthConfig, ManagedIdentitySettings, Strategy
from .credentials import (
    IDENTITY_HEADER_API_VERSION,
    ApplicationTokenCredentials,
    CredentialVariant,
    DeviceTokenCredentials,
    MSIAppServiceTokenCredentials,
    MSIVmTokenCredentials,
    UserTokenCredentials,
)


def get_credentials(
    config: AuthConfig | None = None,
    msi_settings: ManagedIdentitySettings | None = None,
) -> CredentialVariant:
    """Construct a credential variant based on :class:`AuthConfig`.

    Args:
        config: Auth configuration. If ``None``, it is read from the environment.
        msi_settings: Managed identity settings. If ``None``, they are read
            from the environment when a managed identity strategy is selected.

    Returns:
        A concrete credential. Device code credentials still need
        :func:`~challengeauth.auth.context.login_with_device_code` before use.

    Raises:
        ValueError: If App Service managed identity is selected without an
            endpoint and secret. IDENTITY_ENDPOINT/IDENTITY_HEADER take
            precedence over MSI_ENDPOINT/MSI_SECRET.
    """
    cfg = config or AuthConfig()
    common = {
        "domain": cfg.tenant_id,
        "authority_host": cfg.authority_host,
    }

    match cfg.strategy:
        case Strategy.CLIENT_SECRET:
            return ApplicationTokenCredentials(
                client_id=cfg.client_id,
                secret=cfg.client_secret.get_secret_value(),
                **common,
            )
        case Strategy.USERNAME_PASSWORD:
            return UserTokenCredentials(
                client_id=cfg.client_id,
                username=cfg.username,
                password=cfg.password.get_secret_value(),
                **common,
            )
        case Strategy.DEVICE_CODE:
            if cfg.client_id:
                common["client_id"] = cfg.client_id
            return DeviceTokenCredentials(username=cfg.username, **common)
        case Strategy.MSI_APP_SERVICE:
            msi = msi_settings or ManagedIdentitySettings()
            if msi.identity_endpoint and msi.identity_header:
                return MSIAppServiceTokenCredentials(
                    msi_endpoint=msi.identity_endpoint,
                    msi_secret=msi.identity_header.get_secret_value(),
                    msi_api_version=IDENTITY_HEADER_API_VERSION,
                    resource=cfg.resource,
                )
            if not (msi.msi_endpoint and msi.msi_secret):
                raise ValueError(
                    "msi_app_service requires IDENTITY_ENDPOINT and IDENTITY_HEADER, "
                    "or MSI_ENDPOINT and MSI_SECRET, to be set."
                )
            return MSIAppServiceTokenCredentials(
                msi_endpoint=msi.msi_endpoint,
                msi_secret=msi.msi_secret.get_secret_value(),
                msi_api_version=msi.msi_api_version,
                resource=cfg.resource,
            )
        case Strategy.MSI_VM:
            msi = msi_settings or ManagedIdentitySettings()
            return MSIVmTokenCredentials(resource=cfg.resource, port=msi.msi_port)
