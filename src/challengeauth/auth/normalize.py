from __future__ import annotations

import logging

from .credentials import (
    CredentialVariant,
    MSIAppServiceTokenCredentials,
    MSITokenCredentials,
    MSIVmTokenCredentials,
)
from .errors import UnresolvableCredentialVariant

logger = logging.getLogger(__name__)


def normalize(credentials: object) -> CredentialVariant:
    """Resolve ``credentials`` into a variant an authenticator can dispatch on.

    Managed identity credentials are copied so the authenticator never holds
    the caller's instance. Directory credentials are already concrete and are
    returned as is. Unknown objects are also returned unchanged; rejecting
    them is left to the authenticator.

    Args:
        credentials: Any credential object.

    Returns:
        The normalized credential.

    Raises:
        UnresolvableCredentialVariant: If ``credentials`` is a bare
            :class:`MSITokenCredentials`.
    """
    match credentials:
        case MSIAppServiceTokenCredentials():
            return MSIAppServiceTokenCredentials(
                msi_endpoint=credentials.msi_endpoint,
                msi_secret=credentials.msi_secret,
                msi_api_version=credentials.msi_api_version,
                resource=credentials.resource,
            )
        case MSIVmTokenCredentials():
            return MSIVmTokenCredentials(
                resource=credentials.resource, port=credentials.port
            )
        case MSITokenCredentials():
            logger.debug("Rejecting %s without a hosting environment", type(credentials).__name__)
            raise UnresolvableCredentialVariant(
                "MSI credentials must be one of: "
                "MSIVmTokenCredentials, MSIAppServiceTokenCredentials"
            )
        case _:
            return credentials
