"""Authenticators that answer Azure AD Bearer challenges.

Public API:
- create_authenticator() → Authenticator
- normalize() (credential normalization)
- translate() (token response → Authorization value)
- credential classes (ApplicationTokenCredentials, UserTokenCredentials,
  DeviceTokenCredentials, MSIAppServiceTokenCredentials, MSIVmTokenCredentials)
- AuthConfig, ManagedIdentitySettings, Strategy and get_credentials() (settings)
- Challenge (parsed WWW-Authenticate challenge)
- login_with_device_code() (completes DeviceTokenCredentials)
"""

from .authenticator import Authenticator, create_authenticator
from .challenge import Challenge
from .config import AuthConfig, ManagedIdentitySettings, Strategy
from .context import (
    AuthenticationContext,
    MsalAuthenticationContext,
    login_with_device_code,
)
from .credentials import (
    ApplicationTokenCredentials,
    DeviceTokenCredentials,
    MSIAppServiceTokenCredentials,
    MSITokenCredentials,
    MSIVmTokenCredentials,
    UserTokenCredentials,
)
from .errors import (
    AcquisitionFailure,
    AuthenticatorError,
    DeviceFlowNotCompleted,
    UnresolvableCredentialVariant,
    UnsupportedCredentialKind,
)
from .factory import get_credentials
from .msi import ManagedIdentityClient
from .normalize import normalize
from .translate import AuthorizationResult, ErrorResponse, TokenResult, translate

__all__ = [
    "Authenticator",
    "create_authenticator",
    "Challenge",
    "AuthConfig",
    "ManagedIdentitySettings",
    "Strategy",
    "get_credentials",
    "AuthenticationContext",
    "MsalAuthenticationContext",
    "login_with_device_code",
    "ManagedIdentityClient",
    "ApplicationTokenCredentials",
    "UserTokenCredentials",
    "DeviceTokenCredentials",
    "MSITokenCredentials",
    "MSIAppServiceTokenCredentials",
    "MSIVmTokenCredentials",
    "AuthenticatorError",
    "UnresolvableCredentialVariant",
    "UnsupportedCredentialKind",
    "DeviceFlowNotCompleted",
    "AcquisitionFailure",
    "normalize",
    "translate",
    "AuthorizationResult",
    "TokenResult",
    "ErrorResponse",
]
