from __future__ import annotations

from typing import Any

import pytest

from challengeauth.auth import context as context_module
from challengeauth.auth.context import MsalAuthenticationContext, login_with_device_code
from challengeauth.auth.credentials import DeviceTokenCredentials
from challengeauth.auth.errors import AcquisitionFailure
from challengeauth.auth.translate import ErrorResponse, TokenResult

AUTHORITY = "https://login.microsoftonline.com/contoso.onmicrosoft.com"
TOKEN = {"token_type": "Bearer", "access_token": "abc123", "expires_in": 3600}
DEVICE_FLOW = {
    "user_code": "ABCD1234",
    "message": "To sign in, use a web browser to open the page "
    "https://microsoft.com/devicelogin and enter the code ABCD1234 to authenticate.",
}


class _App:
    """Stand-in for an MSAL application that records its construction and calls."""

    instances: list["_App"] = []
    result: dict[str, Any] | None = TOKEN
    accounts: list[dict[str, Any]] = []
    flow: dict[str, Any] = {}

    def __init__(self, client_id: str, **kwargs: Any) -> None:
        self.client_id = client_id
        self.kwargs = kwargs
        self.calls: list[tuple[str, tuple[Any, ...], dict[str, Any]]] = []
        type(self).instances.append(self)

    def acquire_token_for_client(self, *args: Any, **kwargs: Any):
        self.calls.append(("acquire_token_for_client", args, kwargs))
        return type(self).result

    def acquire_token_by_username_password(self, *args: Any, **kwargs: Any):
        self.calls.append(("acquire_token_by_username_password", args, kwargs))
        return type(self).result

    def get_accounts(self, username: str | None = None):
        self.calls.append(("get_accounts", (), {"username": username}))
        return type(self).accounts

    def acquire_token_silent(self, *args: Any, **kwargs: Any):
        self.calls.append(("acquire_token_silent", args, kwargs))
        return type(self).result

    def initiate_device_flow(self, *args: Any, **kwargs: Any):
        self.calls.append(("initiate_device_flow", args, kwargs))
        return type(self).flow

    def acquire_token_by_device_flow(self, *args: Any, **kwargs: Any):
        self.calls.append(("acquire_token_by_device_flow", args, kwargs))
        return type(self).result


@pytest.fixture()
def msal_apps(monkeypatch: pytest.MonkeyPatch) -> type[_App]:
    class App(_App):
        instances = []
        result = TOKEN
        accounts = []
        flow = DEVICE_FLOW

    monkeypatch.setattr(context_module.msal, "ConfidentialClientApplication", App)
    monkeypatch.setattr(context_module.msal, "PublicClientApplication", App)
    return App


def test_client_credentials__confidential_app_with_default_scope(msal_apps) -> None:
    cache = object()
    ctx = MsalAuthenticationContext(AUTHORITY, cache=cache)

    response = ctx.acquire_token_with_client_credentials("https://vault.azure.net", "c", "s")

    assert isinstance(response, TokenResult)
    assert (response.token_type, response.access_token) == ("Bearer", "abc123")
    (app,) = msal_apps.instances
    assert app.client_id == "c"
    assert app.kwargs == {
        "client_credential": "s",
        "authority": AUTHORITY,
        "validate_authority": True,
        "token_cache": cache,
    }
    assert app.calls == [
        ("acquire_token_for_client", (), {"scopes": ["https://vault.azure.net/.default"]})
    ]


def test_username_password__public_app(msal_apps) -> None:
    ctx = MsalAuthenticationContext(AUTHORITY, validate_authority=False)

    response = ctx.acquire_token_with_username_password(
        "https://management.azure.com/", "u@contoso.com", "p", "c"
    )

    assert isinstance(response, TokenResult)
    (app,) = msal_apps.instances
    assert app.kwargs["validate_authority"] is False
    assert app.calls == [
        (
            "acquire_token_by_username_password",
            ("u@contoso.com", "p"),
            {"scopes": ["https://management.azure.com/.default"]},
        )
    ]


def test_error_result__becomes_error_response(msal_apps) -> None:
    msal_apps.result = {
        "error": "invalid_client",
        "error_description": "AADSTS7000215: Invalid client secret provided.",
    }
    ctx = MsalAuthenticationContext(AUTHORITY)

    response = ctx.acquire_token_with_client_credentials("https://vault.azure.net", "c", "s")

    assert isinstance(response, ErrorResponse)
    assert response.error["code"] == "invalid_client"


def test_acquire_token__uses_cached_account(msal_apps) -> None:
    account = {"username": "u@contoso.com"}
    msal_apps.accounts = [account]
    ctx = MsalAuthenticationContext(AUTHORITY)

    response = ctx.acquire_token("https://vault.azure.net", "u@contoso.com", "c")

    assert isinstance(response, TokenResult)
    (app,) = msal_apps.instances
    assert app.calls == [
        ("get_accounts", (), {"username": "u@contoso.com"}),
        (
            "acquire_token_silent",
            (["https://vault.azure.net/.default"],),
            {"account": account},
        ),
    ]


def test_acquire_token__without_cached_account_requires_interaction(msal_apps) -> None:
    ctx = MsalAuthenticationContext(AUTHORITY)

    response = ctx.acquire_token("https://vault.azure.net", "u@contoso.com", "c")

    assert isinstance(response, ErrorResponse)
    assert response.error["code"] == "interaction_required"
    (app,) = msal_apps.instances
    assert [name for name, _, _ in app.calls] == ["get_accounts"]


def test_acquire_token__silent_miss_requires_interaction(msal_apps) -> None:
    msal_apps.accounts = [{"username": "u@contoso.com"}]
    msal_apps.result = None
    ctx = MsalAuthenticationContext(AUTHORITY)

    response = ctx.acquire_token("https://vault.azure.net", "u@contoso.com", "c")

    assert isinstance(response, ErrorResponse)
    assert response.error["code"] == "interaction_required"


def test_device_code_login__fills_username_and_cache(msal_apps) -> None:
    msal_apps.result = {**TOKEN, "id_token_claims": {"preferred_username": "u@contoso.com"}}
    shown: list[str] = []
    creds = DeviceTokenCredentials(domain="contoso.onmicrosoft.com")

    completed = login_with_device_code(creds, "https://vault.azure.net", prompt=shown.append)

    assert completed.username == "u@contoso.com"
    assert completed.token_cache is not None
    assert completed.client_id == creds.client_id
    assert shown == [DEVICE_FLOW["message"]]
    (app,) = msal_apps.instances
    assert app.kwargs == {"authority": AUTHORITY, "token_cache": completed.token_cache}
    assert app.calls == [
        ("initiate_device_flow", (), {"scopes": ["https://vault.azure.net/.default"]}),
        ("acquire_token_by_device_flow", (DEVICE_FLOW,), {}),
    ]


def test_device_code_login__reuses_existing_cache(msal_apps) -> None:
    msal_apps.accounts = [{"username": "u@contoso.com"}]
    cache = object()
    creds = DeviceTokenCredentials(token_cache=cache)

    completed = login_with_device_code(creds, prompt=lambda message: None)

    assert completed.token_cache is cache
    assert completed.username == "u@contoso.com"


def test_device_code_login__flow_not_started(msal_apps) -> None:
    msal_apps.flow = {"error": "invalid_client", "error_description": "Unknown client."}

    with pytest.raises(AcquisitionFailure, match="Unknown client"):
        login_with_device_code(DeviceTokenCredentials(), prompt=lambda message: None)


def test_device_code_login__sign_in_failed(msal_apps) -> None:
    msal_apps.result = {"error": "expired_token", "error_description": "Code expired."}

    with pytest.raises(AcquisitionFailure, match="Code expired") as info:
        login_with_device_code(DeviceTokenCredentials(), prompt=lambda message: None)
    assert info.value.error["code"] == "expired_token"
