from __future__ import annotations

import os
from typing import Any, Iterator

import pytest

from challengeauth.auth.challenge import Challenge
from challengeauth.auth.translate import TokenResponse, TokenResult


@pytest.fixture(autouse=True)
def clear_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Remove environment variables to prevent cross-test leakage.

    Yields:
        Iterator[None]: Context manager semantics for pytest.
    """
    to_clear = [k for k in os.environ.keys()]
    for k in to_clear:
        monkeypatch.delenv(k, raising=False)
    yield


class RecordingContext:
    """Authentication context double that records every call."""

    def __init__(self, outcome: TokenResponse | Exception) -> None:
        self.outcome = outcome
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self.created_with: list[dict[str, Any]] = []

    def factory(self, authority: str, validate_authority: bool = True, cache=None):
        self.created_with.append(
            {
                "authority": authority,
                "validate_authority": validate_authority,
                "cache": cache,
            }
        )
        return self

    def _record(self, name: str, *args: Any) -> TokenResponse:
        self.calls.append((name, args))
        if isinstance(self.outcome, Exception):
            raise self.outcome
        return self.outcome

    def acquire_token_with_client_credentials(self, resource, client_id, secret):
        return self._record(
            "acquire_token_with_client_credentials", resource, client_id, secret
        )

    def acquire_token_with_username_password(self, resource, username, password, client_id):
        return self._record(
            "acquire_token_with_username_password", resource, username, password, client_id
        )

    def acquire_token(self, resource, username, client_id):
        return self._record("acquire_token", resource, username, client_id)


class RecordingMsiClient:
    """Managed identity client double that records every call."""

    def __init__(self, outcome: TokenResponse | Exception) -> None:
        self.outcome = outcome
        self.calls: list[Any] = []

    def get_token(self, credentials):
        self.calls.append(credentials)
        if isinstance(self.outcome, Exception):
            raise self.outcome
        return self.outcome


@pytest.fixture()
def bearer() -> TokenResult:
    return TokenResult(token_type="Bearer", access_token="abc123")


@pytest.fixture()
def challenge() -> Challenge:
    return Challenge(
        authorization="https://login.windows.net/72f988bf-86f1-41af-91ab-2d7cd011db47",
        resource="https://vault.azure.net",
    )


@pytest.fixture()
def context(bearer: TokenResult) -> RecordingContext:
    return RecordingContext(bearer)


@pytest.fixture()
def msi_client(bearer: TokenResult) -> RecordingMsiClient:
    return RecordingMsiClient(bearer)
