from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from challengeauth.auth.scopes import resource_from_scope, scope_from_resource

# Strategy: absolute http/https resource URLs, no ".default" segment
resources = st.builds(
    lambda scheme, host, path: f"{scheme}://{host}{path}",
    scheme=st.sampled_from(["http", "https"]),
    host=st.from_regex(
        r"(?:[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?\.)+[a-z]{2,}", fullmatch=True
    ),
    path=st.from_regex(r"(?:/[A-Za-z0-9_~-]*)*", fullmatch=True),
)


@pytest.mark.parametrize(
    ("resource", "scope"),
    [
        ("https://vault.azure.net", "https://vault.azure.net/.default"),
        ("https://management.azure.com/", "https://management.azure.com/.default"),
        ("https://graph.microsoft.com/.default", "https://graph.microsoft.com/.default"),
    ],
)
def test_scope_from_resource(resource: str, scope: str) -> None:
    assert scope_from_resource(resource) == scope


def test_resource_from_scope__strips_default_suffix() -> None:
    assert resource_from_scope("https://vault.azure.net/.default") == "https://vault.azure.net"
    assert resource_from_scope("https://vault.azure.net") == "https://vault.azure.net"


@given(resources)
def test_scope_from_resource__recovers_resource(resource: str) -> None:
    """The scope maps back to the resource, less any trailing slash."""
    scope = scope_from_resource(resource)
    assert scope.endswith("/.default")
    assert resource_from_scope(scope) == resource.rstrip("/")
