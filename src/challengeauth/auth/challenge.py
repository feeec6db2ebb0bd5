from __future__ import annotations

from dataclasses import dataclass

from requests.utils import parse_dict_header

from .scopes import resource_from_scope


@dataclass(frozen=True)
class Challenge:
    """Authority and resource a server asked the client to authenticate against."""

    authorization: str
    resource: str

    def __post_init__(self) -> None:
        if not self.authorization or not self.resource:
            raise ValueError("Challenge requires both authorization and resource.")

    @classmethod
    def from_header(cls, header: str) -> "Challenge":
        """Parse a ``WWW-Authenticate`` Bearer challenge.

        Accepts ``authorization`` or ``authorization_uri`` for the authority
        and ``resource`` or, failing that, ``scope`` for the target.

        Raises:
            ValueError: If the header is not a Bearer challenge or lacks
                either part.
        """
        scheme, _, rest = header.strip().partition(" ")
        if scheme.lower() != "bearer":
            raise ValueError(f"Not a Bearer challenge: {header!r}")

        params = {
            key.strip().lower(): value
            for key, value in parse_dict_header(rest).items()
            if value is not None
        }
        authorization = params.get("authorization") or params.get("authorization_uri")
        resource = params.get("resource")
        if not resource and params.get("scope"):
            resource = resource_from_scope(params["scope"])
        if not authorization or not resource:
            raise ValueError(f"Bearer challenge lacks authorization or resource: {header!r}")
        return cls(authorization=authorization, resource=resource)
