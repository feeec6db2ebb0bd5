from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from requests.auth import AuthBase

from challengeauth.auth.challenge import Challenge

if TYPE_CHECKING:
    import requests

    from challengeauth.auth.authenticator import Authenticator

logger = logging.getLogger(__name__)


class ChallengeAuth(AuthBase):
    """``requests`` auth that answers Bearer challenges with an authenticator.

    The first request goes out unauthenticated. When the server replies 401
    with a ``WWW-Authenticate: Bearer authorization=..., resource=...``
    challenge, the authenticator is run and the request is resent once with
    the resulting ``Authorization`` header.

    Runs the authenticator with :func:`asyncio.run`, so it must not be used
    from inside a running event loop.

    Args:
        authenticator: The authenticator built for the caller's credentials.
    """

    def __init__(self, authenticator: Authenticator) -> None:
        self.authenticator = authenticator

    def __call__(self, r: requests.PreparedRequest) -> requests.PreparedRequest:
        r.register_hook("response", self.handle_401)
        return r

    def handle_401(self, r: requests.Response, **kwargs) -> requests.Response:
        """Response hook: authorize and resend on a Bearer challenge."""
        if r.status_code != 401:
            return r

        header = r.headers.get("WWW-Authenticate", "")
        try:
            challenge = Challenge.from_header(header)
        except ValueError:
            logger.debug("Ignoring 401 without a usable Bearer challenge: %r", header)
            return r

        logger.debug(
            "Answering challenge from %s for resource %s",
            challenge.authorization,
            challenge.resource,
        )
        authorization = asyncio.run(self.authenticator.authorize(challenge))

        # Release the connection before reusing it.
        r.content
        r.close()

        prep = r.request.copy()
        prep.headers["Authorization"] = authorization
        prep.deregister_hook("response", self.handle_401)

        retried = r.connection.send(prep, **kwargs)
        retried.history.append(r)
        retried.request = prep
        return retried
