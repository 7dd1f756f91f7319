"""Login handshake for the RouterOS API.

Two login schemes exist:
- modern (RouterOS >= 6.43): /login with =name= and =password= in plaintext
- legacy: /login returns a hex challenge in =ret=, the client answers with
  =response=00<md5(0x00 + password + challenge)>

Routers running legacy firmware answer a modern login with "!done =ret=..."
instead of a plain "!done". That reply switches the session to the legacy
scheme and the login is retried once.
"""

import hashlib
import logging
from dataclasses import dataclass
from typing import Protocol

from routeros_api_client.infra.routeros.exceptions import RouterOSAuthenticationError
from routeros_api_client.infra.routeros.parser import DONE, TRAP, ParsedReply, Reply
from routeros_api_client.infra.routeros.query import Query

logger = logging.getLogger(__name__)

LOGIN_ENDPOINT = "/login"

# Legacy fallback is attempted at most once per login
LEGACY_RETRY_BUDGET = 1


@dataclass
class SessionState:
    """Mutable state of one socket connection."""

    connected: bool = False
    legacy: bool = False


class ApiChannel(Protocol):
    async def write(self, query: Query) -> object: ...

    async def read(self, parse: bool = True) -> ParsedReply: ...


def legacy_response(password: str, challenge: str) -> str:
    """Compute the legacy challenge response.

    Args:
        password: Plaintext password
        challenge: Hex challenge from the router (=ret=)

    Returns:
        "00" followed by the hex MD5 digest

    Raises:
        ValueError: If challenge is not valid hex
    """
    digest = hashlib.md5(b"\x00" + password.encode() + bytes.fromhex(challenge))
    return "00" + digest.hexdigest()


def is_legacy_reply(response: list[str], state: SessionState) -> bool:
    """Detect a legacy router answering a modern login with a challenge."""
    return len(response) > 1 and response[0] == DONE and not state.legacy


class Authenticator:
    """Runs the login handshake over an API channel.

    Example:
        authenticator = Authenticator(client, "admin", "secret")
        if await authenticator.login(state):
            ...
    """

    def __init__(self, channel: ApiChannel, user: str, password: str) -> None:
        self.channel = channel
        self.user = user
        self.password = password

    async def _legacy_query(self) -> Query | None:
        await self.channel.write(Query(LOGIN_ENDPOINT))
        challenge = await self.channel.read()

        salt = challenge.after.get("ret") if isinstance(challenge, Reply) else None
        if not salt:
            logger.warning("Legacy login challenge did not include =ret=")
            return None

        try:
            response = legacy_response(self.password, salt)
        except ValueError:
            logger.warning("Legacy login challenge is not valid hex")
            return None

        return Query(LOGIN_ENDPOINT, [f"=name={self.user}", f"=response={response}"])

    def _modern_query(self) -> Query:
        return Query(LOGIN_ENDPOINT, [f"=name={self.user}", f"=password={self.password}"])

    async def login(self, state: SessionState) -> bool:
        """Log in, switching to the legacy scheme once if the router asks for it.

        Args:
            state: Session state; state.legacy selects the scheme and is set
                when a legacy router is detected

        Returns:
            True if the router accepted the credentials

        Raises:
            RouterOSAuthenticationError: If the router rejected the credentials
        """
        retries = 0 if state.legacy else LEGACY_RETRY_BUDGET

        while True:
            if state.legacy:
                query = await self._legacy_query()
                if query is None:
                    return False
            else:
                query = self._modern_query()

            await self.channel.write(query)
            response = await self.channel.read(parse=False)

            if retries > 0 and is_legacy_reply(response, state):
                logger.info("Legacy RouterOS login detected, retrying with challenge-response")
                state.legacy = True
                retries -= 1
                continue

            if response and response[0] == TRAP:
                raise RouterOSAuthenticationError(response=response)

            return response == [DONE]
