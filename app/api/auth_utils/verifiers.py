"""
Credential verification for the gallery.

The gallery flow only depends on ``CredentialVerifier``; the shared access
code printed on the QR cards is one implementation among others.
"""

import logging
from abc import ABC, abstractmethod

from pydantic import BaseModel

from app.core import security
from app.core.config import Settings
from app.core.errors import AuthRejected, AuthUnavailable

logger = logging.getLogger(__name__)


class Principal(BaseModel):
    id: str = "guest"
    name: str = "Invité"


class CredentialVerifier(ABC):
    @abstractmethod
    async def verify(self, code: str) -> Principal:
        """
        Returns the authenticated principal.

        Raises:
            AuthRejected: the code does not match.
            AuthUnavailable: the check itself could not be performed.
        """


class SharedCodeVerifier(CredentialVerifier):
    """Compares the submitted code with the single process-wide access code."""

    def __init__(self, access_code: str):
        self.access_code = access_code

    async def verify(self, code: str) -> Principal:
        if not code or not security.codes_match(code, self.access_code):
            raise AuthRejected()
        return Principal()


class HashedCodeVerifier(CredentialVerifier):
    """Checks the submitted code against a bcrypt hash of the access code."""

    def __init__(self, code_hash: str):
        self.code_hash = code_hash

    async def verify(self, code: str) -> Principal:
        if not code:
            raise AuthRejected()
        try:
            matches = security.verify_code_hash(code, self.code_hash)
        except ValueError as e:
            logger.error("Configured access code hash is not a valid bcrypt hash")
            raise AuthUnavailable() from e
        if not matches:
            raise AuthRejected()
        return Principal()


def build_verifier(settings: Settings) -> CredentialVerifier:
    if settings.access_code_hash:
        return HashedCodeVerifier(settings.access_code_hash)
    return SharedCodeVerifier(settings.access_code or "")
