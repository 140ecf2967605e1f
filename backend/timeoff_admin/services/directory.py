"""Credential checks against a company's LDAP directory.

The directory client itself is an injected collaborator. The in-memory
implementation serves development and tests; production wiring installs a
real client through ``set_directory_authenticator``.
"""

from __future__ import annotations

import asyncio
from typing import Protocol, runtime_checkable

from pydantic import BaseModel


class LdapConfig(BaseModel):
    """Connection and lookup parameters of a company's LDAP server."""

    url: str
    binddn: str = ""
    bindcredentials: str = ""
    searchbase: str = ""
    searchfilter: str = ""
    allow_unauthorized_cert: bool = False


class DirectoryAuthenticationError(Exception):
    """The directory rejected the credentials or could not be reached."""


@runtime_checkable
class DirectoryAuthenticator(Protocol):
    """Interface for the directory client."""

    async def authenticate(self, config: LdapConfig, username: str, password: str) -> str:
        """Return the resolved identity. Raises DirectoryAuthenticationError."""
        ...


class InMemoryDirectoryAuthenticator:
    """In-memory stub implementation for development."""

    def __init__(self) -> None:
        self._accounts: dict[tuple[str, str], str] = {}
        self._unreachable: set[str] = set()

    def seed(self, url: str, username: str, password: str) -> None:
        """Register an account on the directory at ``url``."""
        self._accounts[(url.lower(), username)] = password

    def make_unreachable(self, url: str) -> None:
        """Simulate a directory that never answers."""
        self._unreachable.add(url.lower())

    async def authenticate(self, config: LdapConfig, username: str, password: str) -> str:
        url = config.url.lower()
        if url in self._unreachable:
            await asyncio.Event().wait()
        expected = self._accounts.get((url, username))
        if expected is None:
            msg = f"no such user: {username}"
            raise DirectoryAuthenticationError(msg)
        if expected != password:
            msg = "Invalid Credentials"
            raise DirectoryAuthenticationError(msg)
        return config.searchfilter.replace("{{username}}", username)


async def verify_credentials(
    authenticator: DirectoryAuthenticator,
    config: LdapConfig,
    username: str,
    password: str,
    *,
    timeout: float,
) -> str:
    """Authenticate against ``config`` and give up after ``timeout`` seconds."""
    try:
        return await asyncio.wait_for(authenticator.authenticate(config, username, password), timeout)
    except TimeoutError as exc:
        msg = f"LDAP server {config.url} did not respond within {timeout:g} second(s)"
        raise DirectoryAuthenticationError(msg) from exc


_directory_authenticator: DirectoryAuthenticator = InMemoryDirectoryAuthenticator()


def get_directory_authenticator() -> DirectoryAuthenticator:
    """FastAPI dependency for the directory client."""
    return _directory_authenticator


def set_directory_authenticator(authenticator: DirectoryAuthenticator) -> None:
    """Override the client (for testing or production wiring)."""
    global _directory_authenticator
    _directory_authenticator = authenticator
