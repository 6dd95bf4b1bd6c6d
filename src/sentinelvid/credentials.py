"""Credential providers used by callers of the pipeline."""

from __future__ import annotations

import logging

from sentinelvid.config import resolve_env_var
from sentinelvid.interfaces import CredentialProvider

logger = logging.getLogger(__name__)


class EnvCredentialProvider(CredentialProvider):
    """Reads the credential from an environment variable."""

    def __init__(self, env_var: str) -> None:
        self.env_var = env_var

    def get_credential(self) -> str | None:
        value = resolve_env_var(self.env_var)
        if not value or not value.strip():
            logger.debug("Credential env var not set: %s", self.env_var)
            return None
        return value.strip()

    def __repr__(self) -> str:
        return f"EnvCredentialProvider(env_var={self.env_var!r})"


class StaticCredentialProvider(CredentialProvider):
    """Returns a credential supplied up front (e.g. a CLI flag)."""

    def __init__(self, credential: str | None) -> None:
        self._credential = credential.strip() if credential else None

    def get_credential(self) -> str | None:
        return self._credential or None

    def __repr__(self) -> str:
        state = "set" if self._credential else "unset"
        return f"StaticCredentialProvider(<{state}>)"


class ChainedCredentialProvider(CredentialProvider):
    """Returns the first credential yielded by a list of providers."""

    def __init__(self, providers: list[CredentialProvider]) -> None:
        self.providers = list(providers)

    def get_credential(self) -> str | None:
        for provider in self.providers:
            credential = provider.get_credential()
            if credential:
                return credential
        return None
