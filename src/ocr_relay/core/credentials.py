"""Credential providers for the OCR API key."""

import os
from typing import Protocol


class CredentialProvider(Protocol):
    """Source of the bearer credential, queried once per processing call."""

    def retrieve_credential(self) -> str | None:
        ...


class EnvCredentialProvider:
    """Read the API key from an environment variable on every call."""

    def __init__(self, variable: str = "MISTRAL_API_KEY") -> None:
        self.variable = variable

    def retrieve_credential(self) -> str | None:
        value = os.environ.get(self.variable, "").strip()
        return value or None


class StaticCredentialProvider:
    """Fixed API key, e.g. from a config file."""

    def __init__(self, api_key: str | None) -> None:
        self._api_key = api_key

    def retrieve_credential(self) -> str | None:
        return self._api_key or None
