"""
This module resolves the connection settings for the AI Paralegal host.
Values passed explicitly win over the environment variables.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from urllib.parse import urlsplit

from ai_paralegal_sdk._errors import AiParalegalError

ENV_API_KEY = "AI_PARALEGAL_API_KEY"
ENV_BASE_URL = "AI_PARALEGAL_BASE_URL"


@dataclass(frozen=True, slots=True)
class AuthConfig:
    """
    Connection settings: the normalized host base URL and the optional API key.

    The API key is only needed for API-key authenticated calls (token
    exchange, ask-AI); session calls authenticate with a bearer session token.
    """

    base_url: str
    api_key: str | None = None

    @staticmethod
    def from_env_or_value(base_url: str | None, api_key: str | None = None) -> AuthConfig:
        """
        Create an AuthConfig from explicit values or the environment.

        Args:
            base_url: Host base URL, e.g. "https://paralegal.example.com".
            api_key: Optional API key.

        Returns:
            An AuthConfig with trailing slashes stripped from the base URL.

        Raises:
            AiParalegalError: If the base URL is missing or not an http(s) URL.
        """
        url = base_url or os.getenv(ENV_BASE_URL)
        if not url:
            raise AiParalegalError(
                f"AiParalegalClient: baseUrl is required. Define {ENV_BASE_URL} in environment or pass base_url value"
            )
        return AuthConfig(
            base_url=normalize_base_url(url),
            api_key=api_key or os.getenv(ENV_API_KEY) or None,
        )


def normalize_base_url(url: str) -> str:
    parts = urlsplit(url.strip())
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise AiParalegalError("AiParalegalClient: baseUrl must be a valid HTTP or HTTPS URL")
    return url.strip().rstrip("/")
