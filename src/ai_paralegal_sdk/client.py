"""
Entry point of the SDK: a configured connection to an AI Paralegal host.

The client owns the HTTP transport and performs the API-key authenticated
calls (token exchange and ask-AI). Session scoped capabilities (LLM, OCR,
documents, files, MarkItDown, results) take the client plus a session token.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any
from urllib.parse import parse_qs, urlsplit

from ai_paralegal_sdk._auth import AuthConfig
from ai_paralegal_sdk._client import AiParalegalHttpClient, HttpConfig
from ai_paralegal_sdk.ask import ASK_AI_PATH, AskAiRequest, AskAiResponse
from ai_paralegal_sdk.session import TOKEN_EXCHANGE_PATH, SessionContext, TokenExchangeResponse


@dataclass(slots=True)
class AiParalegalClient:
    """
    Connection to the host.

    `base_url` and `api_key` fall back to AI_PARALEGAL_BASE_URL and
    AI_PARALEGAL_API_KEY. The API key is optional: without it only session
    authenticated calls are possible.
    """
    base_url: str | None = None
    api_key: str | None = field(default=None, repr=False)
    timeout_s: float = 120.0

    _http: AiParalegalHttpClient = field(init=False, repr=False)

    def __post_init__(self) -> None:
        auth = AuthConfig.from_env_or_value(self.base_url, self.api_key)
        self.base_url = auth.base_url
        self.api_key = auth.api_key
        self._http = AiParalegalHttpClient(
            config=HttpConfig(base_url=auth.base_url, timeout_s=self.timeout_s),
            api_key=auth.api_key,
        )

    @property
    def http(self) -> AiParalegalHttpClient:
        return self._http

    def url(self, path: str) -> str:
        """Build a full URL for the given API path."""
        return self._http.url(path)

    def close(self) -> None:
        self._http.close()

    async def aclose(self) -> None:
        await self._http.aclose()

    def __enter__(self) -> AiParalegalClient:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    async def __aenter__(self) -> AiParalegalClient:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.aclose()

    def exchange_token(self, token: str) -> TokenExchangeResponse:
        """
        Exchange a short-lived exchange token for a session token.

        The exchange token is what the host hands to an embedded app, usually
        as the `token` query parameter of the app URL.
        """
        resp = self._http.request(
            "POST",
            TOKEN_EXCHANGE_PATH,
            headers=self._http.api_key_headers(),
            json={"exchange_token": token},
            action="Token exchange",
        )
        return TokenExchangeResponse.model_validate(resp.json())

    async def aexchange_token(self, token: str) -> TokenExchangeResponse:
        resp = await self._http.arequest(
            "POST",
            TOKEN_EXCHANGE_PATH,
            headers=self._http.api_key_headers(),
            json={"exchange_token": token},
            action="Token exchange",
        )
        return TokenExchangeResponse.model_validate(resp.json())

    def start_session(self, token: str) -> SessionContext:
        """Exchange `token` and return the derived session context."""
        return SessionContext.from_exchange(self.exchange_token(token))

    async def astart_session(self, token: str) -> SessionContext:
        return SessionContext.from_exchange(await self.aexchange_token(token))

    def ask_ai(self, request: AskAiRequest) -> AskAiResponse:
        """Send a prompt with API-key authentication, scoped to an explicit firm and matter."""
        resp = self._http.request(
            "POST",
            ASK_AI_PATH,
            headers=self._http.api_key_headers(),
            json=request.model_dump(exclude_none=True),
        )
        return AskAiResponse.model_validate(resp.json())

    async def aask_ai(self, request: AskAiRequest) -> AskAiResponse:
        resp = await self._http.arequest(
            "POST",
            ASK_AI_PATH,
            headers=self._http.api_key_headers(),
            json=request.model_dump(exclude_none=True),
        )
        return AskAiResponse.model_validate(resp.json())


def _session_params(url: str, api_key: str | None, base_url: str | None) -> tuple[str | None, str | None, str | None]:
    query = parse_qs(urlsplit(url).query)

    def first(name: str) -> str | None:
        values = query.get(name)
        return values[0] if values else None

    return first("token"), base_url or first("baseUrl"), api_key or first("apiKey")


def session_from_url(
    url: str,
    *,
    api_key: str | None = None,
    base_url: str | None = None,
    timeout_s: float = 120.0,
) -> tuple[AiParalegalClient, SessionContext] | None:
    """
    Build a client and a session from the URL an embedded app was opened with.

    The host passes `token`, `baseUrl` and optionally `apiKey` as query
    parameters; explicit arguments win over them.

    Returns:
        `(client, session)`, or None when the URL carries no token or no base URL
        is available.
    """
    token, resolved_base_url, resolved_api_key = _session_params(url, api_key, base_url)
    if not token or not resolved_base_url:
        return None

    client = AiParalegalClient(base_url=resolved_base_url, api_key=resolved_api_key, timeout_s=timeout_s)
    return client, client.start_session(token)


async def asession_from_url(
    url: str,
    *,
    api_key: str | None = None,
    base_url: str | None = None,
    timeout_s: float = 120.0,
) -> tuple[AiParalegalClient, SessionContext] | None:
    token, resolved_base_url, resolved_api_key = _session_params(url, api_key, base_url)
    if not token or not resolved_base_url:
        return None

    client = AiParalegalClient(base_url=resolved_base_url, api_key=resolved_api_key, timeout_s=timeout_s)
    return client, await client.astart_session(token)
