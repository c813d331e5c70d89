from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

TOKEN_EXCHANGE_PATH = "/api/sdk/v1/token/exchange"


class TokenExchangeResponse(BaseModel):
    """Raw body of POST /api/sdk/v1/token/exchange."""
    model_config = ConfigDict(extra="allow")

    session_token: str
    firm_id: str
    matter_id: str
    parameters: Optional[dict[str, Any]] = None
    chat_id: Optional[str] = None
    conversation_id: Optional[str] = None
    expires_at: str


class SessionContext(BaseModel):
    """
    Session derived from a token exchange.

    The session token already encodes the firm and matter, so session scoped
    calls only need `session_token`.
    """
    model_config = ConfigDict(frozen=True)

    session_token: str
    firm_id: str
    matter_id: str
    parameters: dict[str, Any] = Field(default_factory=dict)
    chat_id: Optional[str] = None
    conversation_id: Optional[str] = None
    expires_at: str

    @classmethod
    def from_exchange(cls, response: TokenExchangeResponse) -> SessionContext:
        return cls(
            session_token=response.session_token,
            firm_id=response.firm_id,
            matter_id=response.matter_id,
            parameters=response.parameters or {},
            chat_id=response.chat_id,
            conversation_id=response.conversation_id,
            expires_at=response.expires_at,
        )
