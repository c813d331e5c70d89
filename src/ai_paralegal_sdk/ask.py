"""
Ask-AI: questions answered against the documents and facts of a matter.

`AiParalegalClient.ask_ai` covers API-key authentication with an explicit
firm and matter; `AskMatterAI` covers session authentication, where the
session token already carries the firm and matter.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from ai_paralegal_sdk.client import AiParalegalClient

ASK_AI_PATH = "/api/sdk/v1/ai/ask"


class AskAiRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")
    prompt: str
    firm_id: str
    matter_id: str
    load_matter_facts: Optional[bool] = None


class SessionAskAiRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")
    prompt: str
    load_matter_facts: Optional[bool] = None


class AskAiReference(BaseModel):
    """A document the answer was grounded on."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    client_document_id: str = Field(alias="clientDocumentId")
    client_document_name: str = Field(alias="clientDocumentName")
    parent_client_document_id: Optional[str] = Field(default=None, alias="parentClientDocumentId")
    parent_document_name: Optional[str] = Field(default=None, alias="parentDocumentName")
    provider_item_path: Optional[str] = Field(default=None, alias="providerItemPath")
    matter_id: str = Field(alias="matterId")


class AskAiResponseData(BaseModel):
    model_config = ConfigDict(extra="allow")
    answer: str
    references: list[AskAiReference] = Field(default_factory=list)


class AskAiResponse(BaseModel):
    model_config = ConfigDict(extra="allow")
    data: AskAiResponseData


@dataclass(slots=True)
class AskMatterAI:
    """Session authenticated ask-AI for the matter bound to the session."""
    client: AiParalegalClient
    session_token: str

    def ask(self, prompt: str, *, load_matter_facts: bool | None = None) -> AskAiResponse:
        body = SessionAskAiRequest(prompt=prompt, load_matter_facts=load_matter_facts)
        resp = self.client.http.request(
            "POST",
            ASK_AI_PATH,
            headers=self.client.http.session_headers(self.session_token),
            json=body.model_dump(exclude_none=True),
        )
        return AskAiResponse.model_validate(resp.json())

    async def aask(self, prompt: str, *, load_matter_facts: bool | None = None) -> AskAiResponse:
        body = SessionAskAiRequest(prompt=prompt, load_matter_facts=load_matter_facts)
        resp = await self.client.http.arequest(
            "POST",
            ASK_AI_PATH,
            headers=self.client.http.session_headers(self.session_token),
            json=body.model_dump(exclude_none=True),
        )
        return AskAiResponse.model_validate(resp.json())
