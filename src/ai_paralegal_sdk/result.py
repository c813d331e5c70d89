from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Optional, Union

from pydantic import BaseModel, ConfigDict

if TYPE_CHECKING:
    from ai_paralegal_sdk.client import AiParalegalClient

RESULT_PATH = "/api/sdk/v1/result"

ResultValue = Union[dict[str, Any], str]


class SubmitResultResponse(BaseModel):
    model_config = ConfigDict(extra="allow")
    success: bool
    message: str
    result: Optional[ResultValue] = None


@dataclass(slots=True)
class ResultSubmitter:
    """Hands the final result of an embedded app back to the host."""
    client: AiParalegalClient
    session_token: str

    def submit(self, result: ResultValue) -> SubmitResultResponse:
        http = self.client.http
        resp = http.request(
            "POST",
            RESULT_PATH,
            headers=http.session_headers(self.session_token),
            json={"result": result},
            action="Result submission",
        )
        return SubmitResultResponse.model_validate(resp.json())

    async def asubmit(self, result: ResultValue) -> SubmitResultResponse:
        http = self.client.http
        resp = await http.arequest(
            "POST",
            RESULT_PATH,
            headers=http.session_headers(self.session_token),
            json={"result": result},
            action="Result submission",
        )
        return SubmitResultResponse.model_validate(resp.json())
