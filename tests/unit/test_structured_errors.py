"""
Unit tests for structured API and stream errors.
"""

import json

import pytest

from ai_paralegal_sdk._client import _parse_error_response
from ai_paralegal_sdk._errors import (
    AiParalegalAPIError,
    AiParalegalError,
    AiParalegalStreamError,
    StreamUnsupportedError,
)


class TestAiParalegalAPIError:
    def test_error_creation_minimal(self):
        error = AiParalegalAPIError(status_code=500, message="Internal error")

        assert error.status_code == 500
        assert error.message == "Internal error"
        assert error.body is None
        assert error.error_code is None
        assert error.request_id is None
        assert error.details is None

    def test_str_is_the_message(self):
        error = AiParalegalAPIError(status_code=401, message="Invalid exchange token")

        assert str(error) == "Invalid exchange token"

    def test_repr_format(self):
        error = AiParalegalAPIError(status_code=401, message="Unauthorized", error_code="UNAUTHORIZED", body="x")
        r = repr(error)

        assert "AiParalegalAPIError(" in r
        assert "status_code=401" in r
        assert "error_code='UNAUTHORIZED'" in r
        assert "body=..." in r

    def test_to_dict(self):
        error = AiParalegalAPIError(
            status_code=404,
            message="Document not found",
            error_code="NOT_FOUND",
            request_id="req_1",
            details={"id": "doc-1"},
        )

        assert error.to_dict() == {
            "status_code": 404,
            "message": "Document not found",
            "error_code": "NOT_FOUND",
            "request_id": "req_1",
            "details": {"id": "doc-1"},
            "body": None,
        }

    @pytest.mark.parametrize(
        "status, client_err, server_err, auth_err",
        [
            (400, True, False, False),
            (401, True, False, True),
            (403, True, False, True),
            (500, False, True, False),
            (503, False, True, False),
        ],
    )
    def test_status_helpers(self, status, client_err, server_err, auth_err):
        error = AiParalegalAPIError(status_code=status, message="x")

        assert error.is_client_error is client_err
        assert error.is_server_error is server_err
        assert error.is_auth_error is auth_err

    def test_is_library_error(self):
        error = AiParalegalAPIError(status_code=500, message="x")

        assert isinstance(error, AiParalegalError)
        assert isinstance(error, RuntimeError)


class TestParseErrorResponse:
    def test_top_level_message(self):
        err = _parse_error_response(401, json.dumps({"message": "Invalid exchange token"}), "Token exchange")

        assert err.message == "Invalid exchange token"
        assert err.status_code == 401

    def test_error_envelope(self):
        body = json.dumps(
            {
                "error": {
                    "code": "FORBIDDEN",
                    "message": "Matter access denied",
                    "requestId": "req_abc",
                    "details": {"matter_id": "m-1"},
                }
            }
        )

        err = _parse_error_response(403, body)

        assert err.message == "Matter access denied"
        assert err.error_code == "FORBIDDEN"
        assert err.request_id == "req_abc"
        assert err.details == {"matter_id": "m-1"}

    def test_top_level_message_wins_over_envelope(self):
        body = json.dumps({"message": "top", "error": {"message": "nested", "code": "X"}})

        err = _parse_error_response(400, body)

        assert err.message == "top"
        assert err.error_code == "X"

    @pytest.mark.parametrize("body", ["", "not json", "[1, 2]", '{"message": "   "}', '{"other": 1}'])
    def test_fallback_message(self, body):
        err = _parse_error_response(500, body, "OCR request")

        assert err.message == "OCR request failed with status 500"


def test_stream_error_keeps_payload():
    err = AiParalegalStreamError("model overloaded", {"message": "model overloaded", "code": "busy"})

    assert str(err) == "model overloaded"
    assert err.message == "model overloaded"
    assert err.payload["code"] == "busy"
    assert isinstance(err, AiParalegalError)


def test_stream_error_default_payload():
    assert AiParalegalStreamError("x").payload == {}


def test_stream_unsupported_is_library_error():
    assert issubclass(StreamUnsupportedError, AiParalegalError)
