"""Tests for the document oracle — all API calls are mocked."""

from __future__ import annotations

import asyncio
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import anthropic
import httpx
import pytest

from estimo.exceptions import JsonExtractionError, OracleCallError
from estimo.models.project import SourceFile
from estimo.services.oracle import DocumentOracle

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _mock_api_response(text: str) -> MagicMock:
    block = MagicMock()
    block.type = "text"
    block.text = text
    response = MagicMock()
    response.content = [block]
    return response


def _bad_request(message: str) -> anthropic.BadRequestError:
    request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
    return anthropic.BadRequestError(
        message, response=httpx.Response(400, request=request), body=None
    )


@pytest.fixture()
def oracle() -> DocumentOracle:
    text_extractor = MagicMock()
    text_extractor.extract_all.return_value = "BEAM W24x68"
    return DocumentOracle(api_key="test-key", text_extractor=text_extractor)


_PDF = SourceFile("S-101.pdf", b"%PDF-1.7 fake")
_PNG = SourceFile("photo.png", b"\x89PNG fake")


def _content_of(call: Any) -> list[dict[str, Any]]:
    return call.kwargs["messages"][0]["content"]


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


class TestInvoke:
    def test_attaches_documents_then_instruction(self, oracle: DocumentOracle) -> None:
        with patch.object(
            oracle._client.messages,
            "create",
            new_callable=AsyncMock,
            return_value=_mock_api_response("ok"),
        ) as create:
            text = asyncio.run(oracle.invoke("Classify", [_PDF, _PNG]))

        assert text == "ok"
        content = _content_of(create.call_args)
        assert [part["type"] for part in content] == ["document", "image", "text"]
        assert content[1]["source"]["media_type"] == "image/png"
        assert content[-1]["text"] == "Classify"

    def test_rejected_document_retries_with_text(self, oracle: DocumentOracle) -> None:
        with patch.object(
            oracle._client.messages,
            "create",
            new_callable=AsyncMock,
            side_effect=[
                _bad_request("Could not process PDF"),
                _mock_api_response("from text"),
            ],
        ) as create:
            text = asyncio.run(oracle.invoke("Extract", [_PDF]))

        assert text == "from text"
        assert create.await_count == 2
        retry_content = _content_of(create.call_args_list[1])
        assert len(retry_content) == 1
        assert "BEAM W24x68" in retry_content[0]["text"]
        assert retry_content[0]["text"].endswith("Extract")

    def test_other_bad_request_is_not_retried(self, oracle: DocumentOracle) -> None:
        with (
            patch.object(
                oracle._client.messages,
                "create",
                new_callable=AsyncMock,
                side_effect=_bad_request("max_tokens too large"),
            ) as create,
            pytest.raises(OracleCallError) as excinfo,
        ):
            asyncio.run(oracle.invoke("Extract", [_PDF]))

        assert create.await_count == 1
        assert not excinfo.value.document_rejected

    def test_failed_text_retry_raises(self, oracle: DocumentOracle) -> None:
        with (
            patch.object(
                oracle._client.messages,
                "create",
                new_callable=AsyncMock,
                side_effect=[
                    _bad_request("Could not process PDF"),
                    _bad_request("Could not process PDF"),
                ],
            ),
            pytest.raises(OracleCallError),
        ):
            asyncio.run(oracle.invoke("Extract", [_PDF]))


class TestInvokeJson:
    def test_parses_fenced_json(self, oracle: DocumentOracle) -> None:
        reply = 'Looking at the sheets...\n```json\n{"sheets": [1]}\n```'
        with patch.object(
            oracle._client.messages,
            "create",
            new_callable=AsyncMock,
            return_value=_mock_api_response(reply),
        ):
            assert asyncio.run(oracle.invoke_json("Classify")) == {"sheets": [1]}

    def test_no_json_raises(self, oracle: DocumentOracle) -> None:
        with (
            patch.object(
                oracle._client.messages,
                "create",
                new_callable=AsyncMock,
                return_value=_mock_api_response("I cannot read these drawings."),
            ),
            pytest.raises(JsonExtractionError),
        ):
            asyncio.run(oracle.invoke_json("Classify"))
