"""Document oracle — sends drawings and instructions to the Anthropic Messages API.

The oracle reads drawings and returns draft structured data as free text.
Nothing it returns is trusted: callers parse it with
:func:`estimo.jsonparse.extract_json` and validate downstream.
"""

from __future__ import annotations

import base64
import logging
from typing import TYPE_CHECKING, Any

import anthropic
from anthropic.types import DocumentBlockParam, ImageBlockParam, TextBlockParam

from estimo.exceptions import OracleCallError
from estimo.jsonparse import extract_json
from estimo.services.pdf_text import PdfTextExtractor

if TYPE_CHECKING:
    from collections.abc import Sequence

    from estimo.models.project import SourceFile

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-sonnet-4-5-20250929"

SYSTEM_PROMPT = (
    "You are an expert construction estimator and structural engineer "
    "reading construction drawings.\n\n"
    "Report only what the documents show. When a value is not shown, "
    "use null rather than guessing, and never invent member marks or "
    "counts.\n\n"
    "Always answer with a single JSON object in ```json ... ``` code "
    "fences, following exactly the format requested."
)

# Substring the API uses when it cannot read a supplied document.
_REJECTION_MARKERS = ("could not process", "unable to process", "invalid pdf")

ContentBlock = DocumentBlockParam | ImageBlockParam | TextBlockParam


class DocumentOracle:
    """Async client for the document-understanding oracle."""

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        timeout: float = 300.0,
        max_tokens: int = 8192,
        text_extractor: PdfTextExtractor | None = None,
    ) -> None:
        self._client = anthropic.AsyncAnthropic(
            api_key=api_key,
            timeout=timeout,
        )
        self._model = model
        self._max_tokens = max_tokens
        self._text_extractor = text_extractor or PdfTextExtractor()

    async def invoke(
        self, instruction: str, files: Sequence[SourceFile] = ()
    ) -> str:
        """Send *instruction* with *files* attached and return the raw text.

        If the API rejects one of the documents, the request is retried once
        with the documents replaced by their extracted text layer.

        Raises
        ------
        OracleCallError
            If the call fails for any other reason, or the text-only retry
            fails too.
        """
        try:
            return await self._send(self._build_content(instruction, files))
        except OracleCallError as exc:
            if not (exc.document_rejected and files):
                raise
            logger.warning(
                "Oracle rejected source documents (%s), retrying with extracted text",
                exc,
            )
        return await self._send(self._build_text_only_content(instruction, files))

    async def invoke_json(
        self, instruction: str, files: Sequence[SourceFile] = ()
    ) -> dict[str, Any]:
        """Like :meth:`invoke`, but parse the JSON object in the response.

        Raises
        ------
        OracleCallError
            If the call fails.
        JsonExtractionError
            If the response contains no recoverable JSON object.
        """
        raw = await self.invoke(instruction, files)
        return extract_json(raw)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _build_content(
        instruction: str, files: Sequence[SourceFile]
    ) -> list[ContentBlock]:
        parts: list[ContentBlock] = []
        for source in files:
            data = base64.b64encode(source.content).decode("utf-8")
            if source.is_pdf:
                parts.append(
                    DocumentBlockParam(
                        type="document",
                        source={
                            "type": "base64",
                            "media_type": "application/pdf",
                            "data": data,
                        },
                    )
                )
            elif source.is_image:
                parts.append(
                    ImageBlockParam(
                        type="image",
                        source={
                            "type": "base64",
                            "media_type": source.media_type,  # type: ignore[typeddict-item]
                            "data": data,
                        },
                    )
                )
            else:
                logger.info("Skipping unsupported file type %s", source.filename)
        parts.append(TextBlockParam(type="text", text=instruction))
        return parts

    def _build_text_only_content(
        self, instruction: str, files: Sequence[SourceFile]
    ) -> list[ContentBlock]:
        text = self._text_extractor.extract_all(files)
        if not text.strip():
            text = "(no readable text could be extracted from the drawings)"
        return [
            TextBlockParam(
                type="text",
                text=(
                    "The drawings could not be attached directly. Their "
                    "extracted text follows.\n\n"
                    f"{text}\n\n---\n\n{instruction}"
                ),
            )
        ]

    async def _send(self, content: list[ContentBlock]) -> str:
        """Call the Messages API and join the text blocks of the reply."""
        try:
            response = await self._client.messages.create(
                model=self._model,
                max_tokens=self._max_tokens,
                system=SYSTEM_PROMPT,
                messages=[{"role": "user", "content": content}],
            )
        except anthropic.BadRequestError as exc:
            rejected = any(m in str(exc).lower() for m in _REJECTION_MARKERS)
            msg = f"Oracle rejected the request: {exc}"
            raise OracleCallError(msg, document_rejected=rejected) from exc
        except anthropic.APIError as exc:
            msg = f"Oracle call failed: {exc}"
            raise OracleCallError(msg) from exc

        text_blocks = [block.text for block in response.content if block.type == "text"]
        return "\n".join(text_blocks)
