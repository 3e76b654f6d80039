"""FastAPI application — create_app factory with /api endpoints."""

from __future__ import annotations

import dataclasses
import json
import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING, Any

from dotenv import load_dotenv
from fastapi import FastAPI, File, Form, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError

# Load .env from project root (backend/../.env or backend/.env)
_backend_dir = Path(__file__).resolve().parent.parent.parent
_project_root = _backend_dir.parent
load_dotenv(_project_root / ".env")
load_dotenv(_backend_dir / ".env")

from estimo.data.rates import RATE_DATA_VERSION
from estimo.data.repository import RateRepository
from estimo.exceptions import EstimoError
from estimo.models.project import ProjectInfo, SourceFile

if TYPE_CHECKING:
    from estimo.services.pipeline import EstimationPipeline, PipelineResult

logger = logging.getLogger(__name__)


def create_app(
    *,
    pipeline: EstimationPipeline | None = None,
    repository: RateRepository | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Parameters
    ----------
    pipeline
        Optional pre-built pipeline for dependency injection (e.g. tests).
        If not provided, one is created from environment variables on first
        request to /api/estimate.
    repository
        Rate repository behind /api/rates. Defaults to the bundled tables.
    """
    app = FastAPI(title="Estimo", version="0.1.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:3000"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Store on app state so tests can inject mocks
    app.state.pipeline = pipeline
    app.state.repository = repository or RateRepository()

    def _get_pipeline() -> EstimationPipeline:
        pl: EstimationPipeline | None = app.state.pipeline
        if pl is not None:
            return pl
        # Lazy-create from environment
        from estimo.api.deps import create_pipeline

        pl = create_pipeline()
        app.state.pipeline = pl
        return pl

    # ------------------------------------------------------------------
    # GET /api/health
    # ------------------------------------------------------------------

    @app.get("/api/health")
    def health() -> dict[str, str]:
        return {"status": "ok", "version": "0.1.0"}

    # ------------------------------------------------------------------
    # POST /api/estimate
    # ------------------------------------------------------------------

    @app.post("/api/estimate")
    async def estimate(
        files: list[UploadFile] = File(default=[]),
        project_name: str = Form("Untitled Project"),
        location: str = Form(""),
        project_type: str = Form("commercial"),
        total_area: float | None = Form(None),
        area_unit: str = Form("sf"),
        currency: str | None = Form(None),
        structural_system: str | None = Form(None),
        stories: int | None = Form(None),
        markups: str | None = Form(None),
    ) -> dict[str, Any]:
        try:
            project = ProjectInfo(
                project_name=project_name,
                location=location,
                project_type=project_type,
                total_area=total_area,
                area_unit=area_unit,
                currency=currency or None,
                structural_system=structural_system or None,
                stories=stories,
                markups=_parse_markups_field(markups),
            )
        except ValidationError as exc:
            raise HTTPException(
                status_code=422, detail=exc.errors(include_url=False, include_context=False)
            ) from exc
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc

        if app.state.pipeline is None and not os.environ.get("ANTHROPIC_API_KEY"):
            raise HTTPException(
                status_code=400,
                detail="ANTHROPIC_API_KEY is not configured.",
            )

        sources = [
            SourceFile(
                filename=upload.filename or "upload",
                content=await upload.read(),
                media_type=upload.content_type or "",
            )
            for upload in files
        ]
        sources = [_with_known_media_type(s) for s in sources]

        try:
            result = await _get_pipeline().run(project, sources)
        except EstimoError as exc:
            logger.exception("Pipeline error during estimation")
            raise HTTPException(status_code=500, detail=str(exc)) from exc

        return _result_payload(result)

    # ------------------------------------------------------------------
    # GET /api/rates/{currency}
    # ------------------------------------------------------------------

    @app.get("/api/rates/{currency}")
    def rates(currency: str) -> dict[str, Any]:
        repo: RateRepository = app.state.repository
        code = currency.strip().upper()
        if not repo.has_currency(code):
            raise HTTPException(
                status_code=404, detail=f"No rate data for currency {code!r}"
            )
        return {
            "currency": code,
            "rate_data_version": RATE_DATA_VERSION,
            "rates": {
                category: {
                    subtype: dataclasses.asdict(record)
                    for subtype, record in subtypes.items()
                }
                for category, subtypes in repo.currency_rates(code).items()
            },
        }

    return app


def _parse_markups_field(raw: str | None) -> dict[str, float]:
    """Parse the ``markups`` form field, a JSON object of percents."""
    if not raw or not raw.strip():
        return {}
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        msg = f"markups must be a JSON object: {exc}"
        raise ValueError(msg) from exc
    if not isinstance(data, dict):
        msg = "markups must be a JSON object"
        raise ValueError(msg)
    return data


def _with_known_media_type(source: SourceFile) -> SourceFile:
    # Browsers often send application/octet-stream; fall back to the suffix.
    if source.is_pdf or source.is_image:
        return source
    return SourceFile(filename=source.filename, content=source.content)


def _result_payload(result: PipelineResult) -> dict[str, Any]:
    estimate = result.estimate
    return {
        "estimate": estimate.model_dump(mode="json"),
        "summary_dict": estimate.to_summary_dict(),
        "events": [
            {
                "pass": event.pass_name,
                "status": event.status,
                "payload": event.payload,
                "elapsed_seconds": event.elapsed_seconds,
            }
            for event in result.events
        ],
        "state": result.state.value,
        "processing_time_seconds": result.processing_time_seconds,
        "fallback": result.fallback_reason is not None,
        "fallback_reason": result.fallback_reason,
    }
