"""Dependency injection for FastAPI endpoints."""

from __future__ import annotations

import logging
import os

from estimo.factory import create_default_pipeline
from estimo.services.oracle import DEFAULT_MODEL, DocumentOracle
from estimo.services.pipeline import EstimationPipeline

logger = logging.getLogger(__name__)

DEFAULT_ORACLE_TIMEOUT = 300.0


def oracle_timeout() -> float:
    """Oracle request timeout in seconds, from ESTIMO_ORACLE_TIMEOUT."""
    raw = os.environ.get("ESTIMO_ORACLE_TIMEOUT", "")
    if not raw:
        return DEFAULT_ORACLE_TIMEOUT
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring invalid ESTIMO_ORACLE_TIMEOUT=%r", raw)
        return DEFAULT_ORACLE_TIMEOUT


def create_pipeline() -> EstimationPipeline:
    """Create an EstimationPipeline with default configuration.

    Reads ANTHROPIC_API_KEY, ESTIMO_MODEL and ESTIMO_ORACLE_TIMEOUT from
    the environment. Raises ValueError if the key is not set.
    """
    api_key = os.environ.get("ANTHROPIC_API_KEY", "")
    if not api_key:
        msg = (
            "ANTHROPIC_API_KEY environment variable is not set. "
            "Set it to use the /api/estimate endpoint."
        )
        raise ValueError(msg)

    oracle = DocumentOracle(
        api_key=api_key,
        model=os.environ.get("ESTIMO_MODEL") or DEFAULT_MODEL,
        timeout=oracle_timeout(),
    )
    return create_default_pipeline(oracle)
