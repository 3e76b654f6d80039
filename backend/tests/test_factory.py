"""Tests for pipeline construction from code and from the environment."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from estimo.api.deps import DEFAULT_ORACLE_TIMEOUT, create_pipeline, oracle_timeout
from estimo.data.repository import RateRepository
from estimo.factory import create_default_pipeline
from estimo.services.measurements import RawMeasurementExtractor
from estimo.services.oracle import DEFAULT_MODEL
from estimo.services.pipeline import EstimationPipeline
from estimo.services.quick_estimator import QuickEstimator


class TestCreateDefaultPipeline:
    def test_wires_every_pass(self) -> None:
        pipeline = create_default_pipeline(MagicMock())

        assert isinstance(pipeline, EstimationPipeline)
        assert isinstance(pipeline._fallback_estimator, QuickEstimator)
        assert isinstance(pipeline._measurement_extractor, RawMeasurementExtractor)

    def test_shares_one_validator_and_repository(self) -> None:
        repository = RateRepository()
        pipeline = create_default_pipeline(MagicMock(), repository)

        assert pipeline._fallback_estimator._validator is pipeline._validator
        assert pipeline._validator._repository is repository
        assert pipeline._pricing._repository is repository


class TestCreatePipelineFromEnv:
    def test_requires_api_key(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        with pytest.raises(ValueError, match="ANTHROPIC_API_KEY"):
            create_pipeline()

    def test_model_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-test")
        monkeypatch.setenv("ESTIMO_MODEL", "custom-model")

        pipeline = create_pipeline()

        assert pipeline._classifier._oracle._model == "custom-model"

    def test_default_model(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-test")
        monkeypatch.delenv("ESTIMO_MODEL", raising=False)
        pipeline = create_pipeline()
        assert pipeline._classifier._oracle._model == DEFAULT_MODEL


class TestOracleTimeout:
    def test_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("ESTIMO_ORACLE_TIMEOUT", raising=False)
        assert oracle_timeout() == DEFAULT_ORACLE_TIMEOUT

    def test_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ESTIMO_ORACLE_TIMEOUT", "90")
        assert oracle_timeout() == 90.0

    def test_invalid_value_ignored(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ESTIMO_ORACLE_TIMEOUT", "soon")
        assert oracle_timeout() == DEFAULT_ORACLE_TIMEOUT
