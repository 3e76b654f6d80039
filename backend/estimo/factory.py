"""Factory functions for creating pre-configured EstimationPipeline instances."""

from __future__ import annotations

from typing import TYPE_CHECKING

from estimo.data.repository import RateRepository
from estimo.services.decomposition import CostDecompositionPostProcessor
from estimo.services.extraction import ExtractionCoordinator
from estimo.services.measurements import RawMeasurementExtractor
from estimo.services.pipeline import EstimationPipeline
from estimo.services.pricing import CostApplicationEngine
from estimo.services.quick_estimator import QuickEstimator
from estimo.services.sheet_classifier import SheetClassifier
from estimo.services.takeoff import QuantityTakeoffEngine
from estimo.services.validation import ValidationEngine

if TYPE_CHECKING:
    from estimo.services.oracle import DocumentOracle


def create_default_pipeline(
    oracle: DocumentOracle,
    repository: RateRepository | None = None,
) -> EstimationPipeline:
    """Create an EstimationPipeline wired up with the built-in reference data.

    Every pass shares one :class:`RateRepository`, so pricing, validation
    and the fallback all agree on rates, location factors and benchmarks.

    Args:
        oracle: The document oracle used by passes 1 and 2 and the fallback.
        repository: Reference-data lookups. Defaults to the built-in tables.

    Returns:
        An EstimationPipeline ready to run.

    Example::

        from estimo import DocumentOracle, ProjectInfo, create_default_pipeline

        pipeline = create_default_pipeline(DocumentOracle(api_key="..."))
        result = await pipeline.run(ProjectInfo(location="Pune, India"), files)
    """
    repository = repository or RateRepository()
    validator = ValidationEngine(repository)
    return EstimationPipeline(
        classifier=SheetClassifier(oracle),
        coordinator=ExtractionCoordinator(oracle),
        takeoff=QuantityTakeoffEngine(repository),
        pricing=CostApplicationEngine(repository),
        validator=validator,
        post_processor=CostDecompositionPostProcessor(),
        fallback_estimator=QuickEstimator(oracle, validator, repository),
        measurement_extractor=RawMeasurementExtractor(),
    )
