"""Enums for the Estimo domain models."""

from enum import StrEnum


class SheetType(StrEnum):
    """Normalized drawing-sheet classification."""

    STRUCTURAL = "structural"
    FOUNDATION = "foundation"
    SCHEDULE = "schedule"
    ELEVATION = "elevation"
    MEP = "mep"
    SITE = "site"
    GENERAL = "general"


class RateSource(StrEnum):
    """Provenance of a line item's unit rate."""

    DB = "DB"
    EST = "EST"
    DB_FIX = "DB_FIX"


class Severity(StrEnum):
    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"


class IssueCategory(StrEnum):
    """Which validation check raised an issue."""

    ARITHMETIC = "arithmetic"
    QUANTITY = "quantity"
    UNIT_RATE = "unit_rate"
    BENCHMARK = "benchmark"
    COMPLETENESS = "completeness"
    CONSISTENCY = "consistency"
    MEASUREMENT = "measurement"
    ENGINE = "engine"


class ConfidenceLevel(StrEnum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"
    VERY_LOW = "Very Low"


class BenchmarkStatus(StrEnum):
    BELOW = "below"
    WITHIN = "within"
    ABOVE = "above"


class UnitSystem(StrEnum):
    """Measurement system used for bill-of-quantities units."""

    IMPERIAL = "imperial"
    METRIC = "metric"


class PipelineState(StrEnum):
    """States of the estimation pipeline state machine."""

    PASS1 = "pass1"
    PASS2 = "pass2"
    PASS3 = "pass3"
    PASS4 = "pass4"
    PASS5 = "pass5"
    COMPLETED = "completed"
    FAILED = "failed"
    FALLBACK_COMPLETED = "fallback_completed"


class PassStatus(StrEnum):
    """Status values reported to the progress callback."""

    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"
    FALLBACK_COMPLETED = "fallback_completed"
