"""Reference data layer for the Estimo estimation pipeline."""

from estimo.data.benchmarks import BenchmarkRange
from estimo.data.locations import LocationFactor
from estimo.data.rates import RATE_DATA_VERSION, RateRecord
from estimo.data.repository import RateRepository
