"""
Domain Services Package

Stateless forecasting stages and the model registry.
"""

from .data_preparer import DataPreparer, PreparedSeries
from .model_registry import ModelRegistry
from .pattern_analyzer import PatternAnalyzer
from .risk_engine import RiskEngine
from .scenario_builder import ScenarioBuilder

__all__ = [
    "DataPreparer",
    "ModelRegistry",
    "PatternAnalyzer",
    "PreparedSeries",
    "RiskEngine",
    "ScenarioBuilder",
]
