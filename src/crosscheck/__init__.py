"""
crosscheck - Dual-path experiments.

Run a trusted code path and its candidate replacements side by side,
return the trusted result, and publish how the candidates compared.
"""

from crosscheck.config import ExperimentSettings, load_settings
from crosscheck.engine import run_experiment
from crosscheck.errors import (
    BehaviorNotFoundError,
    BehaviorTimeoutError,
    MismatchError,
    Operation,
    OperationError,
)
from crosscheck.experiment import Experiment
from crosscheck.observation import Observation
from crosscheck.report import LoggingPublisher, render_result, summarize
from crosscheck.result import Result

__version__ = "0.1.0"
__all__ = [
    "BehaviorNotFoundError",
    "BehaviorTimeoutError",
    "Experiment",
    "ExperimentSettings",
    "LoggingPublisher",
    "MismatchError",
    "Observation",
    "Operation",
    "OperationError",
    "Result",
    "__version__",
    "load_settings",
    "render_result",
    "run_experiment",
    "summarize",
]
