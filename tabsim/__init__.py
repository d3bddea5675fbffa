"""
Tabular Simulation Package

Generates structured synthetic datasets: quantitative columns drawn from
parametric distributions, categorical columns from repetition patterns, and
reproducible batches of independent simulated datasets.
"""

__version__ = "1.0.0"

from .config import Config, ConfigLoader, ConfigValidator, get_default_config
from .exceptions import ColumnLengthMismatch, InvalidParameter, ShapeMismatch, TabsimError
from .generators import CategoricalPatternBuilder, DistributionKind, RandomVariateSource, draw, rep
from .orchestrator import (
    CollectMode,
    ColumnSet,
    ColumnSpec,
    Dataset,
    DatasetAssembler,
    ReplicationRunner,
    replicate,
    replicate_loop,
)
from .utils import get_generator, set_seed

__all__ = [
    "Config",
    "ConfigLoader",
    "ConfigValidator",
    "get_default_config",
    "TabsimError",
    "InvalidParameter",
    "ColumnLengthMismatch",
    "ShapeMismatch",
    "RandomVariateSource",
    "DistributionKind",
    "CategoricalPatternBuilder",
    "draw",
    "rep",
    "ColumnSet",
    "ColumnSpec",
    "Dataset",
    "DatasetAssembler",
    "CollectMode",
    "ReplicationRunner",
    "replicate",
    "replicate_loop",
    "set_seed",
    "get_generator",
]
