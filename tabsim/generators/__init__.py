"""
Data Generators Module

Provides the leaf generators for simulated datasets:
- Numeric: variates from Normal, Uniform and Poisson distributions
- Categorical: label sequences from deterministic repetition patterns
"""

from .numeric import (
    DistributionKind,
    DistributionParams,
    RandomVariateSource,
    draw,
    rnorm,
    runif,
    rpois,
)
from .categorical import CategoricalPatternBuilder, rep

__all__ = [
    # Numeric generators
    "DistributionKind",
    "DistributionParams",
    "RandomVariateSource",
    "draw",
    "rnorm",
    "runif",
    "rpois",

    # Categorical generators
    "CategoricalPatternBuilder",
    "rep",
]
