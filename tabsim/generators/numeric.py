"""
Numeric Variate Generator

Draws quantitative columns from parametric distributions:
- Normal(mean, sd)
- Uniform(min, max)
- Poisson(lambda)

Every parameter may be a scalar or a sequence. Sequences shorter than the
output are recycled position by position.
"""

import numpy as np
from enum import Enum
from typing import Any, Dict, Optional, Sequence, Tuple
from dataclasses import dataclass
import logging

from ..exceptions import InvalidParameter
from ..utils import is_sequence, recycle_array, resolve_generator

logger = logging.getLogger(__name__)

REQUIRED = object()


class DistributionKind(Enum):
    """Supported parametric distributions"""
    NORMAL = "normal"
    UNIFORM = "uniform"
    POISSON = "poisson"

    @classmethod
    def parse(cls, value: Any) -> "DistributionKind":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            available = ", ".join(kind.value for kind in cls)
            raise InvalidParameter(
                f"Unknown distribution: {value!r}. Available: {available}"
            ) from None


# Parameter names and defaults per distribution, in positional order
PARAMETER_SPECS: Dict[DistributionKind, Tuple[Tuple[str, Any], ...]] = {
    DistributionKind.NORMAL: (("mean", 0.0), ("sd", 1.0)),
    DistributionKind.UNIFORM: (("min", 0.0), ("max", 1.0)),
    DistributionKind.POISSON: (("lambda", REQUIRED),),
}

# `lambda` is a Python keyword, so keyword callers pass `lam`
PARAMETER_ALIASES = {"lam": "lambda"}


@dataclass
class DistributionParams:
    """A distribution with its (possibly vector) parameters"""
    distribution: DistributionKind
    params: Dict[str, Any]

    @classmethod
    def build(cls, distribution: Any, **params) -> "DistributionParams":
        """
        Resolve aliases and defaults, rejecting unknown or missing parameters

        Args:
            distribution: Distribution name or DistributionKind
            **params: Parameter values (scalar or sequence)

        Returns:
            DistributionParams with every parameter present
        """
        kind = DistributionKind.parse(distribution)
        spec = PARAMETER_SPECS[kind]
        known = {name for name, _ in spec}

        resolved: Dict[str, Any] = {}
        for key, value in params.items():
            name = PARAMETER_ALIASES.get(key, key)
            if name not in known:
                raise InvalidParameter(
                    f"Unknown parameter '{key}' for {kind.value} distribution; "
                    f"expected {sorted(known)}"
                )
            if name in resolved:
                raise InvalidParameter(f"Parameter '{name}' supplied more than once")
            resolved[name] = value

        for name, default in spec:
            if name not in resolved:
                if default is REQUIRED:
                    raise InvalidParameter(
                        f"Missing required parameter '{name}' for {kind.value} distribution"
                    )
                resolved[name] = default

        return cls(distribution=kind, params=resolved)

    def expand(self, size: int) -> Dict[str, np.ndarray]:
        """Recycle every parameter to ``size`` positions and validate the values"""
        expanded = {}
        for name, value in self.params.items():
            if is_sequence(value) and len(value) == 0:
                raise InvalidParameter(f"Parameter '{name}' is an empty sequence")
            try:
                expanded[name] = recycle_array(value, size)
            except (TypeError, ValueError) as e:
                raise InvalidParameter(f"Parameter '{name}' must be numeric: {e}") from e
            if np.isnan(expanded[name]).any():
                raise InvalidParameter(f"Parameter '{name}' contains NaN")

        self._check_values(expanded)
        return expanded

    def _check_values(self, expanded: Dict[str, np.ndarray]):
        if self.distribution == DistributionKind.NORMAL:
            if (expanded["sd"] < 0).any():
                raise InvalidParameter("Normal sd must be >= 0")
        elif self.distribution == DistributionKind.UNIFORM:
            if (expanded["min"] > expanded["max"]).any():
                raise InvalidParameter("Uniform min must be <= max")
        elif self.distribution == DistributionKind.POISSON:
            if (expanded["lambda"] < 0).any():
                raise InvalidParameter("Poisson lambda must be >= 0")

    def generate(self, size: int, rng: Optional[np.random.Generator] = None) -> np.ndarray:
        """Generate ``size`` independent values, one per recycled parameter position"""
        rng = resolve_generator(rng)
        p = self.expand(size)

        if self.distribution == DistributionKind.NORMAL:
            values = rng.normal(loc=p["mean"], scale=p["sd"], size=size)
        elif self.distribution == DistributionKind.UNIFORM:
            values = rng.uniform(low=p["min"], high=p["max"], size=size)
        elif self.distribution == DistributionKind.POISSON:
            values = rng.poisson(lam=p["lambda"], size=size)
        else:
            raise InvalidParameter(f"Unknown distribution: {self.distribution}")

        return values


class RandomVariateSource:
    """
    Draws variate sequences from a named distribution

    The output length comes either from an integer count (``draw_n``) or from
    the length of a template sequence (``draw_matching``). ``draw`` accepts
    both and dispatches on the type of ``count``.
    """

    def __init__(self, rng: Optional[np.random.Generator] = None):
        """
        Args:
            rng: Generator to draw from (the shared generator when None)
        """
        self.rng = rng

    def draw_n(self, count: int, distribution: Any, **params) -> np.ndarray:
        """
        Draw exactly ``count`` values

        Args:
            count: Number of values
            distribution: 'normal', 'uniform', 'poisson' or a DistributionKind
            **params: mean/sd, min/max or lam (``lambda``), scalar or sequence

        Returns:
            Array of floats (normal, uniform) or non-negative ints (poisson)
        """
        if isinstance(count, bool) or not isinstance(count, (int, np.integer)):
            raise InvalidParameter(f"count must be an integer, got {count!r}")
        if count < 0:
            raise InvalidParameter(f"count must be non-negative, got {count}")

        dist = DistributionParams.build(distribution, **params)
        values = dist.generate(int(count), rng=self.rng)
        logger.debug(f"Drew {count} {dist.distribution.value} variates")
        return values

    def draw_matching(self, count_template: Sequence[Any], distribution: Any, **params) -> np.ndarray:
        """
        Draw one value per element of ``count_template``

        Only the template's length matters; its values are ignored.
        """
        if not is_sequence(count_template):
            raise InvalidParameter("count_template must be a sequence")
        return self.draw_n(len(count_template), distribution, **params)

    def draw(self, count: Any, distribution: Any, **params) -> np.ndarray:
        """
        Draw variates, treating a sequence ``count`` as a length template

        ``draw([2, 10, 10], 'normal', ...)`` returns three values.
        """
        if is_sequence(count):
            return self.draw_matching(count, distribution, **params)
        return self.draw_n(count, distribution, **params)


def draw(count: Any, distribution: Any, rng: Optional[np.random.Generator] = None, **params) -> np.ndarray:
    """Convenience wrapper around RandomVariateSource.draw"""
    return RandomVariateSource(rng).draw(count, distribution, **params)


def rnorm(count: Any, mean: Any = 0.0, sd: Any = 1.0,
          rng: Optional[np.random.Generator] = None) -> np.ndarray:
    """Normal variates"""
    return draw(count, DistributionKind.NORMAL, rng=rng, mean=mean, sd=sd)


def runif(count: Any, min: Any = 0.0, max: Any = 1.0,
          rng: Optional[np.random.Generator] = None) -> np.ndarray:
    """Continuous uniform variates"""
    return draw(count, DistributionKind.UNIFORM, rng=rng, **{"min": min, "max": max})


def rpois(count: Any, lam: Any, rng: Optional[np.random.Generator] = None) -> np.ndarray:
    """Poisson variates"""
    return draw(count, DistributionKind.POISSON, rng=rng, lam=lam)
