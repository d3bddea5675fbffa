"""
Dataset Orchestrator Module

Composes the leaf generators into simulated datasets and batches:
- ColumnSet: ordered, length-checked, read-only table of columns
- DatasetAssembler: evaluates declarative column generators into a ColumnSet
- ReplicationRunner: repeats any zero-argument generation call ``trials`` times
"""

import time
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Tuple, Union

import numpy as np
import pandas as pd

from .exceptions import ColumnLengthMismatch, InvalidParameter, ShapeMismatch
from .generators.categorical import CategoricalPatternBuilder
from .generators.numeric import DistributionParams, RandomVariateSource
from .utils import SeedManager, check_seed, set_seed

logger = logging.getLogger(__name__)

NUMERIC_KINDS = "biuf"


class ColumnSet(Mapping):
    """
    One simulated dataset

    An ordered mapping of column name to a 1-D array. All columns share one
    length; construction fails with ColumnLengthMismatch otherwise. No
    recycling happens here. Column arrays are read-only copies.
    """

    def __init__(self, columns: Union[Mapping, Iterable[Tuple[str, Any]]] = ()):
        pairs = list(columns.items()) if isinstance(columns, Mapping) else list(columns)

        arrays: Dict[str, np.ndarray] = {}
        for name, values in pairs:
            if not isinstance(name, str) or not name:
                raise InvalidParameter(f"Column names must be non-empty strings, got {name!r}")
            if name in arrays:
                raise InvalidParameter(f"Duplicate column name: '{name}'")
            arrays[name] = self._to_array(name, values)

        lengths = {name: len(array) for name, array in arrays.items()}
        if len(set(lengths.values())) > 1:
            raise ColumnLengthMismatch(lengths)

        self._columns = arrays
        self._num_rows = next(iter(lengths.values()), 0)

    @classmethod
    def assemble(
        cls,
        columns: Union[Mapping, Iterable[Tuple[str, Any]]]
    ) -> "ColumnSet":
        """
        Validate and freeze a set of columns

        Args:
            columns: Mapping or ordered (name, values) pairs

        Returns:
            ColumnSet preserving the insertion order of ``columns``
        """
        return cls(columns)

    @staticmethod
    def _to_array(name: str, values: Any) -> np.ndarray:
        if isinstance(values, (str, bytes)) or np.ndim(values) == 0:
            raise InvalidParameter(f"Column '{name}' must be a sequence, got {type(values).__name__}")

        array = np.array(values)
        if array.dtype.kind not in NUMERIC_KINDS:
            # keep labels as the original Python objects
            array = np.empty(len(values), dtype=object)
            array[:] = list(values)
        if array.ndim != 1:
            raise InvalidParameter(f"Column '{name}' must be one-dimensional, got shape {array.shape}")

        array.flags.writeable = False
        return array

    @property
    def columns(self) -> List[str]:
        """Column names in insertion order"""
        return list(self._columns.keys())

    @property
    def num_rows(self) -> int:
        return self._num_rows

    @property
    def shape(self) -> Tuple[int, int]:
        return (self._num_rows, len(self._columns))

    def __getitem__(self, name: str) -> np.ndarray:
        return self._columns[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._columns)

    def __len__(self) -> int:
        return len(self._columns)

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, ColumnSet):
            return NotImplemented
        return self.columns == other.columns and all(
            np.array_equal(self[name], other[name]) for name in self.columns
        )

    __hash__ = None

    def __repr__(self) -> str:
        return f"ColumnSet(columns={self.columns}, num_rows={self._num_rows})"

    def to_frame(self) -> pd.DataFrame:
        """Copy into a pandas DataFrame for downstream consumers"""
        return pd.DataFrame({name: np.array(values) for name, values in self._columns.items()})

    def to_dict(self) -> Dict[str, List[Any]]:
        return {name: values.tolist() for name, values in self._columns.items()}


Dataset = ColumnSet


@dataclass
class ColumnSpec:
    """A column name paired with the zero-argument call that produces it"""
    name: str
    generator: Callable[[], Any]


LABEL_OPTIONS = ("each", "times", "length_out")


def column_generator(
    entry: Dict[str, Any],
    rng: Optional[np.random.Generator] = None
) -> ColumnSpec:
    """
    Build a ColumnSpec from a declarative column entry

    Args:
        entry: ``{'name', 'distribution', 'count', <params>}`` or
            ``{'name', 'labels', 'each'?, 'times'?, 'length_out'?}``
        rng: Generator for distribution columns (shared generator when None)

    Returns:
        ColumnSpec whose generator performs the draw or build
    """
    options = dict(entry)
    name = options.pop("name", None)
    if not name:
        raise InvalidParameter(f"Column entry is missing a name: {entry}")

    has_distribution = "distribution" in options
    has_labels = "labels" in options
    if has_distribution == has_labels:
        raise InvalidParameter(
            f"Column '{name}' must define exactly one of 'distribution' or 'labels'"
        )

    if has_distribution:
        distribution = options.pop("distribution")
        if "count" not in options:
            raise InvalidParameter(f"Column '{name}' is missing 'count'")
        count = options.pop("count")
        # fail on bad parameter names now rather than on first draw
        DistributionParams.build(distribution, **options)
        source = RandomVariateSource(rng)
        return ColumnSpec(name, lambda: source.draw(count, distribution, **options))

    labels = options.pop("labels")
    unknown = sorted(set(options) - set(LABEL_OPTIONS))
    if unknown:
        raise InvalidParameter(f"Column '{name}' has unknown label options: {unknown}")
    builder = CategoricalPatternBuilder()
    return ColumnSpec(name, lambda: builder.build(labels, **options))


class DatasetAssembler:
    """
    Builds one simulated dataset from an ordered list of column generators

    Generators run left to right. Lengths are not reconciled: the caller picks
    count/each/times/length_out so that every column has the same length.
    An assembler is itself a zero-argument callable, so it can be handed
    directly to ReplicationRunner.
    """

    def __init__(self, columns: Iterable[Union[ColumnSpec, Tuple[str, Callable[[], Any]]]]):
        self.columns: List[ColumnSpec] = [
            column if isinstance(column, ColumnSpec) else ColumnSpec(*column)
            for column in columns
        ]

    @classmethod
    def from_config(
        cls,
        columns: List[Dict[str, Any]],
        rng: Optional[np.random.Generator] = None
    ) -> "DatasetAssembler":
        """Create an assembler from declarative column entries"""
        return cls([column_generator(entry, rng) for entry in columns])

    def assemble(self) -> ColumnSet:
        """
        Evaluate every generator once and assemble the results

        Returns:
            ColumnSet with one column per spec, in spec order
        """
        produced = []
        for spec in self.columns:
            values = spec.generator()
            logger.debug(f"Generated column '{spec.name}'")
            produced.append((spec.name, values))

        dataset = ColumnSet.assemble(produced)
        logger.debug(f"Assembled dataset: {dataset.num_rows} rows x {len(dataset)} columns")
        return dataset

    def __call__(self) -> ColumnSet:
        return self.assemble()


class CollectMode(Enum):
    """How ReplicationRunner collects trial outputs"""
    STACK = "stack"
    LIST = "list"

    @classmethod
    def parse(cls, value: Any) -> "CollectMode":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise InvalidParameter(
                f"collect_mode must be one of {[mode.value for mode in cls]}, got {value!r}"
            ) from None


def _check_trials(trials: Any) -> int:
    if isinstance(trials, bool) or not isinstance(trials, (int, np.integer)) or trials <= 0:
        raise InvalidParameter(f"trials must be a positive integer, got {trials!r}")
    return int(trials)


class ReplicationRunner:
    """
    Repeats a generation call a fixed number of times

    Trials run strictly in order on the calling thread, so a batch is
    reproducible from its initial seed. A runner built with ``rng`` reseeds
    that generator; the generation call must draw from the same generator
    (e.g. ``DatasetAssembler.from_config(columns, rng=runner.rng)``).
    Without one, the shared generator is reseeded.
    """

    def __init__(self, rng: Optional[np.random.Generator] = None):
        self.rng = rng
        self._seed_manager = SeedManager(generator=rng) if rng is not None else None

    def run(
        self,
        trials: int,
        generator_expr: Callable[[], Any],
        collect_mode: Union[CollectMode, str] = CollectMode.LIST,
        seed: Optional[int] = None
    ) -> Union[np.ndarray, Tuple[Any, ...]]:
        """
        Run ``generator_expr`` ``trials`` times

        Args:
            trials: Number of repetitions
            generator_expr: Zero-argument callable producing one trial result
            collect_mode: STACK for one array with trials along axis 0,
                LIST for a tuple of trial results
            seed: If given, reset the runner's generator (or the shared one)
                before the first trial

        Returns:
            Read-only array of shape ``(trials, *trial_shape)`` or a tuple
        """
        trials = _check_trials(trials)
        mode = CollectMode.parse(collect_mode)
        if not callable(generator_expr):
            raise InvalidParameter("generator_expr must be a zero-argument callable")

        if seed is not None:
            if self._seed_manager is None:
                set_seed(seed)
            else:
                self._seed_manager.set_seed(check_seed(seed))

        start_time = time.time()
        results = []
        for trial in range(trials):
            results.append(generator_expr())
            logger.debug(f"Completed trial {trial + 1}/{trials}")

        batch = self._stack(results) if mode == CollectMode.STACK else tuple(results)

        logger.info(
            f"Replicated {trials} trials ({mode.value}) in {time.time() - start_time:.3f}s"
        )
        return batch

    @staticmethod
    def _stack(results: List[Any]) -> np.ndarray:
        arrays = []
        for trial, result in enumerate(results):
            array = np.asarray(result)
            if array.dtype.kind not in NUMERIC_KINDS:
                raise ShapeMismatch(
                    f"Trial {trial} returned non-numeric output ({type(result).__name__}); "
                    f"use LIST mode for heterogeneous results"
                )
            arrays.append(array)

        shapes = [array.shape for array in arrays]
        if len(set(shapes)) > 1:
            raise ShapeMismatch(f"Trial outputs differ in shape: {shapes}", shapes)

        stacked = np.stack(arrays, axis=0)
        stacked.flags.writeable = False
        return stacked


def replicate_loop(trials: int, generator_expr: Callable[[], Any]) -> List[Any]:
    """
    Explicit sequential loop equivalent to LIST mode

    Produces the same results as ``ReplicationRunner().run(trials, expr, 'list')``
    given the same starting seed.
    """
    trials = _check_trials(trials)
    results = []
    for _ in range(trials):
        results.append(generator_expr())
    return results


def replicate(
    trials: int,
    generator_expr: Callable[[], Any],
    simplify: bool = True,
    seed: Optional[int] = None,
    rng: Optional[np.random.Generator] = None
) -> Union[np.ndarray, Tuple[Any, ...]]:
    """Run ``generator_expr`` repeatedly, stacking results when ``simplify``"""
    mode = CollectMode.STACK if simplify else CollectMode.LIST
    return ReplicationRunner(rng).run(trials, generator_expr, mode, seed=seed)
