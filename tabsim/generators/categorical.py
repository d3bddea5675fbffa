"""
Categorical Pattern Generator Module

Builds categorical columns from a base label set by deterministic repetition:
- each: every label repeated contiguously
- times: whole sequence repeated, or per-label counts for unbalanced groups
- length_out: pattern cycled or truncated to an exact length

Precedence: when both ``times`` and ``length_out`` are given, ``length_out``
wins and ``times`` is ignored. This is kept for compatibility with the usual
rep() semantics and is logged as a warning.
"""

import numpy as np
from typing import Any, List, Optional, Sequence, Union
import logging

from ..exceptions import InvalidParameter
from ..utils import is_sequence, recycle

logger = logging.getLogger(__name__)


def _positive_int(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
        raise InvalidParameter(f"{name} must be a positive integer, got {value!r}")
    if value <= 0:
        raise InvalidParameter(f"{name} must be positive, got {value}")
    return int(value)


class CategoricalPatternBuilder:
    """
    Generates category label sequences from repetition policies

    Modes, by which options are supplied:
    - none: labels unchanged
    - each: ``[a, b], each=2 -> a a b b``
    - times (scalar): ``[a, b], times=2 -> a b a b``
    - times (vector): ``[a, b], times=[1, 3] -> a b b b``
    - length_out: ``[a, b], length_out=3 -> a b a``
    - each + times (scalar): each-expansion repeated ``times`` times
    - each + length_out: each-expansion cycled to ``length_out``
    - times + length_out: ``times`` ignored
    """

    def build(
        self,
        base_labels: Sequence[Any],
        each: Optional[int] = None,
        times: Optional[Union[int, Sequence[int]]] = None,
        length_out: Optional[int] = None
    ) -> List[Any]:
        """
        Build a label sequence

        Args:
            base_labels: Non-empty ordered label set
            each: Contiguous repeats per label
            times: Whole-sequence repeats, or one count per label
            length_out: Exact output length (takes priority over times)

        Returns:
            List of labels, every element drawn from ``base_labels``
        """
        if not is_sequence(base_labels):
            raise InvalidParameter("base_labels must be a sequence of labels")
        labels = list(base_labels)
        if not labels:
            raise InvalidParameter("base_labels must not be empty")

        if each is not None:
            each = _positive_int("each", each)
        if length_out is not None:
            length_out = _positive_int("length_out", length_out)
        if times is not None and is_sequence(times) and len(times) == 1:
            # a one-element vector behaves like a scalar
            times = list(times)[0]
        if times is not None and not is_sequence(times):
            times = _positive_int("times", times)

        expanded = self._expand_each(labels, each) if each is not None else labels

        if length_out is not None:
            if times is not None:
                logger.warning(
                    f"Both times and length_out supplied; length_out={length_out} "
                    f"takes priority and times is ignored"
                )
            result = list(recycle(expanded, length_out))
        elif times is not None:
            if is_sequence(times):
                if each is not None:
                    raise InvalidParameter("Vector times cannot be combined with each")
                result = self._expand_counts(labels, times)
            else:
                result = expanded * times
        else:
            result = list(expanded)

        logger.debug(
            f"Built {len(result)} labels from {len(labels)} base labels "
            f"(each={each}, times={times}, length_out={length_out})"
        )
        return result

    @staticmethod
    def _expand_each(labels: List[Any], each: int) -> List[Any]:
        return [label for label in labels for _ in range(each)]

    @staticmethod
    def _expand_counts(labels: List[Any], times: Sequence[int]) -> List[Any]:
        counts = list(times)
        if len(counts) != len(labels):
            raise InvalidParameter(
                f"Vector times has length {len(counts)} but there are {len(labels)} base labels"
            )
        result = []
        for label, count in zip(labels, counts):
            result.extend([label] * _positive_int("times element", count))
        return result


def rep(
    base_labels: Sequence[Any],
    each: Optional[int] = None,
    times: Optional[Union[int, Sequence[int]]] = None,
    length_out: Optional[int] = None
) -> List[Any]:
    """Convenience wrapper around CategoricalPatternBuilder.build"""
    return CategoricalPatternBuilder().build(base_labels, each=each, times=times, length_out=length_out)
