"""
Utility Functions Module

Provides essential utilities:
- Parameter recycling to a target length
- Seed and random generator management for reproducibility
- Logging configuration
"""

import sys
import logging
import itertools
from pathlib import Path
from typing import Any, Iterator, Optional, Sequence, Union
from logging.handlers import RotatingFileHandler

import numpy as np

from .exceptions import InvalidParameter

logger = logging.getLogger(__name__)


def is_sequence(value: Any) -> bool:
    """Return True for list-like values (strings and scalars are not sequences)"""
    if isinstance(value, (str, bytes)):
        return False
    if isinstance(value, np.ndarray):
        return value.ndim > 0
    return isinstance(value, Sequence) or (hasattr(value, "__array__") and np.ndim(value) > 0)


def recycle(values: Any, length: int) -> Iterator[Any]:
    """
    Cycle a short sequence element-wise until ``length`` items are produced

    A scalar is treated as a one-element sequence. Lengths that do not evenly
    divide ``length`` wrap around position by position.

    Args:
        values: Scalar or sequence to recycle
        length: Number of items to yield

    Returns:
        Iterator over exactly ``length`` items
    """
    if length < 0:
        raise InvalidParameter(f"Recycling length must be non-negative, got {length}")

    items = list(values) if is_sequence(values) else [values]
    if not items:
        if length == 0:
            return iter(())
        raise InvalidParameter("Cannot recycle an empty sequence")

    return itertools.islice(itertools.cycle(items), length)


def recycle_array(values: Any, length: int, dtype: Optional[type] = float) -> np.ndarray:
    """Recycle ``values`` to ``length`` and return the result as an array"""
    return np.fromiter(recycle(values, length), dtype=dtype, count=length)


class SeedManager:
    """
    Manages the random generator used for reproducibility

    Holds one ``numpy.random.Generator``. Components accept an explicit
    generator; when none is given they fall back to the shared manager below.
    Reseeding resets the generator in place, so every component holding a
    reference to it sees the new state.
    """

    def __init__(
        self,
        seed: Optional[int] = None,
        generator: Optional[np.random.Generator] = None
    ):
        """
        Initialize seed manager

        Args:
            seed: Random seed (None seeds from OS entropy)
            generator: Existing generator to manage instead of a new one
        """
        self.seed = seed
        self._original_seed = seed
        if generator is None:
            self.generator = np.random.default_rng(seed)
        else:
            self.generator = generator
            if seed is not None:
                reseed(generator, seed)

    def set_seed(self, seed: Optional[int] = None):
        """
        Reset the generator state

        Args:
            seed: Random seed (uses stored seed if None)
        """
        if seed is None:
            seed = self.seed
        else:
            self.seed = seed

        reseed(self.generator, seed)

        if seed is not None:
            logger.info(f"Random seed set to: {seed}")
        else:
            logger.info("No seed set - using random initialization")

    def get_seed(self) -> Optional[int]:
        """Get current seed"""
        return self.seed

    def reset_seed(self):
        """Reset to original seed"""
        self.set_seed(self._original_seed)


def check_seed(value: Any) -> int:
    """Return ``value`` as an int, rejecting bools and non-integers"""
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
        raise InvalidParameter(f"Seed must be an integer, got {value!r}")
    return int(value)


def reseed(rng: np.random.Generator, seed: Optional[int]):
    """
    Reset ``rng`` in place to the state a fresh generator seeded with ``seed`` has

    The bit generator type is kept, so ``reseed(rng, s)`` followed by draws
    matches ``np.random.default_rng(s)`` for the default PCG64 generator.
    """
    rng.bit_generator.state = type(rng.bit_generator)(seed).state


_shared_manager = SeedManager()


def set_seed(value: int):
    """
    Reset the shared generator state

    Call immediately before any sequence of draws meant to be reproducible.

    Args:
        value: Integer seed
    """
    _shared_manager.set_seed(check_seed(value))


def get_generator() -> np.random.Generator:
    """Return the shared generator used when no explicit one is supplied"""
    return _shared_manager.generator


def resolve_generator(rng: Optional[np.random.Generator] = None) -> np.random.Generator:
    """Return ``rng`` if given, otherwise the shared generator"""
    return rng if rng is not None else get_generator()


class LoggerConfig:
    """
    Logging configuration manager

    Sets up consistent logging across the application
    """

    @staticmethod
    def setup_logger(
        name: str = "tabsim",
        level: int = logging.INFO,
        log_file: Optional[Union[str, Path]] = None,
        log_to_console: bool = True,
        log_format: Optional[str] = None
    ) -> logging.Logger:
        """
        Setup and configure logger

        Args:
            name: Logger name
            level: Logging level
            log_file: Optional file path for file logging
            log_to_console: Whether to log to console
            log_format: Custom log format

        Returns:
            Configured logger
        """
        configured = logging.getLogger(name)
        configured.setLevel(level)

        configured.handlers.clear()

        if log_format is None:
            log_format = (
                '%(asctime)s - %(name)s - %(levelname)s - '
                '%(filename)s:%(lineno)d - %(message)s'
            )

        formatter = logging.Formatter(log_format)

        if log_to_console:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setLevel(level)
            console_handler.setFormatter(formatter)
            configured.addHandler(console_handler)

        if log_file:
            log_file = Path(log_file)
            log_file.parent.mkdir(parents=True, exist_ok=True)

            file_handler = RotatingFileHandler(
                log_file,
                maxBytes=10 * 1024 * 1024,  # 10 MB
                backupCount=5
            )
            file_handler.setLevel(level)
            file_handler.setFormatter(formatter)
            configured.addHandler(file_handler)

        return configured


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[str] = None
) -> logging.Logger:
    """
    Quick logging setup

    Args:
        level: Logging level
        log_file: Optional log file path
    """
    return LoggerConfig.setup_logger(level=level, log_file=log_file)
