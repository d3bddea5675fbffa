"""Project-specific exceptions."""

from typing import Dict, List, Optional


class TabsimError(Exception):
    """Base exception for the project."""


class InvalidParameter(TabsimError, ValueError):
    """Raised when distribution or pattern arguments are invalid."""


class ColumnLengthMismatch(TabsimError, ValueError):
    """Raised when dataset columns do not share a common length."""

    def __init__(self, lengths: Dict[str, int]):
        self.lengths = dict(lengths)
        detail = ", ".join(f"'{name}'={length}" for name, length in self.lengths.items())
        super().__init__(f"Columns must all have the same length, got: {detail}")


class ShapeMismatch(TabsimError, ValueError):
    """Raised when stacked replication trials are not homogeneous."""

    def __init__(self, message: str, shapes: Optional[List[tuple]] = None):
        self.shapes = list(shapes or [])
        super().__init__(message)
