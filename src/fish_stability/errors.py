"""Exception and warning types shared across the package.

``SurveyError`` subclasses describe problems with the input tables and are
meant to stop a run. ``DecompositionError`` is raised by a variability
decomposition on a degenerate matrix and is caught per window by
:mod:`fish_stability.analysis.partition`.
"""

from __future__ import annotations


class SurveyError(Exception):
    """Base class for survey input problems."""


class SchemaError(SurveyError, KeyError):
    """A required column or expected category is absent from the input."""

    def __str__(self) -> str:
        # KeyError repr-quotes its message; keep it readable
        return str(self.args[0]) if self.args else ""


class InvalidValueError(SurveyError, ValueError):
    """Invalid values survived filtering."""

    def __init__(self, message: str, count: int) -> None:
        super().__init__(message)
        self.count = count


class DecompositionError(ValueError):
    """A community matrix cannot be decomposed (too few years, species, or variance)."""


class DecompositionWarning(UserWarning):
    """Non-fatal condition met while decomposing a community matrix."""
