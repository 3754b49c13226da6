"""
Exception taxonomy for the regression pipeline.
"""

from __future__ import annotations


class FriskModelError(Exception):
    """Base class for every pipeline error."""


class DataIncompatible(FriskModelError, ValueError):
    """Schema, category-set or configuration violation."""


class ConvergenceFailure(FriskModelError, RuntimeError):
    """Maximum-likelihood fit did not converge."""

    def __init__(self, spec_name: str, n_obs: int, reason: str = "did not converge"):
        self.spec_name = spec_name
        self.n_obs = n_obs
        self.reason = reason
        super().__init__(f"{spec_name}: {reason} (rows={n_obs})")


class MissingInput(FriskModelError, FileNotFoundError):
    """Required dataset file is absent."""
