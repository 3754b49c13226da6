from __future__ import annotations

"""
Maximum-likelihood logistic regression fitted by iteratively reweighted
least squares, with standard errors from the observed information.
"""

import numpy as np

from .errors import ConvergenceFailure


def sigmoid(z: np.ndarray) -> np.ndarray:
    z = np.clip(z, -500, 500)
    return 1.0 / (1.0 + np.exp(-z))


def independent_columns(X: np.ndarray) -> np.ndarray:
    """
    Boolean mask of columns kept after dropping linear dependencies.

    Columns are scanned left to right; a column that does not raise the rank
    is aliased, e.g. the indicator of a level with no rows.
    """
    keep: list[int] = []
    for j in range(X.shape[1]):
        trial = X[:, keep + [j]]
        if np.linalg.matrix_rank(trial) == len(keep) + 1:
            keep.append(j)
    mask = np.zeros(X.shape[1], dtype=bool)
    mask[keep] = True
    return mask


class LogisticRegressionIRLS:
    """
    Unpenalised logistic regression (Newton-Raphson / IRLS).

    An intercept column is prepended internally. Aliased columns get a NaN
    coefficient and are left out of the parameter count.
    """

    def __init__(self, max_iter: int = 25, tol: float = 1e-8, label: str = "logistic"):
        self.max_iter = max_iter
        self.tol = tol
        self.label = label
        self.weights_: np.ndarray | None = None
        self.bse_: np.ndarray | None = None
        self.aliased_: np.ndarray | None = None
        self.n_iter_: int = 0
        self.loglik_: float = float("nan")

    @staticmethod
    def _add_bias(X: np.ndarray) -> np.ndarray:
        return np.hstack([np.ones((X.shape[0], 1)), X])

    @staticmethod
    def _loglik(y: np.ndarray, eta: np.ndarray) -> float:
        return float(np.sum(y * eta - np.logaddexp(0.0, eta)))

    def fit(self, X, y):
        """Fit by IRLS; raises ConvergenceFailure when the deviance does not settle."""
        X_arr = np.asarray(X, dtype=float)
        if X_arr.ndim == 1:
            X_arr = X_arr.reshape(-1, 1)
        y_arr = np.asarray(y, dtype=float)
        n_obs = len(y_arr)
        if n_obs == 0:
            raise ConvergenceFailure(self.label, 0, "no rows to fit")

        X_bias = self._add_bias(X_arr)
        keep = independent_columns(X_bias)
        X_fit = X_bias[:, keep]

        mu = (y_arr + 0.5) / 2.0
        eta = np.log(mu / (1.0 - mu))
        dev_old = -2.0 * self._loglik(y_arr, eta)
        beta = np.zeros(X_fit.shape[1])
        converged = False

        for step in range(1, self.max_iter + 1):
            w = np.maximum(mu * (1.0 - mu), 1e-12)
            z = eta + (y_arr - mu) / w
            sw = np.sqrt(w)
            beta, *_ = np.linalg.lstsq(X_fit * sw[:, None], z * sw, rcond=None)
            eta = X_fit @ beta
            mu = sigmoid(eta)
            dev = -2.0 * self._loglik(y_arr, eta)
            self.n_iter_ = step
            if not np.isfinite(dev) or not np.all(np.isfinite(beta)):
                raise ConvergenceFailure(self.label, n_obs, "non-finite deviance")
            if abs(dev - dev_old) / (abs(dev) + 0.1) < self.tol:
                converged = True
                break
            dev_old = dev

        if not converged:
            raise ConvergenceFailure(
                self.label, n_obs, f"no convergence after {self.max_iter} iterations"
            )

        w = mu * (1.0 - mu)
        info = X_fit.T @ (X_fit * w[:, None])
        try:
            cov = np.linalg.inv(info)
        except np.linalg.LinAlgError as exc:
            raise ConvergenceFailure(self.label, n_obs, "singular information matrix") from exc

        weights = np.full(X_bias.shape[1], np.nan)
        bse = np.full(X_bias.shape[1], np.nan)
        weights[keep] = beta
        bse[keep] = np.sqrt(np.clip(np.diag(cov), 0.0, None))

        self.weights_ = weights
        self.bse_ = bse
        self.aliased_ = ~keep
        self.loglik_ = self._loglik(y_arr, eta)
        self.intercept_ = float(weights[0])
        self.coef_ = weights[1:]
        self.n_obs_ = n_obs
        return self

    @property
    def n_params_(self) -> int:
        if self.aliased_ is None:
            raise RuntimeError("Model is not fitted.")
        return int((~self.aliased_).sum())

    def decision_function(self, X) -> np.ndarray:
        if self.weights_ is None:
            raise RuntimeError("Model is not fitted.")
        X_arr = np.asarray(X, dtype=float)
        if X_arr.ndim == 1:
            X_arr = X_arr.reshape(-1, 1)
        return self._add_bias(X_arr) @ np.nan_to_num(self.weights_, nan=0.0)

    def predict_proba(self, X) -> np.ndarray:
        """Return P(y=1) for each row in X."""
        return sigmoid(self.decision_function(X))
