"""
Numerical gradient strategies.

HMC only needs ``gradient(f, x)``; any object with that method (for
example an autodiff wrapper) can replace the finite-difference versions.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable

import numpy as np


class GradientStrategy(ABC):
    """Computes the gradient of a scalar function at a point."""

    @abstractmethod
    def gradient(self, f: Callable[[np.ndarray], float], x) -> np.ndarray:
        """
        Args:
            f: Scalar function of a 1-D array
            x: Evaluation point

        Returns:
            Gradient vector, same shape as x (may contain non-finite values
            where f is non-finite)
        """
        pass


@dataclass
class CentralDifference(GradientStrategy):
    """
    Central differences, 2 evaluations of f per coordinate.

    The step for coordinate i is ``step * max(1, |x_i|)``.
    """

    step: float = 1e-5

    def __post_init__(self):
        if not self.step > 0:
            raise ValueError(f"step must be positive, got {self.step}")

    def gradient(self, f, x) -> np.ndarray:
        x = np.asarray(x, dtype=float)
        grad = np.empty_like(x)
        for i in range(x.size):
            h = self.step * max(1.0, abs(x[i]))
            x_plus = x.copy()
            x_minus = x.copy()
            x_plus[i] += h
            x_minus[i] -= h
            with np.errstate(invalid="ignore"):
                grad[i] = (f(x_plus) - f(x_minus)) / (2 * h)
        return grad


@dataclass
class ForwardDifference(GradientStrategy):
    """One-sided differences: f(x) once plus one evaluation per coordinate."""

    step: float = 1e-6

    def __post_init__(self):
        if not self.step > 0:
            raise ValueError(f"step must be positive, got {self.step}")

    def gradient(self, f, x) -> np.ndarray:
        x = np.asarray(x, dtype=float)
        f0 = f(x)
        grad = np.empty_like(x)
        for i in range(x.size):
            h = self.step * max(1.0, abs(x[i]))
            x_step = x.copy()
            x_step[i] += h
            with np.errstate(invalid="ignore"):
                grad[i] = (f(x_step) - f0) / h
        return grad
