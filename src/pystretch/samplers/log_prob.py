"""Log-probability evaluation for walker positions."""

from collections.abc import Callable, Iterable, Iterator
from typing import Any

import numpy as np

from ..utils.types import FloatArray, LogDensity, WalkerPositions


class LogProbability:
    """Bind a user log-density to the sampler's fixed extra arguments.

    The wrapped function is called as ``fn(position, *args)``. It must be
    reentrant when used with the parallel strategy; this is not checked.
    """

    def __init__(self, fn: LogDensity, args: tuple[Any, ...] = ()):
        self.fn = fn
        self.args = tuple(args)

    def __repr__(self):
        """String representation of the evaluator."""
        name = getattr(self.fn, "__name__", type(self.fn).__name__)
        return f"LogProbability(fn={name}, n_args={len(self.args)})"

    def __call__(self, position: FloatArray) -> float:
        """Evaluate the log-density at a single walker position.

        The density may return a Python or numpy scalar, or any array holding
        exactly one value.

        Raises
        ------
        ValueError
            If the density returns more than one value.
        """
        return float(np.asarray(self.fn(position, *self.args)).item())

    def evaluate_all(
        self,
        positions: WalkerPositions,
        map_fn: Callable[[Callable, Iterable], Iterator] = map,
    ) -> FloatArray:
        """Evaluate the log-density for every walker independently.

        Parameters
        ----------
        positions : WalkerPositions
            Walker positions with shape (n_walkers, n_dims).
        map_fn : Callable, optional
            A ``map``-compatible callable used to dispatch the evaluations,
            e.g. ``ThreadPoolExecutor.map``. Default is the builtin ``map``.

        Returns
        -------
        FloatArray
            Log-probabilities with shape (n_walkers,).
        """
        return np.fromiter(
            map_fn(self, list(positions)), dtype=float, count=len(positions)
        )
