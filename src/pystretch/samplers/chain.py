"""Chain storage for the ensemble sampler."""

from dataclasses import dataclass, field

import numpy as np

from ..utils.exceptions import EmptyChainError
from ..utils.types import (
    FlatChain,
    FloatArray,
    WalkerChain,
    WalkerLogPosterior,
    WalkerPositions,
)


@dataclass(eq=False)
class ChainStore:
    """Saved walker history and move counters of an ensemble sampler.

    The chain is indexed (walker, dimension, saved step) and the
    log-posterior (walker, saved step). Both only ever grow along the step
    axis, by whole thinned steps, and always share the same number of saved
    steps.
    """

    n_walkers: int
    n_dims: int
    chain: WalkerChain = field(init=False)
    log_posterior: WalkerLogPosterior = field(init=False)
    iterations: int = field(default=0, init=False)
    accepted: int = field(default=0, init=False)

    def __post_init__(self):
        """Start with an empty history."""
        self.reset()

    def __repr__(self):
        """String representation of the chain store."""
        return (
            f"ChainStore(n_walkers={self.n_walkers}, n_dims={self.n_dims}, "
            f"n_saved={self.n_saved}, iterations={self.iterations}, "
            f"accepted={self.accepted})"
        )

    @property
    def n_saved(self) -> int:
        """Number of saved steps."""
        return self.chain.shape[2]

    @property
    def acceptance_fraction(self) -> float:
        """Fraction of proposals accepted so far, 0.0 before any proposal."""
        if self.iterations == 0:
            return 0.0
        return self.accepted / self.iterations

    def reset(self) -> None:
        """Discard the saved history and zero the counters."""
        self.chain = np.zeros((self.n_walkers, self.n_dims, 0))
        self.log_posterior = np.zeros((self.n_walkers, 0))
        self.iterations = 0
        self.accepted = 0

    def grow(self, extra_steps: int) -> int:
        """Append ``extra_steps`` zeroed columns to the chain and log-posterior.

        Returns
        -------
        int
            Index of the first new column.
        """
        offset = self.n_saved
        if extra_steps > 0:
            self.chain = np.concatenate(
                [self.chain, np.zeros((self.n_walkers, self.n_dims, extra_steps))],
                axis=2,
            )
            self.log_posterior = np.concatenate(
                [self.log_posterior, np.zeros((self.n_walkers, extra_steps))],
                axis=1,
            )
        return offset

    def truncate(self, n_saved: int) -> None:
        """Drop every saved column from index ``n_saved`` onwards."""
        self.chain = self.chain[:, :, :n_saved].copy()
        self.log_posterior = self.log_posterior[:, :n_saved].copy()

    def record(
        self, walker: int, index: int, position: FloatArray, log_prob: float
    ) -> None:
        """Write one walker's position and log-probability into column ``index``."""
        self.chain[walker, :, index] = position
        self.log_posterior[walker, index] = log_prob

    def record_step(
        self, index: int, positions: WalkerPositions, log_probs: FloatArray
    ) -> None:
        """Write every walker's state into column ``index``."""
        self.chain[:, :, index] = positions
        self.log_posterior[:, index] = log_probs

    def count(self, n_proposed: int, n_accepted: int) -> None:
        """Advance the proposal and acceptance counters."""
        self.iterations += n_proposed
        self.accepted += n_accepted

    def last_positions(self) -> WalkerPositions:
        """Walker positions of the last saved step.

        Raises
        ------
        EmptyChainError
            If no step has been saved yet.
        """
        if self.n_saved == 0:
            raise EmptyChainError()
        return self.chain[:, :, -1].copy()

    def flatten(self) -> FlatChain:
        """Concatenate all walkers' samples into a (n_dims, n_walkers * n_saved) array.

        The samples are ordered step-major: every walker of the first saved
        step, then every walker of the second, and so on.
        """
        return self.chain.transpose(1, 2, 0).reshape(self.n_dims, -1)

    def flatten_log_posterior(self) -> FloatArray:
        """Flattened log-posterior in the same step-major order as :meth:`flatten`."""
        return self.log_posterior.T.reshape(-1)
