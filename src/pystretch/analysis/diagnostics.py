"""Convergence and efficiency diagnostics for ensemble chains."""

from dataclasses import dataclass

import numpy as np

from ..samplers.chain import ChainStore
from ..samplers.ensemble import Sampler
from ..utils.autocorr import autocorr_gw2010, autocorr_walker_mean
from ..utils.types import FloatArray, WalkerChain
from .samples import _store

autocorr_estimators = {
    "walker_mean": autocorr_walker_mean,
    "gw2010": autocorr_gw2010,
}


@dataclass
class ChainSummary:
    """Per-dimension moments of a flattened chain."""

    mean: FloatArray
    variance: FloatArray
    n_samples: int
    acceptance_fraction: float


def acceptance_fraction(source: Sampler | ChainStore) -> float:
    """Fraction of stretch moves accepted so far."""
    return _store(source).acceptance_fraction


def integrated_time(
    chain: WalkerChain,
    c: float = 5.0,
    discard: int = 0,
    estimator: str = "walker_mean",
) -> FloatArray:
    """Integrated autocorrelation time of each dimension of a chain.

    Parameters
    ----------
    chain : WalkerChain
        Chain with shape (n_walkers, n_dims, n_saved), as stored by the sampler.
    c : float, optional
        Window size factor for the automatic windowing. Default is 5.0.
    discard : int, optional
        Number of saved steps to drop from the start. Default is 0.
    estimator : str, optional
        ``"walker_mean"`` (default) averages the autocorrelation function over
        walkers; ``"gw2010"`` uses the autocorrelation of the walker mean.

    Returns
    -------
    FloatArray
        Autocorrelation time, in saved steps, for every dimension.

    Raises
    ------
    ValueError
        If the estimator is unknown or no step is left after ``discard``.

    Examples
    --------
    >>> tau = integrated_time(sampler.chain, discard=100)
    >>> thin = int(np.ceil(0.5 * tau.max()))
    """
    if estimator not in autocorr_estimators:
        raise ValueError(
            f"Unknown estimator {estimator!r}. Choose from {list(autocorr_estimators)}."
        )
    chain = np.asarray(chain)[:, :, discard:]
    if chain.shape[2] == 0:
        raise ValueError("The chain holds no saved steps to analyse.")

    func = autocorr_estimators[estimator]
    return np.array([func(chain[:, dim, :], c) for dim in range(chain.shape[1])])


def summarise(source: Sampler | ChainStore) -> ChainSummary:
    """Mean and variance of every dimension of the flattened chain."""
    store = _store(source)
    samples = store.flatten()
    if samples.shape[1] == 0:
        raise ValueError("The chain holds no saved steps to summarise.")
    return ChainSummary(
        mean=samples.mean(axis=1),
        variance=samples.var(axis=1),
        n_samples=samples.shape[1],
        acceptance_fraction=store.acceptance_fraction,
    )
