"""Access to flattened samples and their on-disk ``.npy`` form.

The flattened chain is ordered step-major: all walkers of the first saved
step, then all walkers of the second, and so on. ``save_chain`` writes it to
``<basename>_chain.npy`` with shape (n_dims, n_walkers * n_saved) and the
matching log-posterior to ``<basename>_lnprob.npy``.
"""

from os import PathLike
from pathlib import Path

import numpy as np

from ..samplers.chain import ChainStore
from ..samplers.ensemble import Sampler
from ..utils.types import FlatChain, FloatArray

CHAIN_SUFFIX = "_chain.npy"
LNPROB_SUFFIX = "_lnprob.npy"


def _store(source: Sampler | ChainStore) -> ChainStore:
    if isinstance(source, Sampler):
        return source.store
    if isinstance(source, ChainStore):
        return source
    raise TypeError(f"Expected a Sampler or ChainStore, got {type(source).__name__}.")


def flat_chain(source: Sampler | ChainStore) -> FlatChain:
    """Flattened chain of a sampler or chain store."""
    return _store(source).flatten()


def flat_log_posterior(source: Sampler | ChainStore) -> FloatArray:
    """Flattened log-posterior of a sampler or chain store."""
    return _store(source).flatten_log_posterior()


def chain_paths(basename: str | PathLike) -> tuple[Path, Path]:
    """Paths of the chain and log-posterior files for ``basename``."""
    basename = str(basename)
    return Path(basename + CHAIN_SUFFIX), Path(basename + LNPROB_SUFFIX)


def save_chain(
    source: Sampler | ChainStore, basename: str | PathLike
) -> tuple[Path, Path]:
    """Save the flattened chain and log-posterior as two ``.npy`` files.

    Parameters
    ----------
    source : Sampler or ChainStore
        Where the chain is taken from.
    basename : str or PathLike
        Path prefix; ``_chain.npy`` and ``_lnprob.npy`` are appended.

    Returns
    -------
    tuple of Path
        The chain and log-posterior file paths.

    Examples
    --------
    >>> save_chain(sampler, "run1")
    (PosixPath('run1_chain.npy'), PosixPath('run1_lnprob.npy'))
    """
    store = _store(source)
    chain_path, lnprob_path = chain_paths(basename)
    np.save(chain_path, store.flatten())
    np.save(lnprob_path, store.flatten_log_posterior())
    return chain_path, lnprob_path


def load_chain(basename: str | PathLike) -> tuple[FlatChain, FloatArray]:
    """Load a flattened chain and log-posterior written by :func:`save_chain`."""
    chain_path, lnprob_path = chain_paths(basename)
    return np.load(chain_path), np.load(lnprob_path)
