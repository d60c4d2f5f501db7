"""Ensemble sweeps: advance every walker once using the half-split scheme.

The ensemble is split into two contiguous halves. A sweep first moves the
first half using the second as the passive set, then moves the second half
using the (updated) first half. The two sub-steps are strictly sequential;
only the walkers inside one sub-step are independent of each other.
"""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from functools import partial
from typing import Any

import numpy as np

from ..utils.types import FloatArray, WalkerPositions
from .stretch import StretchProposal, moves_for_walkers, propose_for_walker

logger = logging.getLogger(__name__)


@dataclass
class SweepResult:
    """Proposal and acceptance counts of one sweep."""

    n_proposed: int = 0
    n_accepted: int = 0


def split_halves(n_walkers: int) -> tuple[range, range]:
    """Split walker indices into the contiguous halves [0, k/2) and [k/2, k)."""
    half = n_walkers // 2
    return range(0, half), range(half, n_walkers)


def _sub_steps(n_walkers: int) -> tuple[tuple[range, range], tuple[range, range]]:
    """(active, passive) pairs in the order they must run."""
    first, second = split_halves(n_walkers)
    return (first, second), (second, first)


def _apply_proposals(
    positions: WalkerPositions,
    log_probs: FloatArray,
    walkers: Sequence[int],
    proposals: Sequence[StretchProposal],
    result: SweepResult,
) -> None:
    for walker, proposal in zip(walkers, proposals):
        if proposal.accepted:
            positions[walker] = proposal.position
            log_probs[walker] = proposal.log_prob
            result.n_accepted += 1
        result.n_proposed += 1


def sweep_serial(
    positions: WalkerPositions,
    log_probs: FloatArray,
    log_prob: Callable[[FloatArray], float],
    a: float,
    rng: np.random.Generator,
    notify: Callable[[int], Any] | None = None,
) -> SweepResult:
    """Advance the ensemble by one sweep on the calling thread.

    ``positions`` and ``log_probs`` are updated in place. Random numbers are
    drawn from ``rng`` in walker order, so a seeded generator reproduces the
    sweep exactly.

    Parameters
    ----------
    positions : WalkerPositions
        Current walker positions, shape (n_walkers, n_dims).
    log_probs : FloatArray
        Cached log-probabilities, shape (n_walkers,).
    log_prob : Callable
        Log-probability evaluator for a single position.
    a : float
        Stretch scale parameter.
    rng : np.random.Generator
        Random source.
    notify : Callable[[int], Any], optional
        Called with 1 after every walker move.

    Returns
    -------
    SweepResult
        Number of proposals made (always n_walkers) and accepted.
    """
    result = SweepResult()
    for active, passive in _sub_steps(len(positions)):
        frozen = positions[passive.start : passive.stop]
        for walker in active:
            proposal = propose_for_walker(
                rng, a, positions[walker], frozen, log_probs[walker], log_prob
            )
            _apply_proposals(positions, log_probs, [walker], [proposal], result)
            if notify is not None:
                notify(1)
    return result


def sweep_parallel(
    positions: WalkerPositions,
    log_probs: FloatArray,
    log_prob: Callable[[FloatArray], float],
    a: float,
    rng: np.random.Generator,
    pool: Any,
    n_chunks: int,
    notify: Callable[[int], Any] | None = None,
) -> SweepResult:
    """Advance the ensemble by one sweep, moving each half across a worker pool.

    Within a sub-step the active walkers are split into at most ``n_chunks``
    contiguous chunks. Each chunk is one pool task with its own random
    sub-stream spawned from ``rng``, so results are reproducible for a fixed
    seed and chunk count. Tasks only read the shared arrays; the accepted
    moves are written back on the calling thread once every task of the
    sub-step has finished.

    Parameters
    ----------
    pool : Any
        Object with a ``map()`` method compatible with the builtin ``map``,
        e.g. ``concurrent.futures.ThreadPoolExecutor``. Workers must share
        memory with the caller.
    n_chunks : int
        Number of tasks per sub-step, normally the number of workers.

    See :func:`sweep_serial` for the remaining parameters.

    Raises
    ------
    Exception
        The first exception raised by a task, typically from the user
        log-density. The sweep is abandoned without applying any move of
        the failing sub-step.
    """
    result = SweepResult()
    for active, passive in _sub_steps(len(positions)):
        frozen = positions[passive.start : passive.stop]
        chunks = [
            chunk
            for chunk in np.array_split(np.arange(active.start, active.stop), n_chunks)
            if chunk.size
        ]
        jobs = list(zip(rng.spawn(len(chunks)), chunks))
        logger.debug(
            "Dispatching walkers %d-%d in %d chunks",
            active.start,
            active.stop - 1,
            len(jobs),
        )
        task = partial(
            _move_chunk,
            a=a,
            positions=positions,
            log_probs=log_probs,
            passive=frozen,
            log_prob=log_prob,
        )

        completed = []
        for walkers, proposals in pool.map(task, jobs):
            completed.append((walkers, proposals))
            if notify is not None:
                notify(len(proposals))

        # every task of this sub-step has returned
        for walkers, proposals in completed:
            _apply_proposals(positions, log_probs, walkers, proposals, result)
    return result


def _move_chunk(
    job: tuple[np.random.Generator, FloatArray],
    a: float,
    positions: WalkerPositions,
    log_probs: FloatArray,
    passive: WalkerPositions,
    log_prob: Callable[[FloatArray], float],
) -> tuple[FloatArray, list[StretchProposal]]:
    stream, walkers = job
    proposals = moves_for_walkers(
        stream, a, walkers, positions, log_probs, passive, log_prob
    )
    return walkers, proposals
