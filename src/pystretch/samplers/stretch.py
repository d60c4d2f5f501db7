"""Goodman & Weare stretch move.

References
----------
Goodman, J. & Weare, J. (2010). Ensemble samplers with affine invariance.
Communications in Applied Mathematics and Computational Science, 5(1), 65-80.
"""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass

import numpy as np

from ..utils.types import FloatArray

logger = logging.getLogger(__name__)


@dataclass
class StretchProposal:
    """Outcome of a single stretch move for one walker.

    ``position`` and ``log_prob`` hold the walker's next state, i.e. the
    proposal if it was accepted and the current state otherwise.
    """

    accepted: bool
    position: FloatArray
    log_prob: float


def draw_z(a: float, u: float | FloatArray) -> float | FloatArray:
    """Map a uniform draw u in [0, 1) to a stretch factor z.

    This is the inverse CDF of g(z) proportional to 1/sqrt(z) on [1/a, a].
    """
    return ((a - 1.0) * u + 1.0) ** 2 / a


def sample_z(a: float, rng: np.random.Generator, size=None) -> float | FloatArray:
    """Draw stretch factors from g(z) with scale parameter a."""
    return draw_z(a, rng.random(size))


def stretch_log_ratio(
    z: float, n_dims: int, new_log_prob: float, old_log_prob: float
) -> float:
    """Log acceptance ratio of a stretch move, including the z^(d-1) Jacobian."""
    return (n_dims - 1) * np.log(z) + new_log_prob - old_log_prob


def stretch_move(
    x_active: FloatArray,
    x_passive: FloatArray,
    log_prob_active: float,
    log_prob: Callable[[FloatArray], float],
    z: float,
    u: float,
) -> StretchProposal:
    """Propose and accept/reject a stretch move for one walker.

    Parameters
    ----------
    x_active : FloatArray
        Current position of the walker being moved, shape (n_dims,).
    x_passive : FloatArray
        Position of the complementary walker the move stretches about.
    log_prob_active : float
        Cached log-probability at ``x_active``.
    log_prob : Callable
        Log-probability evaluator for a single position.
    z : float
        Stretch factor drawn from :func:`sample_z`.
    u : float
        Uniform draw in (0, 1] for the Metropolis test.

    Returns
    -------
    StretchProposal
        The walker's next state and whether the proposal was accepted.

    Notes
    -----
    A non-finite ratio is not intercepted. A NaN ratio compares false and
    the move is rejected.
    """
    proposal = x_passive + z * (x_active - x_passive)
    new_log_prob = log_prob(proposal)
    log_ratio = stretch_log_ratio(z, x_active.size, new_log_prob, log_prob_active)

    accept = bool(np.log(u) <= log_ratio)

    logger.debug(
        "%s stretch move: z=%.4f, log_ratio=%.4f",
        "Accepting" if accept else "Rejecting",
        z,
        log_ratio,
    )

    if accept:
        return StretchProposal(True, proposal, new_log_prob)
    return StretchProposal(False, x_active, log_prob_active)


def propose_for_walker(
    rng: np.random.Generator,
    a: float,
    x_active: FloatArray,
    passive: FloatArray,
    log_prob_active: float,
    log_prob: Callable[[FloatArray], float],
) -> StretchProposal:
    """Draw the random inputs of a stretch move and perform it.

    The passive walker index, the stretch factor and the acceptance uniform
    are drawn in that order, so a seeded generator gives a reproducible move.

    Parameters
    ----------
    passive : FloatArray
        Positions of the passive half of the ensemble, shape (n_passive, n_dims).
    """
    choice = rng.integers(len(passive))
    z = sample_z(a, rng)
    u = 1.0 - rng.random()
    return stretch_move(x_active, passive[choice], log_prob_active, log_prob, z, u)


def moves_for_walkers(
    rng: np.random.Generator,
    a: float,
    walkers: Sequence[int],
    positions: FloatArray,
    log_probs: FloatArray,
    passive: FloatArray,
    log_prob: Callable[[FloatArray], float],
) -> list[StretchProposal]:
    """Stretch move every walker in ``walkers`` against a frozen passive set."""
    return [
        propose_for_walker(
            rng, a, positions[walker], passive, log_probs[walker], log_prob
        )
        for walker in walkers
    ]
