"""Affine-invariant ensemble sampler driven by the stretch move."""

import logging
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from functools import partial
from multiprocessing import cpu_count
from typing import Any

import numpy as np
from tqdm import tqdm

from ..utils.exceptions import InputError
from ..utils.types import (
    FlatChain,
    FloatArray,
    LogDensity,
    StepObserver,
    WalkerChain,
    WalkerLogPosterior,
    WalkerPositions,
)
from .chain import ChainStore
from .log_prob import LogProbability
from .sweep import SweepResult, sweep_parallel, sweep_serial

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


class NullObserver:
    """Observer that ignores every recorded step."""

    def __repr__(self):
        """String representation of the null observer."""
        return "NullObserver()"

    def on_step_recorded(
        self, sampler: "Sampler", step: int, save_index: int, walker: int
    ) -> None:
        """Do nothing."""


class CallbackObserver:
    """Adapt a plain ``callback(sampler, step, save_index, walker)`` function."""

    def __init__(self, callback: Callable[["Sampler", int, int, int], Any]):
        self.callback = callback

    def __repr__(self):
        """String representation of the callback observer."""
        return f"CallbackObserver({self.callback!r})"

    def on_step_recorded(
        self, sampler: "Sampler", step: int, save_index: int, walker: int
    ) -> None:
        """Forward the notification to the wrapped function."""
        self.callback(sampler, step, save_index, walker)


def _is_int(value: Any) -> bool:
    return isinstance(value, (int, np.integer)) and not isinstance(value, bool)


def _check_positive_int(value: Any, name: str) -> None:
    if not _is_int(value) or value <= 0:
        raise InputError(f"{name} must be a positive integer, got {value!r}.")


@dataclass(frozen=True)
class SamplerConfig:
    """Configuration of an ensemble sampler, validated once at construction.

    Parameters
    ----------
    n_walkers : int
        Number of walkers. Must be even and at least ``2 * n_dims``.
    n_dims : int
        Dimension of the sampled parameter space.
    log_prob_fn : LogDensity
        Unnormalised log-density, called as ``log_prob_fn(x, *args)``. Must be
        reentrant if the parallel strategy is used.
    a : float, optional
        Stretch scale parameter, must be greater than 1. Default is 2.0.
    args : tuple, optional
        Fixed extra arguments forwarded to ``log_prob_fn``. Default is ().
    observer : StepObserver or callable, optional
        Notified once per walker for every recorded step. A plain function is
        wrapped in :class:`CallbackObserver`. Default is a no-op.
    n_workers : int, optional
        Size of the thread pool used by the parallel strategy. A value
        greater than 1 makes the parallel strategy the default. Default is 1.
    seed : int or None, optional
        Seed of the sampler's random generator. Default is None.

    Raises
    ------
    InputError
        If any option is invalid.
    """

    n_walkers: int
    n_dims: int
    log_prob_fn: LogDensity
    a: float = 2.0
    args: tuple = ()
    observer: StepObserver = field(default_factory=NullObserver)
    n_workers: int = 1
    seed: int | None = None

    def __post_init__(self):
        """Validate the configuration."""
        _check_positive_int(self.n_walkers, "n_walkers")
        _check_positive_int(self.n_dims, "n_dims")
        if self.n_walkers % 2 != 0:
            raise InputError(
                f"n_walkers must be even for the half-split stretch move, got {self.n_walkers}."
            )
        if self.n_walkers < 2 * self.n_dims:
            raise InputError(
                f"n_walkers ({self.n_walkers}) must be at least twice n_dims ({self.n_dims})."
            )
        if not self.a > 1.0:
            raise InputError(f"Scale parameter a must be greater than 1, got {self.a}.")
        if not callable(self.log_prob_fn):
            raise InputError("log_prob_fn must be callable.")
        _check_positive_int(self.n_workers, "n_workers")

        # frozen dataclass, so normalise fields through object.__setattr__
        object.__setattr__(self, "args", tuple(self.args))
        if not hasattr(self.observer, "on_step_recorded"):
            if not callable(self.observer):
                raise InputError(
                    "observer must implement on_step_recorded() or be callable."
                )
            object.__setattr__(self, "observer", CallbackObserver(self.observer))


class Sampler:
    """Affine-invariant ensemble MCMC sampler (Goodman & Weare stretch move).

    The sampler owns its configuration, a random generator and a
    :class:`ChainStore` holding the saved chain, the log-posterior and the
    proposal counters.

    Parameters
    ----------
    config : SamplerConfig
        Validated sampler configuration.
    rng : np.random.Generator, optional
        Random generator to use instead of ``default_rng(config.seed)``.

    Examples
    --------
    >>> config = SamplerConfig(100, 1, lambda x: -((x[0] - 1.0) ** 2), seed=0)
    >>> sampler = Sampler(config)
    >>> p = sampler.run(p0, 20, persist=False)  # burn-in
    >>> p = sampler.run(p, 100, thin=5)
    >>> sampler.flat_chain().shape
    (1, 2000)
    """

    def __init__(self, config: SamplerConfig, rng: np.random.Generator | None = None):
        self.config = config
        self.rng = np.random.default_rng(config.seed) if rng is None else rng
        self.log_prob = LogProbability(config.log_prob_fn, config.args)
        self.store = ChainStore(config.n_walkers, config.n_dims)

    def __repr__(self):
        """String representation of the sampler."""
        return (
            f"Sampler(n_walkers={self.n_walkers}, n_dims={self.n_dims}, "
            f"a={self.a}, n_saved={self.store.n_saved})"
        )

    @property
    def n_walkers(self) -> int:
        """Number of walkers."""
        return self.config.n_walkers

    @property
    def n_dims(self) -> int:
        """Dimension of the parameter space."""
        return self.config.n_dims

    @property
    def a(self) -> float:
        """Stretch scale parameter."""
        return self.config.a

    @property
    def args(self) -> tuple:
        """Extra arguments forwarded to the log-density."""
        return self.config.args

    @property
    def observer(self) -> StepObserver:
        """Observer notified of recorded steps."""
        return self.config.observer

    @property
    def chain(self) -> WalkerChain:
        """Saved chain, shape (n_walkers, n_dims, n_saved)."""
        return self.store.chain

    @property
    def log_posterior(self) -> WalkerLogPosterior:
        """Saved log-posterior, shape (n_walkers, n_saved)."""
        return self.store.log_posterior

    @property
    def iterations(self) -> int:
        """Total number of proposals made."""
        return self.store.iterations

    @property
    def accepted(self) -> int:
        """Total number of accepted proposals."""
        return self.store.accepted

    @property
    def acceptance_fraction(self) -> float:
        """Fraction of accepted proposals."""
        return self.store.acceptance_fraction

    def run(
        self,
        initial_positions: WalkerPositions,
        n_steps: int,
        thin: int = 1,
        persist: bool = True,
        parallel: bool | None = None,
        progress: bool = False,
        pool: Any | None = None,
        notify: Callable[[int], Any] | None = None,
    ) -> WalkerPositions:
        """Advance the ensemble by ``n_steps`` sweeps.

        Parameters
        ----------
        initial_positions : WalkerPositions
            Starting positions with shape (n_walkers, n_dims).
        n_steps : int
            Number of sweeps to perform.
        thin : int, optional
            Save every ``thin``-th sweep. ``n_steps // thin`` steps are saved;
            the remaining sweeps still run. Default is 1.
        persist : bool, optional
            Whether to append the saved steps to the chain. Default is True.
        parallel : bool or None, optional
            Force the parallel (True) or serial (False) strategy. By default
            the parallel strategy is used when ``config.n_workers > 1`` or a
            ``pool`` is given.
        progress : bool, optional
            Whether to display a progress bar. Default is False.
        pool : Any | None, optional
            User-provided pool for the parallel strategy. It must implement a
            map() method compatible with the builtin map() and share memory
            with the caller (e.g. ``ThreadPoolExecutor``). Default is None.
        notify : Callable[[int], Any], optional
            Called with the number of walker moves completed, alongside the
            progress bar. Default is None.

        Returns
        -------
        WalkerPositions
            Final walker positions, suitable as the starting point of a
            subsequent run.

        Raises
        ------
        InputError
            If ``initial_positions`` has the wrong shape or ``n_steps``/``thin``
            are not positive integers.

        Notes
        -----
        If the run fails part way, only the columns saved before the failure
        are kept in the chain.
        """
        if parallel is None:
            parallel = pool is not None or self.config.n_workers > 1

        if parallel:
            return self.sample_parallel(
                initial_positions, n_steps, thin, persist, progress, pool, notify
            )
        return self.sample_serial(
            initial_positions, n_steps, thin, persist, progress, notify
        )

    def resume(
        self,
        n_steps: int,
        thin: int = 1,
        persist: bool = True,
        parallel: bool | None = None,
        progress: bool = False,
        pool: Any | None = None,
        notify: Callable[[int], Any] | None = None,
    ) -> WalkerPositions:
        """Continue sampling from the last saved step of the chain.

        See :meth:`run` for the parameters.

        Raises
        ------
        EmptyChainError
            If the chain has no saved step to resume from.
        """
        return self.run(
            self.store.last_positions(),
            n_steps,
            thin,
            persist,
            parallel,
            progress,
            pool,
            notify,
        )

    def sample_serial(
        self,
        initial_positions: WalkerPositions,
        n_steps: int,
        thin: int = 1,
        persist: bool = True,
        progress: bool = False,
        notify: Callable[[int], Any] | None = None,
    ) -> WalkerPositions:
        """Run ``n_steps`` sweeps on the calling thread.

        With a fixed seed the resulting chain is bit-reproducible.
        """
        positions = self._check_run_inputs(initial_positions, n_steps, thin)
        logger.info(
            "Starting serial sampling: %d walkers, %d dims, %d steps, thin=%d",
            self.n_walkers,
            self.n_dims,
            n_steps,
            thin,
        )

        log_probs = self.log_prob.evaluate_all(positions)
        sweep = partial(sweep_serial, log_prob=self.log_prob, a=self.a, rng=self.rng)
        return self._run_sweeps(
            sweep, positions, log_probs, n_steps, thin, persist, progress, notify
        )

    def sample_parallel(
        self,
        initial_positions: WalkerPositions,
        n_steps: int,
        thin: int = 1,
        persist: bool = True,
        progress: bool = False,
        pool: Any | None = None,
        notify: Callable[[int], Any] | None = None,
    ) -> WalkerPositions:
        """Run ``n_steps`` sweeps, moving each half of the ensemble across a thread pool.

        Sub-steps and sweeps remain strictly sequential; only the walkers of
        one sub-step are moved concurrently. If no ``pool`` is given, a
        ``ThreadPoolExecutor`` with ``config.n_workers`` threads (all cores
        if ``n_workers`` is 1) is created and shut down after the run.
        """
        positions = self._check_run_inputs(initial_positions, n_steps, thin)

        n_workers = self.config.n_workers
        if n_workers == 1:
            n_workers = getattr(pool, "_max_workers", None) or cpu_count()

        created_pool = None
        if pool is None:
            created_pool = ThreadPoolExecutor(max_workers=n_workers)
            pool = created_pool

        logger.info(
            "Starting parallel sampling on %d workers: %d walkers, %d dims, %d steps, thin=%d",
            n_workers,
            self.n_walkers,
            self.n_dims,
            n_steps,
            thin,
        )

        try:
            log_probs = self.log_prob.evaluate_all(positions, map_fn=pool.map)
            sweep = partial(
                sweep_parallel,
                log_prob=self.log_prob,
                a=self.a,
                rng=self.rng,
                pool=pool,
                n_chunks=n_workers,
            )
            return self._run_sweeps(
                sweep, positions, log_probs, n_steps, thin, persist, progress, notify
            )
        finally:
            # Clean up internally created pool
            if created_pool is not None:
                created_pool.shutdown(wait=True)

    def reset(self) -> "Sampler":
        """Discard the chain, log-posterior and counters, keeping the configuration."""
        self.store.reset()
        return self

    def flat_chain(self) -> FlatChain:
        """Chain flattened to (n_dims, n_walkers * n_saved) in step-major order."""
        return self.store.flatten()

    def flat_log_posterior(self) -> FloatArray:
        """Log-posterior flattened in step-major order."""
        return self.store.flatten_log_posterior()

    def _check_run_inputs(
        self, initial_positions: WalkerPositions, n_steps: int, thin: int
    ) -> WalkerPositions:
        """Validate run arguments and return a private copy of the positions."""
        _check_positive_int(n_steps, "n_steps")
        _check_positive_int(thin, "thin")
        positions = np.array(initial_positions, dtype=float)
        if positions.shape != (self.n_walkers, self.n_dims):
            raise InputError(
                f"Initial positions must have shape ({self.n_walkers}, {self.n_dims}), "
                f"got {positions.shape}."
            )
        return positions

    def _run_sweeps(
        self,
        sweep: Callable[..., SweepResult],
        positions: WalkerPositions,
        log_probs: FloatArray,
        n_steps: int,
        thin: int,
        persist: bool,
        progress: bool,
        notify: Callable[[int], Any] | None,
    ) -> WalkerPositions:
        offset = self.store.grow(n_steps // thin) if persist else self.store.n_saved
        n_written = offset

        with tqdm(total=self.n_walkers * n_steps, disable=not progress) as bar:

            def on_moves(n: int) -> None:
                bar.update(n)
                if notify is not None:
                    notify(n)

            try:
                for step in range(1, n_steps + 1):
                    result = sweep(positions, log_probs, notify=on_moves)
                    self.store.count(result.n_proposed, result.n_accepted)

                    if persist and step % thin == 0:
                        save_index = offset + step // thin - 1
                        self.store.record_step(save_index, positions, log_probs)
                        n_written = save_index + 1
                        for walker in range(self.n_walkers):
                            self.observer.on_step_recorded(
                                self, step, save_index, walker
                            )
            except BaseException:
                # keep only the columns that were actually written
                if persist:
                    self.store.truncate(n_written)
                raise

        logger.info(
            "Finished %d steps, acceptance fraction %.3f",
            n_steps,
            self.acceptance_fraction,
        )
        return positions


def run_ensemble_sampler(
    n_walkers: int,
    n_dims: int,
    log_prob_fn: LogDensity,
    initial_positions: WalkerPositions,
    n_steps: int,
    thin: int = 1,
    a: float = 2.0,
    args: tuple = (),
    seed: int | None = 61254557,
    parallel: bool = False,
    n_workers: int = 1,
    progress: bool = False,
    pool: Any | None = None,
) -> Sampler:
    """Create an ensemble sampler, run it once and return it.

    Parameters
    ----------
    n_walkers : int
        Number of walkers; even and at least ``2 * n_dims``.
    n_dims : int
        Dimension of the parameter space.
    log_prob_fn : LogDensity
        Unnormalised log-density, called as ``log_prob_fn(x, *args)``.
    initial_positions : WalkerPositions
        Starting positions with shape (n_walkers, n_dims).
    n_steps : int
        Number of sweeps.
    thin : int, optional
        Thinning factor. Default is 1.
    a : float, optional
        Stretch scale parameter. Default is 2.0.
    args : tuple, optional
        Extra arguments for ``log_prob_fn``. Default is ().
    seed : int, optional
        Random number seed for reproducible results. Default is 61254557.
    parallel : bool, optional
        Whether to move walkers on a thread pool. Default is False.
    n_workers : int, optional
        Number of threads if parallel=True; 1 means all cores. Default is 1.
    progress : bool, optional
        Whether to display a progress bar. Default is False.
    pool : Any | None, optional
        User-provided pool with a map() method; implies parallel. Default is None.

    Returns
    -------
    Sampler
        The sampler after the run, holding the chain and counters.

    Examples
    --------
    >>> sampler = run_ensemble_sampler(
    ...     n_walkers=32,
    ...     n_dims=3,
    ...     log_prob_fn=my_log_prob,
    ...     initial_positions=np.random.randn(32, 3),
    ...     n_steps=1000,
    ...     thin=10,
    ... )
    >>> samples = sampler.flat_chain()
    """
    config = SamplerConfig(
        n_walkers=n_walkers,
        n_dims=n_dims,
        log_prob_fn=log_prob_fn,
        a=a,
        args=args,
        n_workers=n_workers,
        seed=seed,
    )
    sampler = Sampler(config)
    sampler.run(
        initial_positions,
        n_steps,
        thin=thin,
        parallel=parallel or pool is not None,
        progress=progress,
        pool=pool,
    )
    return sampler
