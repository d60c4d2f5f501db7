"""Sampling machinery for pyStretch.

This module provides the affine-invariant ensemble sampler and its parts:

- Stretch move: the Goodman & Weare proposal and acceptance rule
- Sweeps: the half-split ensemble update, serial or on a thread pool
- Chain store: saved walker history and proposal counters
- Sampler: configuration, run/resume driver and observers
"""

from .chain import ChainStore
from .ensemble import (
    CallbackObserver,
    NullObserver,
    Sampler,
    SamplerConfig,
    run_ensemble_sampler,
)
from .log_prob import LogProbability
from .stretch import StretchProposal, draw_z, sample_z, stretch_move
from .sweep import SweepResult, split_halves, sweep_parallel, sweep_serial

__all__ = [
    "CallbackObserver",
    "ChainStore",
    "LogProbability",
    "NullObserver",
    "Sampler",
    "SamplerConfig",
    "StretchProposal",
    "SweepResult",
    "draw_z",
    "run_ensemble_sampler",
    "sample_z",
    "split_halves",
    "stretch_move",
    "sweep_parallel",
    "sweep_serial",
]
