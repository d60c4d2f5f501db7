"""Analysis tools for ensemble sampler output.

This module provides utilities for post-processing the sampler's chains:

- Step-major flattening of the chain and log-posterior
- Saving and loading flattened chains as ``.npy`` files
- Acceptance fraction, autocorrelation time and moment summaries
"""

from .diagnostics import ChainSummary, acceptance_fraction, integrated_time, summarise
from .samples import flat_chain, flat_log_posterior, load_chain, save_chain

__all__ = [
    "ChainSummary",
    "acceptance_fraction",
    "flat_chain",
    "flat_log_posterior",
    "integrated_time",
    "load_chain",
    "save_chain",
    "summarise",
]
