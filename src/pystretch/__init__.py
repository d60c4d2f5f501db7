"""pyStretch: affine-invariant ensemble MCMC sampling.

pyStretch implements the Goodman & Weare (2010) stretch-move ensemble sampler.
A population of walkers explores a target distribution known only through an
unnormalised log-density, which makes the sampler insensitive to linear
correlations and scalings of the parameters. The package provides:

- The stretch move and the half-split ensemble sweep
- Serial and thread-parallel execution strategies
- Chain storage with thinning, resume and reset
- Flattened chain export and convergence diagnostics

Examples
--------
Burn-in followed by a thinned production run:

    >>> import numpy as np
    >>> from pystretch import Sampler, SamplerConfig
    >>> def log_prob(x):
    ...     return -((x[0] - 1.0) ** 2)
    >>> sampler = Sampler(SamplerConfig(n_walkers=100, n_dims=1, log_prob_fn=log_prob, seed=0))
    >>> p0 = np.random.default_rng(0).uniform(-5, 5, (100, 1))
    >>> p = sampler.run(p0, 20, persist=False)
    >>> p = sampler.run(p, 100, thin=5)
    >>> sampler.flat_chain().shape
    (1, 2000)
"""

from .samplers import (
    CallbackObserver,
    NullObserver,
    Sampler,
    SamplerConfig,
    run_ensemble_sampler,
)
from .utils.exceptions import EmptyChainError, InputError, PyStretchError

__all__ = [
    "CallbackObserver",
    "EmptyChainError",
    "InputError",
    "NullObserver",
    "PyStretchError",
    "Sampler",
    "SamplerConfig",
    "run_ensemble_sampler",
]
