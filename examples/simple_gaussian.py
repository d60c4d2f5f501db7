"""Sample the one-dimensional distribution N(1, 1/2) with 100 walkers.

The log-density only needs to be known up to a constant. A 20-step burn-in is
run without saving, then a 100-step production run saves every 5th step,
giving 20 x 100 = 2000 samples. The whole exercise is repeated with a slow
density on a thread pool.
"""

import time

import numpy as np

from pystretch import Sampler, SamplerConfig
from pystretch.analysis import save_chain, summarise


def log_probability(x):
    return -((x[0] - 1.0) ** 2)


def log_probability_slow(x):
    rng = np.random.default_rng()
    _ = rng.standard_normal(100_000) ** 2
    return -((x[0] - 1.0) ** 2)


def main():
    n_walkers = 100

    sampler = Sampler(SamplerConfig(n_walkers, 1, log_probability, seed=0))
    p0 = sampler.rng.random((n_walkers, 1)) * 10 - 5

    p = sampler.run(p0, 20, thin=1, persist=False, parallel=False)
    start = time.perf_counter()
    sampler.run(p, 100, thin=5, persist=True, parallel=False, progress=True)
    print(f"Serial run took {time.perf_counter() - start:.2f} s")
    print(summarise(sampler))
    save_chain(sampler, "chain")

    sampler = Sampler(SamplerConfig(n_walkers, 1, log_probability_slow, n_workers=4, seed=0))
    p0 = sampler.rng.random((n_walkers, 1)) * 10 - 5

    p = sampler.run(p0, 20, thin=1, persist=False, parallel=True)
    start = time.perf_counter()
    sampler.run(p, 100, thin=5, persist=True, parallel=True, progress=True)
    print(f"Parallel run took {time.perf_counter() - start:.2f} s")
    print(summarise(sampler))
    save_chain(sampler, "chain_parallel")


if __name__ == "__main__":
    main()
