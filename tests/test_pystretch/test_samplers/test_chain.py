"""Tests for the chain store."""

import numpy as np
import pytest

from pystretch.samplers.chain import ChainStore
from pystretch.utils.exceptions import EmptyChainError


@pytest.fixture
def store() -> ChainStore:
    """Fixture with two saved steps for four walkers in three dimensions."""
    store = ChainStore(n_walkers=4, n_dims=3)
    store.grow(2)
    for index in range(2):
        positions = np.arange(12, dtype=float).reshape(4, 3) + 100 * index
        store.record_step(index, positions, np.arange(4, dtype=float) + 10 * index)
    return store


def test_default_initialization() -> None:
    """Test that a new store is empty."""
    store = ChainStore(n_walkers=6, n_dims=2)

    assert store.chain.shape == (6, 2, 0)
    assert store.log_posterior.shape == (6, 0)
    assert store.n_saved == 0
    assert store.iterations == 0
    assert store.accepted == 0
    assert store.acceptance_fraction == 0.0


def test_grow_appends_zero_columns(store: ChainStore) -> None:
    """Test that growing keeps history and appends zeroed columns."""
    offset = store.grow(3)

    assert offset == 2
    assert store.chain.shape == (4, 3, 5)
    assert store.log_posterior.shape == (4, 5)
    assert np.all(store.chain[:, :, 2:] == 0.0)
    assert np.all(store.log_posterior[:, 2:] == 0.0)
    assert store.chain[1, 2, 1] == 105.0


def test_truncate_drops_unwritten_columns(store: ChainStore) -> None:
    """Test that truncating after a grow restores the written history."""
    store.grow(3)

    store.truncate(2)

    assert store.chain.shape == (4, 3, 2)
    assert store.log_posterior.shape == (4, 2)
    assert store.chain[1, 2, 1] == 105.0
    assert np.array_equal(store.last_positions(), store.chain[:, :, 1])


def test_grow_zero_steps(store: ChainStore) -> None:
    """Test that growing by zero leaves the arrays alone."""
    assert store.grow(0) == 2
    assert store.n_saved == 2


def test_record_single_walker() -> None:
    """Test that record writes one walker into one column."""
    store = ChainStore(n_walkers=2, n_dims=2)
    store.grow(1)
    store.record(1, 0, np.array([3.0, 4.0]), -1.5)

    assert np.array_equal(store.chain[1, :, 0], [3.0, 4.0])
    assert store.log_posterior[1, 0] == -1.5
    assert np.array_equal(store.chain[0, :, 0], [0.0, 0.0])


def test_count() -> None:
    """Test the counters and the acceptance fraction."""
    store = ChainStore(n_walkers=4, n_dims=1)
    store.count(4, 1)
    store.count(4, 3)

    assert store.iterations == 8
    assert store.accepted == 4
    assert store.acceptance_fraction == 0.5


def test_flatten_step_major() -> None:
    """Test that flattening orders samples step by step, walkers within a step."""
    store = ChainStore(n_walkers=2, n_dims=1)
    store.grow(2)
    a0, a1, b0, b1 = 1.0, 2.0, 3.0, 4.0
    store.chain[0, 0, :] = [a0, a1]
    store.chain[1, 0, :] = [b0, b1]

    flat = store.flatten()

    assert flat.shape == (1, 4)
    assert np.array_equal(flat[0], [a0, b0, a1, b1])


def test_flatten_multiple_dimensions(store: ChainStore) -> None:
    """Test the flattened chain shape and ordering across dimensions."""
    flat = store.flatten()

    assert flat.shape == (3, 8)
    for dim in range(3):
        expected = np.concatenate([store.chain[:, dim, 0], store.chain[:, dim, 1]])
        assert np.array_equal(flat[dim], expected)


def test_flatten_log_posterior(store: ChainStore) -> None:
    """Test the log-posterior flattens in the same order as the chain."""
    assert np.array_equal(
        store.flatten_log_posterior(), [0.0, 1.0, 2.0, 3.0, 10.0, 11.0, 12.0, 13.0]
    )


def test_flatten_empty() -> None:
    """Test that an empty store flattens to an empty array of the right height."""
    store = ChainStore(n_walkers=4, n_dims=3)
    assert store.flatten().shape == (3, 0)
    assert store.flatten_log_posterior().shape == (0,)


def test_last_positions(store: ChainStore) -> None:
    """Test that the last saved column is returned as an independent copy."""
    last = store.last_positions()

    assert np.array_equal(last, store.chain[:, :, -1])
    last[0, 0] = -1.0
    assert store.chain[0, 0, -1] != -1.0


def test_last_positions_empty() -> None:
    """Test that an empty chain has no positions to resume from."""
    with pytest.raises(EmptyChainError, match="chain is empty"):
        ChainStore(n_walkers=2, n_dims=1).last_positions()


def test_reset(store: ChainStore) -> None:
    """Test that reset clears history and counters but keeps the shape settings."""
    store.count(8, 5)
    store.reset()

    assert store.chain.shape == (4, 3, 0)
    assert store.log_posterior.shape == (4, 0)
    assert store.iterations == 0
    assert store.accepted == 0
    assert store.n_walkers == 4
    assert store.n_dims == 3


def test_repr(store: ChainStore) -> None:
    """Test the string representation."""
    assert repr(store) == (
        "ChainStore(n_walkers=4, n_dims=3, n_saved=2, iterations=0, accepted=0)"
    )
