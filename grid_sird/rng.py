"""Seeded RNG factory for reproducible simulations.

Uses NumPy's SeedSequence → PCG64 hierarchy to guarantee:
  - Bit-exact replay of a run with the same seed
  - Statistical independence between replicate runs of a sweep
  - Replicate i's stream doesn't depend on how many replicates are spawned

Every random draw of a simulation comes from the single Generator passed
into it; nothing reads a global or thread-local generator.
"""

from __future__ import annotations

from typing import List, Optional

import numpy as np


def create_rng(seed: Optional[int] = None) -> np.random.Generator:
    """Create a PCG64 generator.

    Args:
        seed: Non-negative integer seed, or None for fresh OS entropy.

    Returns:
        numpy Generator.

    Example:
        >>> rng = create_rng(42)
        >>> rng.integers(0, 100)  # reproducible
    """
    return np.random.Generator(np.random.PCG64(np.random.SeedSequence(seed)))


def spawn_rngs(master_seed: Optional[int], n: int) -> List[np.random.Generator]:
    """Create `n` independent generators from one master seed.

    Uses SeedSequence spawning, so stream i is identical whether 5 or 500
    streams are requested.

    Args:
        master_seed: Master RNG seed (non-negative integer) or None.
        n: Number of streams.

    Returns:
        List of numpy Generator instances.
    """
    if n < 0:
        raise ValueError(f"Cannot spawn a negative number of streams ({n})")
    children = np.random.SeedSequence(master_seed).spawn(n)
    return [np.random.Generator(np.random.PCG64(child)) for child in children]


def rng_state_snapshot(rng: np.random.Generator) -> dict:
    """Capture full RNG state for checkpointing.

    The returned dict can be serialized (e.g. via pickle) and restored
    to resume a simulation exactly.
    """
    return rng.bit_generator.state


def restore_rng_state(rng: np.random.Generator, state: dict) -> None:
    """Restore RNG state from a checkpoint snapshot.

    Raises:
        ValueError: If the snapshot was taken from a different bit generator.
    """
    expected = type(rng.bit_generator).__name__
    found = state.get('bit_generator')
    if found != expected:
        raise ValueError(
            f"Cannot restore {found!r} state into a {expected} generator"
        )
    rng.bit_generator.state = state
