from __future__ import annotations

import hashlib
import random
from typing import Callable, Dict, List


try:  # optional dependency
    import numpy as _np  # type: ignore
except Exception:  # pragma: no cover - optional
    _np = None


class RandomSource:
    """Seeded source of column draws for card generation."""

    engine = "abstract"

    def draw(self, lo: int, hi: int, k: int) -> List[int]:
        """``k`` distinct integers from the inclusive range ``lo..hi``, in draw order."""
        raise NotImplementedError


class PyRandomSource(RandomSource):
    engine = "py_random"

    def __init__(self, seed: int):
        self._rng = random.Random(seed)

    def draw(self, lo: int, hi: int, k: int) -> List[int]:
        return self._rng.sample(range(lo, hi + 1), k)


class NumpyPCG64Source(RandomSource):  # pragma: no cover - covered when numpy present
    engine = "numpy_pcg64"

    def __init__(self, seed: int):
        if _np is None:
            raise RuntimeError("numpy is not installed; install bingo-pot[pcg]")
        self._rng = _np.random.Generator(_np.random.PCG64(seed))

    def draw(self, lo: int, hi: int, k: int) -> List[int]:
        picked = self._rng.choice(hi - lo + 1, size=k, replace=False)
        return [lo + int(i) for i in picked]


ENGINES: Dict[str, Callable[[int], RandomSource]] = {
    PyRandomSource.engine: PyRandomSource,
    NumpyPCG64Source.engine: NumpyPCG64Source,
}


def create_rng(engine: str, seed: int) -> RandomSource:
    name = (engine or PyRandomSource.engine).strip().lower()
    if name not in ENGINES:
        raise ValueError(f"Unsupported RNG engine: {engine} (choose from {', '.join(sorted(ENGINES))})")
    return ENGINES[name](seed)


def derive_parallel_seed(base_seed: int, index: int, purpose: str) -> int:
    """Seed for item ``index`` of a batch, independent of every other item.

    Card N of a batch is reproducible from the base seed alone, without
    generating cards 0..N-1 first. Result fits in 63 bits.
    """
    digest = hashlib.sha256(f"{purpose}:{base_seed}:{index}".encode("utf-8")).digest()
    return int.from_bytes(digest[:8], "big") >> 1
