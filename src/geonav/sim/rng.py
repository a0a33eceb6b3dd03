# sim/rng.py
from functools import cache
from zlib import crc32

import numpy as np


def _tag(s: str) -> int:
    return crc32(s.encode("utf-8")) & 0xFFFFFFFF


class RNGRegistry:
    """
    Named numpy Generators seeded from (master_seed, scenario, stream name),
    so a simulated sensor draws the same noise whenever a scenario is rerun
    and adding a new stream never shifts the draws of an existing one.
    """

    def __init__(self, master_seed: int, *, scenario: str | int = 0):
        self.master_seed = master_seed & 0xFFFFFFFF
        self.scenario_tag = _tag(str(scenario))

    @cache
    def stream(self, name: str) -> np.random.Generator:
        ss = np.random.SeedSequence(entropy=[self.master_seed, self.scenario_tag, _tag(name)])
        return np.random.Generator(np.random.PCG64(ss))
