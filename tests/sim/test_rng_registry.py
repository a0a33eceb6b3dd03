# tests/sim/test_rng_registry.py
import numpy as np

from geonav.sim.rng import RNGRegistry


def test_named_streams_are_deterministic():
    a1 = RNGRegistry(123, scenario="A").stream("sensor_noise").random(5)
    a2 = RNGRegistry(123, scenario="A").stream("sensor_noise").random(5)
    assert np.allclose(a1, a2)


def test_streams_are_independent():
    reg = RNGRegistry(123)
    a = reg.stream("sensor_noise").random(5)
    b = reg.stream("dropouts").random(5)
    assert not np.allclose(a, b)


def test_stream_is_shared_within_a_registry():
    reg = RNGRegistry(123)
    assert reg.stream("sensor_noise") is reg.stream("sensor_noise")


def test_scenarios_and_seeds_are_disjoint():
    base = RNGRegistry(123, scenario="campus").stream("sensor_noise").random(10)
    other_scenario = RNGRegistry(123, scenario="harbour").stream("sensor_noise").random(10)
    other_seed = RNGRegistry(124, scenario="campus").stream("sensor_noise").random(10)
    assert not np.allclose(base, other_scenario)
    assert not np.allclose(base, other_seed)
