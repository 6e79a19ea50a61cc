"""Tests for the distribution sampler."""
import math
import random

import pytest

from ideasim.errors import InvalidParametersError, NumericOverflowError
from ideasim.models.simulation import SimulationVariable
from ideasim.simulation.distributions import (
    LogNormal,
    Normal,
    Triangular,
    Uniform,
    resolve_distribution,
    resolve_variable,
    sample,
)


def _var(dist_type: str, impact: str = "revenue", name: str = "x", **params) -> SimulationVariable:
    return SimulationVariable.model_validate({
        "name": name,
        "type": dist_type,
        "impact": impact,
        "parameters": params,
    })


# --- Resolution / validation ---


def test_resolve_each_type():
    assert resolve_distribution(_var("normal", mean=1.0, stdDev=0.2)) == Normal(1.0, 0.2)
    assert resolve_distribution(_var("lognormal", mean=0.0, stdDev=0.5)) == LogNormal(0.0, 0.5)
    assert resolve_distribution(_var("uniform", min=0.7, max=1.3)) == Uniform(0.7, 1.3)
    assert resolve_distribution(_var("triangular", min=0.8, max=1.5, mode=1.0)) == Triangular(0.8, 1.0, 1.5)


def test_normal_missing_std_dev_rejected():
    with pytest.raises(InvalidParametersError) as exc:
        resolve_distribution(_var("normal", name="demand", mean=1.0))
    assert exc.value.variable == "demand"
    assert "std_dev" in str(exc.value)


def test_negative_std_dev_rejected():
    with pytest.raises(InvalidParametersError):
        resolve_distribution(_var("lognormal", mean=0.0, stdDev=-0.1))


def test_uniform_min_greater_than_max_rejected():
    with pytest.raises(InvalidParametersError):
        resolve_distribution(_var("uniform", min=2.0, max=1.0))


def test_uniform_min_equal_max_rejected():
    with pytest.raises(InvalidParametersError):
        resolve_distribution(_var("uniform", min=1.0, max=1.0))


def test_triangular_mode_outside_range_rejected():
    with pytest.raises(InvalidParametersError):
        resolve_distribution(_var("triangular", min=0.0, max=1.0, mode=2.0))


def test_triangular_missing_mode_rejected():
    with pytest.raises(InvalidParametersError):
        resolve_distribution(_var("triangular", min=0.0, max=1.0))


def test_non_finite_parameter_rejected():
    with pytest.raises(InvalidParametersError):
        resolve_distribution(_var("normal", mean=float("inf"), stdDev=1.0))


def test_blank_name_rejected():
    with pytest.raises(InvalidParametersError):
        resolve_variable(_var("normal", name="  ", mean=1.0, stdDev=0.1))


# --- Sampling ---


def test_zero_std_dev_returns_mean():
    rng = random.Random(1)
    v = _var("normal", mean=3.5, stdDev=0.0)
    assert all(sample(v, rng) == 3.5 for _ in range(20))


def test_lognormal_degenerate_is_exp_mean():
    rng = random.Random(1)
    assert sample(_var("lognormal", mean=0.0, stdDev=0.0), rng) == 1.0


def test_lognormal_always_positive():
    rng = random.Random(3)
    v = _var("lognormal", mean=0.0, stdDev=1.0)
    assert all(sample(v, rng) > 0 for _ in range(1000))


def test_uniform_within_bounds():
    rng = random.Random(5)
    v = _var("uniform", min=0.7, max=1.3)
    draws = [sample(v, rng) for _ in range(2000)]
    assert min(draws) >= 0.7
    assert max(draws) < 1.3


def test_triangular_within_bounds_and_mean():
    rng = random.Random(11)
    v = _var("triangular", min=0.02, max=0.15, mode=0.05)
    draws = [sample(v, rng) for _ in range(5000)]
    assert min(draws) >= 0.02
    assert max(draws) <= 0.15
    expected_mean = (0.02 + 0.05 + 0.15) / 3
    assert abs(sum(draws) / len(draws) - expected_mean) < 0.005


def test_normal_sample_mean_close_to_parameter():
    rng = random.Random(7)
    v = _var("normal", mean=1.0, stdDev=0.2)
    draws = [sample(v, rng) for _ in range(5000)]
    assert abs(sum(draws) / len(draws) - 1.0) < 0.02


def test_same_seed_same_draws():
    v = _var("triangular", min=0.8, max=1.5, mode=1.0)
    a = [sample(v, random.Random(99)) for _ in range(3)]
    r1, r2 = random.Random(99), random.Random(99)
    assert [sample(v, r1) for _ in range(10)] == [sample(v, r2) for _ in range(10)]
    assert a[0] == a[1] == a[2]


def test_lognormal_overflow_raises():
    rng = random.Random(1)
    with pytest.raises(NumericOverflowError) as exc:
        sample(_var("lognormal", name="huge", mean=1000.0, stdDev=0.0), rng)
    assert exc.value.variable == "huge"


def test_sample_accepts_resolved_variable():
    resolved = resolve_variable(_var("uniform", min=0.0, max=1.0))
    value = sample(resolved, random.Random(2))
    assert 0.0 <= value < 1.0
    assert math.isfinite(value)
