"""Distribution sampler: typed distributions and per-variable draws.

The wire ``SimulationVariable`` carries a loose ``parameters`` record; it is
resolved once, before any sampling, into one of the frozen distribution types
below so every sampling branch sees exactly the fields it needs.
"""
from __future__ import annotations

import math
import random
from dataclasses import dataclass
from typing import Union

from ideasim.errors import InvalidParametersError, NumericOverflowError
from ideasim.models.simulation import DistributionType, SimulationVariable


@dataclass(frozen=True)
class Normal:
    mean: float
    std_dev: float


@dataclass(frozen=True)
class LogNormal:
    """Parameters are those of the underlying normal."""
    mean: float
    std_dev: float


@dataclass(frozen=True)
class Uniform:
    low: float
    high: float


@dataclass(frozen=True)
class Triangular:
    low: float
    mode: float
    high: float


Distribution = Union[Normal, LogNormal, Uniform, Triangular]


@dataclass(frozen=True)
class ResolvedVariable:
    name: str
    impact: str
    distribution: Distribution


def _require(variable: SimulationVariable, *fields: str) -> list[float]:
    params = variable.parameters
    values = []
    for f in fields:
        v = getattr(params, f)
        if v is None:
            raise InvalidParametersError(
                f"{variable.type.value} distribution requires '{f}'",
                variable=variable.name,
            )
        if not math.isfinite(v):
            raise InvalidParametersError(
                f"Parameter '{f}' must be finite, got {v}",
                variable=variable.name,
            )
        values.append(float(v))
    return values


def resolve_distribution(variable: SimulationVariable) -> Distribution:
    """Validate a variable's parameters and build its typed distribution.

    Raises InvalidParametersError if parameters are missing or inconsistent.
    """
    dist_type = variable.type

    if dist_type in (DistributionType.normal, DistributionType.lognormal):
        mean, std_dev = _require(variable, "mean", "std_dev")
        if std_dev < 0:
            raise InvalidParametersError(
                f"stdDev must be >= 0, got {std_dev}", variable=variable.name,
            )
        if dist_type == DistributionType.normal:
            return Normal(mean, std_dev)
        return LogNormal(mean, std_dev)

    if dist_type == DistributionType.uniform:
        low, high = _require(variable, "min", "max")
        if not low < high:
            raise InvalidParametersError(
                f"uniform requires min < max, got min={low} max={high}",
                variable=variable.name,
            )
        return Uniform(low, high)

    if dist_type == DistributionType.triangular:
        low, high, mode = _require(variable, "min", "max", "mode")
        if not (low <= mode <= high) or low == high:
            raise InvalidParametersError(
                f"triangular requires min <= mode <= max and min < max, "
                f"got min={low} mode={mode} max={high}",
                variable=variable.name,
            )
        return Triangular(low, mode, high)

    raise InvalidParametersError(
        f"Unsupported distribution type {dist_type!r}", variable=variable.name,
    )


def resolve_variable(variable: SimulationVariable) -> ResolvedVariable:
    name = variable.name.strip()
    if not name:
        raise InvalidParametersError("Variable name is required", variable=variable.name)
    return ResolvedVariable(
        name=name,
        impact=variable.impact.value,
        distribution=resolve_distribution(variable),
    )


def draw(dist: Distribution, rng: random.Random) -> float:
    """Draw one value from a typed distribution."""
    if isinstance(dist, Normal):
        return dist.mean + dist.std_dev * rng.gauss(0.0, 1.0)

    if isinstance(dist, LogNormal):
        try:
            return math.exp(dist.mean + dist.std_dev * rng.gauss(0.0, 1.0))
        except OverflowError:
            raise NumericOverflowError(
                f"lognormal draw overflowed (mean={dist.mean}, stdDev={dist.std_dev})"
            ) from None

    if isinstance(dist, Uniform):
        return dist.low + (dist.high - dist.low) * rng.random()

    if isinstance(dist, Triangular):
        # Inverse CDF
        u = rng.random()
        span = dist.high - dist.low
        c = (dist.mode - dist.low) / span
        if u < c:
            return dist.low + math.sqrt(u * span * (dist.mode - dist.low))
        return dist.high - math.sqrt((1.0 - u) * span * (dist.high - dist.mode))

    raise TypeError(f"Unknown distribution {dist!r}")


def sample(variable: SimulationVariable | ResolvedVariable, rng: random.Random) -> float:
    """Draw one value for a variable using the injected generator."""
    if isinstance(variable, ResolvedVariable):
        try:
            return draw(variable.distribution, rng)
        except NumericOverflowError as e:
            e.variable = e.variable or variable.name
            raise
    return sample(resolve_variable(variable), rng)
