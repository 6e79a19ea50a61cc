"""Simulation error taxonomy.

Every error carries the scenario and variable it relates to (when known) so
API callers can show an actionable message.
"""
from __future__ import annotations

from typing import Any, Optional


class SimulationError(Exception):
    """Base class for all engine errors."""

    code = "simulation_error"

    def __init__(
        self,
        message: str,
        *,
        scenario: Optional[str] = None,
        variable: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.scenario = scenario
        self.variable = variable

    def with_scenario(self, scenario: str) -> "SimulationError":
        if self.scenario is None:
            self.scenario = scenario
        return self

    def to_detail(self) -> dict[str, Any]:
        return {
            "error": self.code,
            "message": self.message,
            "scenario": self.scenario,
            "variable": self.variable,
        }

    def __str__(self) -> str:
        context = []
        if self.scenario:
            context.append(f"scenario={self.scenario}")
        if self.variable:
            context.append(f"variable={self.variable}")
        if context:
            return f"{self.message} ({', '.join(context)})"
        return self.message


class InvalidParametersError(SimulationError):
    """A SimulationVariable's parameters don't match its distribution type."""

    code = "invalid_parameters"


class InvalidConfigurationError(SimulationError):
    """SimulationParams, the idea data, or the engine config is malformed."""

    code = "invalid_configuration"


class NumericOverflowError(SimulationError):
    """A projection produced NaN or infinity."""

    code = "numeric_overflow"


class SimulationCancelledError(SimulationError):
    """The caller's cancel signal was set before the run completed."""

    code = "cancelled"
