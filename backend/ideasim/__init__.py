"""Idea viability simulator: scenario and Monte Carlo projections for business ideas."""

__version__ = "0.1.0"
