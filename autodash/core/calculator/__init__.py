"""Aggregation, statistics, formatting and chart analysis."""

from .aggregator import aggregate, calculator, Calculator
from .formatting import format_value

__all__ = ['aggregate', 'calculator', 'Calculator', 'format_value']
