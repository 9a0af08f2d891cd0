"""
Financial Calculation Engine

Pure calculation modules for mortgage and investment projections.
No module here reads the clock or touches storage; every result is
recomputed from its parameters.
"""

from app.calculations import periods, amortization, summary, growth, scenarios

__all__ = ["periods", "amortization", "summary", "growth", "scenarios"]
