"""FinHome financial planning engine.

Deterministic mortgage and investment-property calculations: amortization,
promotional-rate schedules, cash-flow projections, affordability metrics,
prepayment and stress analysis, bank-offer ranking and what-if scenarios.
"""

__version__ = "0.1.0"
