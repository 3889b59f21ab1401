"""Data models and calculators for mortgage and investment planning."""

from .amortization import AmortizationCalculator, ScheduleGenerator
from .cash_flow import CashFlowProjection, CashFlowProjector, summarize_cash_flows
from .financial_metrics import (
    AffordabilityAnalysis,
    FinancialHealthIndicators,
    FinancialMetrics,
    MetricsEngine,
    PropertyReturn,
    analyze_affordability,
    calculate_affordability_score,
    calculate_appreciation,
    calculate_financial_health,
    calculate_property_roi,
    score_payment_ratio,
)
from .loan import (
    InvestmentParameters,
    LoanParameters,
    PaymentScheduleItem,
    PersonalFinances,
    TwoPhasePayment,
    round_currency,
)
from .loan_optimizer import (
    BankOffer,
    BankRateOption,
    LoanRecommendation,
    LoanStructureOptimizer,
    OptimalRateResult,
    RateRecommendation,
    bank_rate_to_loan_parameters,
    default_loan_parameters,
    rank_bank_rates,
)
from .prepayment import PrepaymentResult, PrepaymentSimulator, months_to_repay
from .scenario import (
    BaselineContext,
    FinanceDeltas,
    IncomeChangeEvent,
    LoanOverrides,
    PrepaymentEvent,
    RateChangeEvent,
    ScenarioAssumptions,
    ScenarioComparison,
    ScenarioDefinition,
    ScenarioEvents,
    ScenarioParameters,
    ScenarioResults,
)
from .stress_test import StressFactors, StressTester, StressTestResult, classify_risk

__all__ = [
    "AmortizationCalculator",
    "ScheduleGenerator",
    "CashFlowProjection",
    "CashFlowProjector",
    "summarize_cash_flows",
    "AffordabilityAnalysis",
    "FinancialHealthIndicators",
    "FinancialMetrics",
    "MetricsEngine",
    "PropertyReturn",
    "analyze_affordability",
    "calculate_affordability_score",
    "calculate_appreciation",
    "calculate_financial_health",
    "calculate_property_roi",
    "score_payment_ratio",
    "InvestmentParameters",
    "LoanParameters",
    "PaymentScheduleItem",
    "PersonalFinances",
    "TwoPhasePayment",
    "round_currency",
    "BankOffer",
    "BankRateOption",
    "LoanRecommendation",
    "LoanStructureOptimizer",
    "OptimalRateResult",
    "RateRecommendation",
    "bank_rate_to_loan_parameters",
    "default_loan_parameters",
    "rank_bank_rates",
    "PrepaymentResult",
    "PrepaymentSimulator",
    "months_to_repay",
    "BaselineContext",
    "FinanceDeltas",
    "IncomeChangeEvent",
    "LoanOverrides",
    "PrepaymentEvent",
    "RateChangeEvent",
    "ScenarioAssumptions",
    "ScenarioComparison",
    "ScenarioDefinition",
    "ScenarioEvents",
    "ScenarioParameters",
    "ScenarioResults",
    "StressFactors",
    "StressTester",
    "StressTestResult",
    "classify_risk",
]
