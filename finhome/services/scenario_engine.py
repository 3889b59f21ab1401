"""
Scenario engine for what-if analysis of a financing plan.

Every operation is a pure function of an immutable ``BaselineContext`` and its
arguments. ``ScenarioEngine`` is a thin convenience wrapper that holds one
context; it keeps no other state, so scenarios can be evaluated concurrently.
"""

import logging
from collections import defaultdict
from typing import Dict, List, Optional, Tuple

from finhome.models.cash_flow import (
    CashFlowProjection,
    CashFlowProjector,
    summarize_cash_flows,
)
from finhome.models.financial_metrics import FinancialMetrics, MetricsEngine
from finhome.models.loan import (
    InvestmentParameters,
    LoanParameters,
    PersonalFinances,
    round_currency,
)
from finhome.models.scenario import (
    BaselineContext,
    FinanceDeltas,
    LoanOverrides,
    PrepaymentEvent,
    ScenarioAssumptions,
    ScenarioComparison,
    ScenarioDefinition,
    ScenarioEvents,
    ScenarioParameters,
    ScenarioResults,
)

logger = logging.getLogger(__name__)

HIGH_DTI_INSIGHT = 30
HIGH_DTI_RISK = 40
STRONG_AFFORDABILITY = 8
WEAK_AFFORDABILITY = 5
ATTRACTIVE_ROI = 8
WEAK_ROI = 5
HIGH_ROI = 10
STRONG_CAREER_GROWTH = 10
# Monthly net cash flow (VND) that counts as a large deficit or surplus
CASH_FLOW_ALERT_THRESHOLD = 5_000_000


def apply_loan_overrides(loan: LoanParameters, overrides: LoanOverrides) -> LoanParameters:
    """Replace baseline loan terms with any overrides that are set."""
    updates = loan.model_dump()
    if overrides.loan_amount is not None:
        updates["principal"] = overrides.loan_amount
    if overrides.interest_rate is not None:
        updates["annual_rate"] = overrides.interest_rate
    if overrides.loan_term_years is not None:
        updates["term_months"] = overrides.loan_term_years * 12
    return LoanParameters(**updates)


def apply_finance_deltas(
    finances: PersonalFinances, deltas: FinanceDeltas
) -> PersonalFinances:
    """Add income and expense deltas to the baseline household finances."""
    return PersonalFinances(
        monthly_income=finances.monthly_income + deltas.monthly_income_change,
        monthly_expenses=max(0.0, finances.monthly_expenses + deltas.monthly_expense_change),
    )


def apply_investment_deltas(
    investment: Optional[InvestmentParameters], deltas: FinanceDeltas
) -> Optional[InvestmentParameters]:
    """Add rental, property-expense and appreciation deltas to the baseline."""
    if investment is None:
        return None
    return investment.model_copy(
        update={
            "expected_rental_income": investment.expected_rental_income
            + deltas.rental_income_change,
            "property_expenses": investment.property_expenses
            + deltas.property_expense_change,
            "appreciation_rate": investment.appreciation_rate
            + deltas.appreciation_rate_change,
        }
    )


def apply_dynamic_events(
    projections: List[CashFlowProjection], events: ScenarioEvents
) -> List[CashFlowProjection]:
    """
    Patch projected cash flows with discrete events.

    These are local adjustments, not a re-amortization:

    - a rate change re-prices the interest of every month from its month
      onward on that month's opening balance; the latest change wins;
    - an income change shifts net cash flow from its month onward;
    - a prepayment lowers that month's remaining balance and net cash flow
      only.

    Cumulative cash flow carries every adjustment forward.
    """
    if not projections:
        return []

    last_month = projections[-1].month
    all_events = [
        *events.prepayments,
        *events.interest_rate_changes,
        *events.income_changes,
    ]
    for event in all_events:
        if event.month > last_month:
            logger.warning(
                "Ignoring %s at month %d beyond the %d-month horizon",
                type(event).__name__,
                event.month,
                last_month,
            )

    rate_changes = sorted(events.interest_rate_changes, key=lambda e: e.month)
    prepayments: Dict[int, float] = defaultdict(float)
    for prepayment in events.prepayments:
        prepayments[prepayment.month] += prepayment.amount

    adjusted = []
    carried_adjustment = 0.0
    for projection in projections:
        update = {}
        adjustment = 0.0

        active_rate = None
        for change in rate_changes:
            if change.month <= projection.month:
                active_rate = change.new_rate
        if active_rate is not None:
            opening_balance = projection.remaining_balance + projection.principal_payment
            interest = round_currency(opening_balance * active_rate / 100 / 12)
            total_payment = projection.principal_payment + interest
            adjustment -= total_payment - projection.total_payment
            update["interest_payment"] = interest
            update["total_payment"] = total_payment

        for change in events.income_changes:
            if change.month <= projection.month:
                adjustment += change.monthly_income_change - change.monthly_expense_change

        if projection.month in prepayments:
            amount = prepayments[projection.month]
            remaining_balance = max(0.0, projection.remaining_balance - amount)
            adjustment -= amount
            update["remaining_balance"] = remaining_balance
            update["equity_position"] = projection.property_value - remaining_balance

        carried_adjustment += adjustment
        if adjustment:
            update["net_cash_flow"] = projection.net_cash_flow + adjustment
        if carried_adjustment:
            update["cumulative_cash_flow"] = (
                projection.cumulative_cash_flow + carried_adjustment
            )

        adjusted.append(projection.model_copy(update=update) if update else projection)

    return adjusted


def generate_insights(
    scenario: ScenarioDefinition,
    metrics: FinancialMetrics,
    projections: List[CashFlowProjection],
    cash_flow_alert_threshold: float = CASH_FLOW_ALERT_THRESHOLD,
) -> Tuple[List[str], List[str], List[str]]:
    """Key insights, risk factors and opportunities from fixed threshold rules."""
    threshold = cash_flow_alert_threshold
    summary = summarize_cash_flows(projections)
    assumptions = scenario.assumptions

    insights = []
    if metrics.debt_to_income_ratio > HIGH_DTI_INSIGHT:
        insights.append(
            f"Loan payments take {round(metrics.debt_to_income_ratio)}% of income"
        )
    if summary["negative_months"] > 0:
        insights.append(f"{summary['negative_months']} months have negative cash flow")
    if metrics.affordability_score >= STRONG_AFFORDABILITY:
        insights.append("Very comfortable affordability; room to invest further")
    elif metrics.affordability_score < WEAK_AFFORDABILITY:
        insights.append("Limited affordability; the plan should be revisited")
    if metrics.roi is not None:
        if metrics.roi > ATTRACTIVE_ROI:
            insights.append(f"ROI of {metrics.roi}% beats bank deposit rates")
        elif metrics.roi < WEAK_ROI:
            insights.append(f"ROI of {metrics.roi}% is low; compare other investments")

    risks = []
    if metrics.debt_to_income_ratio > HIGH_DTI_RISK:
        risks.append("Debt-to-income ratio above 40%")
    if metrics.affordability_score < WEAK_AFFORDABILITY:
        risks.append("Low affordability score")
    if summary["min_net_cash_flow"] < -threshold:
        risks.append("Large negative cash flow in some months")
    if assumptions.property_market_trend == "bear":
        risks.append("Property market downturn")

    opportunities = []
    if metrics.affordability_score >= STRONG_AFFORDABILITY:
        opportunities.append("Extra payments could cut interest costs")
    if summary["mean_positive_cash_flow"] > threshold:
        opportunities.append("Strong positive cash flow available for investing")
    if metrics.roi is not None and metrics.roi > HIGH_ROI:
        opportunities.append("High ROI; consider expanding the portfolio")
    if (
        assumptions.personal_career_growth is not None
        and assumptions.personal_career_growth > STRONG_CAREER_GROWTH
    ):
        opportunities.append("Strong career prospects could support more borrowing")

    return insights, risks, opportunities


def compare_to_baseline(
    context: BaselineContext,
    metrics: FinancialMetrics,
    projections: List[CashFlowProjection],
) -> ScenarioComparison:
    """Compare a scenario's metrics and terminal equity with the baseline."""
    baseline_metrics = MetricsEngine.calculate_financial_metrics(
        context.loan,
        context.personal_finances,
        context.investment,
        context.reference_date,
    )
    baseline_projections = CashFlowProjector.calculate_cash_flow_projections(
        context.loan,
        context.personal_finances,
        context.investment,
        context.reference_date,
    )

    scenario_equity = summarize_cash_flows(projections)["terminal_equity"]
    baseline_equity = summarize_cash_flows(baseline_projections)["terminal_equity"]
    payoff_days = (baseline_metrics.payoff_date - metrics.payoff_date).days

    return ScenarioComparison(
        monthly_savings=baseline_metrics.monthly_payment - metrics.monthly_payment,
        total_interest_difference=baseline_metrics.total_interest - metrics.total_interest,
        payoff_time_difference=payoff_days / 30,
        net_worth_difference=scenario_equity - baseline_equity,
        affordability_score_difference=metrics.affordability_score
        - baseline_metrics.affordability_score,
    )


def generate_scenario(
    context: BaselineContext,
    scenario: ScenarioDefinition,
    cash_flow_alert_threshold: float = CASH_FLOW_ALERT_THRESHOLD,
) -> ScenarioResults:
    """
    Evaluate a scenario against the baseline.

    Args:
        context: Immutable baseline
        scenario: Scenario definition
        cash_flow_alert_threshold: Deficit/surplus size used by the insight rules

    Returns:
        ScenarioResults, with a baseline comparison unless the scenario is
        itself a baseline
    """
    logger.info("Generating scenario %s (%s)", scenario.id, scenario.type)
    parameters = scenario.parameters

    try:
        loan = apply_loan_overrides(context.loan, parameters.overrides)
        finances = apply_finance_deltas(context.personal_finances, parameters.deltas)
        investment = apply_investment_deltas(context.investment, parameters.deltas)

        metrics = MetricsEngine.calculate_financial_metrics(
            loan, finances, investment, context.reference_date
        )
        projections = CashFlowProjector.calculate_cash_flow_projections(
            loan, finances, investment, context.reference_date
        )
        projections = apply_dynamic_events(projections, parameters.events)

        insights, risks, opportunities = generate_insights(
            scenario, metrics, projections, cash_flow_alert_threshold
        )

        comparison = None
        if scenario.type != "baseline":
            comparison = compare_to_baseline(context, metrics, projections)
    except ValueError as e:
        logger.error(f"Scenario {scenario.id} failed: {str(e)}")
        raise

    return ScenarioResults(
        scenario=scenario,
        metrics=metrics,
        cash_flow_projections=projections,
        key_insights=insights,
        risk_factors=risks,
        opportunities=opportunities,
        comparison_to_baseline=comparison,
    )


def generate_scenarios(
    context: BaselineContext,
    scenarios: List[ScenarioDefinition],
    cash_flow_alert_threshold: float = CASH_FLOW_ALERT_THRESHOLD,
) -> List[ScenarioResults]:
    """Evaluate several scenarios against the same baseline."""
    return [
        generate_scenario(context, scenario, cash_flow_alert_threshold)
        for scenario in scenarios
    ]


def build_predefined_scenarios(context: BaselineContext) -> List[ScenarioDefinition]:
    """
    The five standard archetypes derived from the baseline.

    Career growth is applied as an immediate, whole-horizon step change.
    """
    income = context.personal_finances.monthly_income
    expenses = context.personal_finances.monthly_expenses
    base_rate = context.loan.annual_rate
    rental = context.investment.expected_rental_income if context.investment else 0.0

    annual_prepayment = income * 0.1 * 12
    early_payoff_events = ScenarioEvents(
        prepayments=[
            PrepaymentEvent(month=year * 12, amount=annual_prepayment)
            for year in range(1, 11)
        ]
    )

    return [
        ScenarioDefinition(
            id="optimistic",
            name="Optimistic",
            type="optimistic",
            description="Solid income growth and a strong property market",
            parameters=ScenarioParameters(
                deltas=FinanceDeltas(
                    monthly_income_change=income * 0.05,
                    rental_income_change=rental * 0.1,
                    appreciation_rate_change=2,
                )
            ),
            assumptions=ScenarioAssumptions(
                economic_growth=7,
                inflation_rate=3,
                property_market_trend="bull",
                personal_career_growth=8,
                emergency_fund_months=6,
                additional_investments=True,
            ),
        ),
        ScenarioDefinition(
            id="pessimistic",
            name="Pessimistic",
            type="pessimistic",
            description="Economic slowdown, lower income and higher rates",
            parameters=ScenarioParameters(
                overrides=LoanOverrides(interest_rate=base_rate + 2),
                deltas=FinanceDeltas(
                    monthly_income_change=-income * 0.15,
                    monthly_expense_change=expenses * 0.1,
                    rental_income_change=-rental * 0.2,
                    appreciation_rate_change=-3,
                ),
            ),
            assumptions=ScenarioAssumptions(
                economic_growth=-2,
                inflation_rate=6,
                property_market_trend="bear",
                personal_career_growth=-5,
                emergency_fund_months=12,
                additional_investments=False,
            ),
        ),
        ScenarioDefinition(
            id="early_payoff",
            name="Early payoff",
            type="alternative",
            description="An extra 10% of income paid down once a year",
            parameters=ScenarioParameters(events=early_payoff_events),
            assumptions=ScenarioAssumptions(
                economic_growth=5,
                inflation_rate=4,
                property_market_trend="stable",
                personal_career_growth=5,
                emergency_fund_months=8,
                additional_investments=False,
            ),
        ),
        ScenarioDefinition(
            id="market_crash",
            name="Market crash",
            type="stress_test",
            description="Financial crisis with a sharp fall in property prices",
            parameters=ScenarioParameters(
                overrides=LoanOverrides(interest_rate=base_rate + 3),
                deltas=FinanceDeltas(
                    monthly_income_change=-income * 0.3,
                    rental_income_change=-rental * 0.4,
                    appreciation_rate_change=-15,
                ),
            ),
            assumptions=ScenarioAssumptions(
                economic_growth=-5,
                inflation_rate=8,
                property_market_trend="bear",
                personal_career_growth=-20,
                emergency_fund_months=18,
                additional_investments=False,
            ),
        ),
        ScenarioDefinition(
            id="career_growth",
            name="Career growth",
            type="optimistic",
            description="Promotion with a large income increase",
            parameters=ScenarioParameters(
                deltas=FinanceDeltas(
                    monthly_income_change=income * 0.5,
                    monthly_expense_change=expenses * 0.2,
                )
            ),
            assumptions=ScenarioAssumptions(
                economic_growth=6,
                inflation_rate=4,
                property_market_trend="stable",
                personal_career_growth=15,
                emergency_fund_months=9,
                additional_investments=True,
            ),
        ),
    ]


def generate_predefined_scenarios(
    context: BaselineContext,
    cash_flow_alert_threshold: float = CASH_FLOW_ALERT_THRESHOLD,
) -> List[ScenarioResults]:
    """Evaluate the five standard archetypes."""
    return generate_scenarios(
        context, build_predefined_scenarios(context), cash_flow_alert_threshold
    )


class ScenarioEngine:
    """Evaluates scenarios against one immutable baseline."""

    def __init__(
        self,
        context: BaselineContext,
        cash_flow_alert_threshold: float = CASH_FLOW_ALERT_THRESHOLD,
    ) -> None:
        """Initialize the engine.

        Args:
            context: Baseline loan, finances and investment parameters
            cash_flow_alert_threshold: Deficit/surplus size used by the insight rules
        """
        self._context = context
        self._cash_flow_alert_threshold = cash_flow_alert_threshold

    @property
    def context(self) -> BaselineContext:
        return self._context

    @property
    def cash_flow_alert_threshold(self) -> float:
        return self._cash_flow_alert_threshold

    def generate_scenario(self, scenario: ScenarioDefinition) -> ScenarioResults:
        return generate_scenario(
            self._context, scenario, self._cash_flow_alert_threshold
        )

    def generate_scenarios(
        self, scenarios: List[ScenarioDefinition]
    ) -> List[ScenarioResults]:
        return generate_scenarios(
            self._context, scenarios, self._cash_flow_alert_threshold
        )

    def generate_predefined_scenarios(self) -> List[ScenarioResults]:
        return generate_predefined_scenarios(
            self._context, self._cash_flow_alert_threshold
        )

    def baseline_metrics(self) -> FinancialMetrics:
        """Metrics for the unmodified baseline."""
        return MetricsEngine.calculate_financial_metrics(
            self._context.loan,
            self._context.personal_finances,
            self._context.investment,
            self._context.reference_date,
        )
