from tenderflow.models.company import CompanyProfile
from tenderflow.models.documents import TenderDocument

FULL_CREDIT_CONTRACTS = 3
SCALE_THRESHOLD = 0.8
REVENUE_MULTIPLIER = 1.5


def experience_score(document: TenderDocument, company: CompanyProfile | None) -> float:
    """Half quantity of past contracts (full at 3), half scale (one contract >= 80% of budget)."""
    if not company or not company.experience:
        return 0.0

    budget = document.estimated_budget or 0
    history = company.experience

    quantity = min(len(history) / FULL_CREDIT_CONTRACTS * 100, 100)
    scale = 100 if any((contract.value or 0) >= budget * SCALE_THRESHOLD for contract in history) else 0

    return quantity * 0.5 + scale * 0.5


def revenue_check(revenue: float | None, budget: float | None) -> float:
    revenue = revenue or 0
    budget = budget or 0
    if budget <= 0:
        return 100.0 if revenue > 0 else 0.0
    return min(revenue / (budget * REVENUE_MULTIPLIER) * 100, 100)


def feasibility_score(document: TenderDocument, company: CompanyProfile | None) -> float:
    """Revenue against 1.5x budget (60%) blended with the experience score (40%)."""
    if not company or not company.finances:
        return 0.0

    latest = max(company.finances, key=lambda finance: finance.year)
    check = revenue_check(latest.revenue, document.estimated_budget)
    return check * 0.6 + experience_score(document, company) * 0.4
