"""Weighted score arithmetic.

Weights are percentages and are trusted as configured: when a criteria set
does not add up to 100 the result is not rescaled.
"""
from typing import Iterable, Mapping, Optional

DEFAULT_WEIGHTS = {
    "tech_weight": 0.4,
    "personnel_weight": 0.2,
    "experience_weight": 0.4,
}


def weighted_score(criteria: Iterable[Mapping], values: Mapping[str, float]) -> float:
    total = 0.0
    for criterion in criteria:
        value = values.get(criterion["id"]) or 0
        total += value * (criterion["weight"] / 100)
    return total


def total_score(tech_score: Optional[float], financial_score: Optional[float], tech_weight: float) -> float:
    # personnel_weight and experience_weight do not enter the total
    return (tech_score or 0) * tech_weight + (financial_score or 0) * (1 - tech_weight)


def resolve_weights(scoring_config) -> dict:
    if scoring_config is None:
        return dict(DEFAULT_WEIGHTS)
    return {
        "tech_weight": scoring_config.tech_weight,
        "personnel_weight": scoring_config.personnel_weight,
        "experience_weight": scoring_config.experience_weight,
    }
