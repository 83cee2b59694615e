"""
Score translator: cumulative risk score -> trust percentage, risk level, description.

trust_score = round((TOTAL_RISK_SCORE - risk) / TOTAL_RISK_SCORE * 100), with the risk
score clamped to 0..TOTAL_RISK_SCORE so trust stays within 0-100.
Levels are checked high to low; first match wins.
"""

from __future__ import annotations

TOTAL_RISK_SCORE = 10
SCORE_MIN = 0
SCORE_MAX = 100

RISK_HIGH = "High Risk"
RISK_MODERATE = "Moderate Risk"
RISK_LOW = "Low Risk"
RISK_VERY_LOW = "Very Low Risk"

# (exclusive lower bound, level, description)
RISK_TIERS: tuple[tuple[int, str, str], ...] = (
    (7, RISK_HIGH, "Careful review strongly recommended."),
    (4, RISK_MODERATE, "Further review recommended."),
    (2, RISK_LOW, "Not many issues, but exercise caution."),
)
VERY_LOW_DESC = "Seems safe, but always verify."


def to_trust_score(risk_score: int) -> int:
    """Trust percentage 0-100; non-increasing in risk_score."""
    risk = max(0, min(TOTAL_RISK_SCORE, risk_score))
    score = round((TOTAL_RISK_SCORE - risk) / TOTAL_RISK_SCORE * 100)
    return max(SCORE_MIN, min(SCORE_MAX, score))


def risk_tier(risk_score: int) -> tuple[str, str]:
    """Return (risk_level, risk_desc) for a cumulative risk score."""
    for bound, level, desc in RISK_TIERS:
        if risk_score > bound:
            return level, desc
    return RISK_VERY_LOW, VERY_LOW_DESC


def risk_level(risk_score: int) -> str:
    return risk_tier(risk_score)[0]


def risk_desc(risk_score: int) -> str:
    return risk_tier(risk_score)[1]


def translate(risk_score: int) -> tuple[int, str, str]:
    """(trust_score, risk_level, risk_desc) for a cumulative risk score."""
    level, desc = risk_tier(risk_score)
    return to_trust_score(risk_score), level, desc
