"""
Risk engine: ordered rule sets for program and transaction evidence.

Each rule has a fixed non-negative weight and warning. A rule that fires adds
its weight and warning; one that does not contributes nothing. Rules are
evaluated in table order so warnings are reproducible. The existence rule is
terminal: when it fires no other rule runs.

A rule whose evidence is unavailable raises PartialEvidenceUnavailable and is
skipped (weight 0); the rest of the audit continues.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable

from backend_solaudit.audit_logging import get_logger
from backend_solaudit.core.exceptions import PartialEvidenceUnavailable
from backend_solaudit.evidence.models import SECONDS_PER_DAY, ProgramEvidence, TransactionEvidence

logger = get_logger(__name__)

LAMPORTS_PER_SOL = 10**9

# Program thresholds
MIN_PROGRAM_SIZE_BYTES = 100
MIN_PROGRAM_AGE_SECONDS = SECONDS_PER_DAY
MAX_TX_PER_DAY = 100
MAX_PROGRAM_BALANCE_LAMPORTS = 1000 * LAMPORTS_PER_SOL
# Floor for age in days when computing frequency (one second)
MIN_AGE_DAYS = 1 / SECONDS_PER_DAY

# Transaction thresholds
MAX_INSTRUCTIONS = 5
MAX_SIGNERS = 1
MAX_BALANCE_SHIFT_LAMPORTS = 100 * LAMPORTS_PER_SOL
SUSPICIOUS_LOG_MARKERS = ("error", "failed", "invalid")

# Warnings
WARN_PROGRAM_NOT_FOUND = "program not found"
WARN_SMALL_PROGRAM = "very small program size"
WARN_NOT_EXECUTABLE = "program is not executable"
WARN_RECENT_PROGRAM = "very recent program"
WARN_HIGH_TX_FREQUENCY = "high transaction frequency"
WARN_HIGH_BALANCE = "very high program balance"

WARN_TRANSACTION_NOT_FOUND = "transaction not found"
WARN_MANY_INSTRUCTIONS = "transaction with many instructions"
WARN_MULTIPLE_SIGNERS = "transaction with multiple signers"
WARN_LARGE_BALANCE_SHIFT = "transaction with large balance shifts"
WARN_EXECUTION_FAILED = "transaction simulation failed"
WARN_SUSPICIOUS_LOGS = "suspicious log messages detected"


@dataclass(frozen=True)
class RiskRule:
    name: str
    weight: int
    warning: str
    check: Callable[[Any], bool]
    terminal: bool = False

    def __post_init__(self) -> None:
        if self.weight < 0:
            raise ValueError(f"rule {self.name}: weight must be non-negative")


@dataclass
class RiskAssessment:
    """Cumulative risk score plus warnings and names of fired / skipped rules, in evaluation order."""

    risk_score: int = 0
    warnings: list[str] = field(default_factory=list)
    fired: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


def evaluate_rules(rules: tuple[RiskRule, ...], evidence: Any) -> RiskAssessment:
    """Apply rules in order; sum fired weights, collect warnings, stop after a fired terminal rule."""
    assessment = RiskAssessment()
    for rule in rules:
        try:
            fired = rule.check(evidence)
        except PartialEvidenceUnavailable as e:
            assessment.skipped.append(rule.name)
            logger.debug("risk_rule_skipped", rule=rule.name, reason=str(e))
            continue
        if not fired:
            continue
        assessment.risk_score += rule.weight
        assessment.warnings.append(rule.warning)
        assessment.fired.append(rule.name)
        logger.debug("risk_rule_fired", rule=rule.name, weight=rule.weight)
        if rule.terminal:
            break
    return assessment


# --- Program rules ---


def _tx_frequency_per_day(evidence: ProgramEvidence) -> float:
    age_days = max(evidence.require_age_days(), MIN_AGE_DAYS)
    return evidence.recent_signature_count / age_days


PROGRAM_RULES: tuple[RiskRule, ...] = (
    RiskRule("program_exists", 10, WARN_PROGRAM_NOT_FOUND, lambda e: not e.exists, terminal=True),
    RiskRule("small_program", 2, WARN_SMALL_PROGRAM, lambda e: e.data_length < MIN_PROGRAM_SIZE_BYTES),
    RiskRule("not_executable", 3, WARN_NOT_EXECUTABLE, lambda e: not e.executable),
    RiskRule("recent_program", 2, WARN_RECENT_PROGRAM, lambda e: e.require_age_seconds() < MIN_PROGRAM_AGE_SECONDS),
    RiskRule("high_tx_frequency", 1, WARN_HIGH_TX_FREQUENCY, lambda e: _tx_frequency_per_day(e) > MAX_TX_PER_DAY),
    RiskRule("high_balance", 2, WARN_HIGH_BALANCE, lambda e: e.balance_lamports > MAX_PROGRAM_BALANCE_LAMPORTS),
)


# --- Transaction rules ---


def _has_large_balance_shift(evidence: TransactionEvidence) -> bool:
    return any(abs(delta) > MAX_BALANCE_SHIFT_LAMPORTS for delta in evidence.balance_deltas())


def _has_suspicious_logs(evidence: TransactionEvidence) -> bool:
    return any(marker in line for line in evidence.log_messages for marker in SUSPICIOUS_LOG_MARKERS)


TRANSACTION_RULES: tuple[RiskRule, ...] = (
    RiskRule("transaction_exists", 10, WARN_TRANSACTION_NOT_FOUND, lambda e: not e.found, terminal=True),
    RiskRule("many_instructions", 2, WARN_MANY_INSTRUCTIONS, lambda e: e.instruction_count > MAX_INSTRUCTIONS),
    RiskRule("multiple_signers", 2, WARN_MULTIPLE_SIGNERS, lambda e: e.signer_count > MAX_SIGNERS),
    RiskRule("large_balance_shift", 3, WARN_LARGE_BALANCE_SHIFT, _has_large_balance_shift),
    RiskRule("execution_failed", 3, WARN_EXECUTION_FAILED, lambda e: e.execution_error is not None),
    RiskRule("suspicious_logs", 2, WARN_SUSPICIOUS_LOGS, _has_suspicious_logs),
)


def assess_program(evidence: ProgramEvidence) -> RiskAssessment:
    return evaluate_rules(PROGRAM_RULES, evidence)


def assess_transaction(evidence: TransactionEvidence) -> RiskAssessment:
    return evaluate_rules(TRANSACTION_RULES, evidence)
