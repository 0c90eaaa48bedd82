"""Fraud detection domain."""

from .activity import ActivityComputer
from .models import (
    Alert,
    FraudCheckResult,
    MemberActivity,
    RuleResult,
    TransactionCheck,
)
from .rules import ALL_RULES
from .rules_engine import RulesEngine
from .scorer import FraudScorer
from .store import FraudStore

__all__ = [
    "ALL_RULES",
    "ActivityComputer",
    "Alert",
    "FraudCheckResult",
    "FraudScorer",
    "FraudStore",
    "MemberActivity",
    "RuleResult",
    "RulesEngine",
    "TransactionCheck",
]
