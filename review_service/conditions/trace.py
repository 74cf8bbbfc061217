"""
Evaluation trace for review policies.

Records the outcome of every condition evaluated in one policy evaluation,
so hosts can see why a review was or was not requested.
"""

from typing import Dict, List, Any, Optional
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class Outcome(str, Enum):
    """
    Outcome of a single condition.

    - PASS: condition satisfied
    - FAIL: condition not satisfied
    - SKIPPED: not evaluated (short-circuit mode after a FAIL)
    """
    PASS = "pass"
    FAIL = "fail"
    SKIPPED = "skipped"


@dataclass
class ConditionEntry:
    """
    Record of a single condition evaluation.

    Attributes:
        condition_name: Name of the evaluated condition
        outcome: PASS, FAIL or SKIPPED
        position: Registration index of the condition in the policy
        elapsed_ms: Time taken to evaluate the condition in milliseconds
    """
    condition_name: str
    outcome: Outcome
    position: int = 0
    elapsed_ms: float = 0.0

    @property
    def result(self) -> Optional[bool]:
        """True/False for evaluated conditions, None when skipped."""
        if self.outcome == Outcome.SKIPPED:
            return None
        return self.outcome == Outcome.PASS

    def to_dict(self) -> Dict[str, Any]:
        return {
            "condition": self.condition_name,
            "outcome": self.outcome.value,
            "position": self.position,
            "elapsed_ms": round(self.elapsed_ms, 3),
        }

    def to_compact_string(self) -> str:
        return f"  {self.condition_name}: {self.outcome.value.upper()}"


@dataclass
class EvaluationTrace:
    """
    Trace of one policy evaluation.

    Entries are kept in registration order regardless of the order in which
    concurrent evaluations completed.

    Attributes:
        now: The timestamp all conditions were evaluated against
        mode: Evaluation mode ("all" or "short_circuit")
        entries: Condition entries in registration order
        satisfied: Aggregated result, None until set_result() is called
    """
    now: datetime
    mode: str = "all"
    entries: List[ConditionEntry] = field(default_factory=list)
    satisfied: Optional[bool] = None

    def record(
        self,
        condition_name: str,
        result: bool,
        position: int,
        elapsed_ms: float = 0.0
    ) -> None:
        """Record an evaluated condition."""
        self._insert(ConditionEntry(
            condition_name=condition_name,
            outcome=Outcome.PASS if result else Outcome.FAIL,
            position=position,
            elapsed_ms=elapsed_ms
        ))

    def record_skipped(self, condition_name: str, position: int) -> None:
        """Record a condition that was not evaluated."""
        self._insert(ConditionEntry(
            condition_name=condition_name,
            outcome=Outcome.SKIPPED,
            position=position
        ))

    def _insert(self, entry: ConditionEntry) -> None:
        self.entries.append(entry)
        self.entries.sort(key=lambda e: e.position)

    def set_result(self, satisfied: bool) -> None:
        self.satisfied = satisfied

    @property
    def conditions_checked(self) -> int:
        """Number of conditions that were evaluated."""
        return sum(1 for e in self.entries if e.outcome != Outcome.SKIPPED)

    @property
    def conditions_passed(self) -> int:
        return sum(1 for e in self.entries if e.outcome == Outcome.PASS)

    @property
    def failed_conditions(self) -> List[str]:
        """Names of conditions that were evaluated and not satisfied."""
        return [e.condition_name for e in self.entries if e.outcome == Outcome.FAIL]

    @property
    def total_elapsed_ms(self) -> float:
        return sum(e.elapsed_ms for e in self.entries)

    def to_dict(self) -> Dict[str, Any]:
        """Convert trace to a JSON-serializable dict."""
        return {
            "now": self.now.isoformat(),
            "mode": self.mode,
            "satisfied": self.satisfied,
            "conditions_checked": self.conditions_checked,
            "conditions_passed": self.conditions_passed,
            "total_elapsed_ms": round(self.total_elapsed_ms, 3),
            "entries": [e.to_dict() for e in self.entries],
        }

    def to_compact_string(self) -> str:
        """
        Compact multi-line representation.

        Format:
            [POLICY] satisfied=False (2/3 passed, mode=all)
              minimum_application_launch_count(3): PASS
              minimum_elapsed_since_first_launch(7d): FAIL
        """
        lines = [
            f"[POLICY] satisfied={self.satisfied} "
            f"({self.conditions_passed}/{len(self.entries)} passed, mode={self.mode})"
        ]
        for entry in self.entries:
            lines.append(entry.to_compact_string())
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"EvaluationTrace(satisfied={self.satisfied}, "
            f"checked={self.conditions_checked}, mode={self.mode!r})"
        )
