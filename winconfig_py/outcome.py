"""
Result collection for a bootstrap run.

Every step records what happened instead of raising, so a run always
finishes and callers can still assert on what failed.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, Iterator, List

logger = logging.getLogger("winconfig.outcome")

OK_MARK = "✅"
FAIL_MARK = "❌"
SKIP_MARK = "📦"


@dataclass(frozen=True)
class StepOutcome:
    """The result of a single operation within a run."""

    step: str
    subject: str
    ok: bool
    message: str = ""
    skipped: bool = False

    @classmethod
    def success(cls, step: str, subject: str, message: str) -> "StepOutcome":
        logger.info(f"{OK_MARK} {message}")
        return cls(step=step, subject=subject, ok=True, message=message)

    @classmethod
    def failure(cls, step: str, subject: str, message: str) -> "StepOutcome":
        logger.error(f"{FAIL_MARK} {message}")
        return cls(step=step, subject=subject, ok=False, message=message)

    @classmethod
    def skip(cls, step: str, subject: str, message: str) -> "StepOutcome":
        logger.info(f"{SKIP_MARK} {message}")
        return cls(step=step, subject=subject, ok=True, message=message, skipped=True)

    @property
    def marker(self) -> str:
        if not self.ok:
            return FAIL_MARK
        return SKIP_MARK if self.skipped else OK_MARK


@dataclass
class RunReport:
    """Ordered list of outcomes accumulated over a run."""

    outcomes: List[StepOutcome] = field(default_factory=list)

    def add(self, outcome: StepOutcome) -> StepOutcome:
        self.outcomes.append(outcome)
        return outcome

    def extend(self, outcomes: Iterable[StepOutcome]) -> None:
        self.outcomes.extend(outcomes)

    @property
    def ok(self) -> bool:
        """True when no recorded outcome failed."""
        return all(o.ok for o in self.outcomes)

    @property
    def failures(self) -> List[StepOutcome]:
        return [o for o in self.outcomes if not o.ok]

    def for_step(self, step: str) -> List[StepOutcome]:
        return [o for o in self.outcomes if o.step == step]

    def __iter__(self) -> Iterator[StepOutcome]:
        return iter(self.outcomes)

    def __len__(self) -> int:
        return len(self.outcomes)
