"""
Reconciliation outcome records.

An outcome is produced for every declared resource instance; the driver
collects them into a report. Outcome ordering carries no meaning.
"""

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum


class OutcomeStatus(str, Enum):
    """Result of applying one resource instance."""

    SUCCESS = "success"
    PARTIAL_FAILURE = "partial_failure"  # Parent applied, some children failed
    FAILURE = "failure"  # Parent could not be created or resolved


@dataclass(frozen=True)
class ReconciliationOutcome:
    """Per-instance result with the reason for every failed step."""

    kind: str
    identity: str
    status: OutcomeStatus
    errors: tuple[str, ...] = ()

    @property
    def label(self) -> str:
        return f"{self.kind}:{self.identity}"

    @property
    def ok(self) -> bool:
        return self.status is OutcomeStatus.SUCCESS


@dataclass
class ReconciliationReport:
    """Aggregated outcomes of one provisioning run."""

    outcomes: list[ReconciliationOutcome] = field(default_factory=list)

    def counts(self) -> Counter:
        return Counter(outcome.status for outcome in self.outcomes)

    @property
    def succeeded(self) -> int:
        return self.counts()[OutcomeStatus.SUCCESS]

    @property
    def partial(self) -> int:
        return self.counts()[OutcomeStatus.PARTIAL_FAILURE]

    @property
    def failed(self) -> int:
        return self.counts()[OutcomeStatus.FAILURE]

    @property
    def has_failures(self) -> bool:
        return any(not outcome.ok for outcome in self.outcomes)

    def by_label(self) -> dict[str, ReconciliationOutcome]:
        return {outcome.label: outcome for outcome in self.outcomes}
