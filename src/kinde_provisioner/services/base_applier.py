"""
Base applier class providing the common pattern for applying one resource.

This module defines ``BaseApplier``, which walks the step phases declared by
the sequencer for its resource kind, and ``StepTracker``, the single
isolate-and-report wrapper every remote call goes through. Together they
guarantee that an applier returns an outcome and never raises.
"""

import time
from abc import ABC, abstractmethod
from collections.abc import Awaitable
from dataclasses import dataclass
from typing import Any, ClassVar, Generic, TypeVar

from ..errors import ApiError
from ..models.outcome import OutcomeStatus, ReconciliationOutcome
from ..observability.logging import ProvisionerLogger
from .context import ReconciliationContext
from .sequencer import ROOT_STEP, STEP_DEPENDENCIES, ResourceKind, step_phases

SpecT = TypeVar("SpecT")


@dataclass
class CallResult:
    """Result of one guarded remote call."""

    ok: bool
    value: Any = None
    error: ApiError | None = None
    already_exists: bool = False


class StepTracker:
    """
    Isolate-and-report wrapper for the remote calls of one resource instance.

    Failures are converted into reason strings kept on the tracker instead of
    propagating, so sibling calls and sibling instances keep running.
    """

    def __init__(self, kind: str, identity: str, logger: ProvisionerLogger):
        self.kind = kind
        self.identity = identity
        self.logger = logger
        self.errors: list[str] = []

    def record(self, step: str, reason: str) -> None:
        """Record a failed step that did not come from a raised ApiError."""
        self.errors.append(f"{step}: {reason}")
        self.logger.warning(
            f"{self.kind} {self.identity}: {step} failed: {reason}",
            resource_kind=self.kind,
            identity=self.identity,
            operation=step,
        )

    async def attempt(
        self,
        step: str,
        call: Awaitable[Any],
        *,
        conflict_ok: bool = False,
        record: bool = True,
    ) -> CallResult:
        """
        Await one remote call and capture its failure.

        Args:
            step: Human-readable step name, used as the error prefix
            call: The awaitable issuing the request
            conflict_ok: Treat an "already exists" failure as success
            record: Whether a failure is added to the instance errors;
                callers that resolve the failure themselves pass False

        Returns:
            CallResult describing the call
        """
        try:
            value = await call
        except ApiError as e:
            if conflict_ok and e.is_conflict:
                self.logger.info(
                    f"{self.kind} {self.identity}: {step} skipped, already exists",
                    resource_kind=self.kind,
                    identity=self.identity,
                    operation=step,
                )
                return CallResult(ok=True, error=e, already_exists=True)
            if record:
                self.errors.append(f"{step}: {e}")
                self.logger.log_step_failure(self.kind, self.identity, step, e)
            return CallResult(ok=False, error=e)

        return CallResult(ok=True, value=value)


class BaseApplier(ABC, Generic[SpecT]):
    """
    Base class for all resource appliers.

    Subclasses set ``kind`` and implement one ``step_<name>`` coroutine per
    step declared for that kind in ``STEP_DEPENDENCIES``. A step returns True
    when it completed, which unblocks the steps depending on it. A failed
    root step makes the instance a failure; any other recorded error makes
    it a partial failure.
    """

    kind: ClassVar[ResourceKind]

    def __init__(self) -> None:
        self.logger = ProvisionerLogger(self.__class__.__name__)
        self.phases = step_phases(self.kind)

    @abstractmethod
    def identity(self, context: ReconciliationContext, spec: SpecT) -> str:
        """Identity of the instance used in outcomes and logs."""

    async def apply(
        self, context: ReconciliationContext, spec: SpecT
    ) -> ReconciliationOutcome:
        """
        Apply one resource instance.

        Never raises: every failure is reported in the returned outcome.
        """
        identity = self.identity(context, spec)
        tracker = StepTracker(self.kind.value, identity, self.logger)
        state: dict[str, Any] = {}
        completed: set[str] = set()
        start_time = time.monotonic()

        self.logger.log_apply_start(self.kind.value, identity)

        try:
            for phase in self.phases:
                for step in phase:
                    prerequisites = STEP_DEPENDENCIES[self.kind][step]
                    if not all(dep in completed for dep in prerequisites):
                        continue
                    handler = getattr(self, f"step_{step}")
                    if await handler(context, spec, state, tracker):
                        completed.add(step)
        except Exception as e:
            tracker.errors.append(f"unexpected error: {type(e).__name__}: {e}")
            self.logger.error(
                f"Unexpected error applying {self.kind.value} {identity}: {e}",
                exc_info=True,
                resource_kind=self.kind.value,
                identity=identity,
                error_type=type(e).__name__,
            )

        if ROOT_STEP not in completed:
            status = OutcomeStatus.FAILURE
        elif tracker.errors:
            status = OutcomeStatus.PARTIAL_FAILURE
        else:
            status = OutcomeStatus.SUCCESS

        outcome = ReconciliationOutcome(
            kind=self.kind.value,
            identity=identity,
            status=status,
            errors=tuple(tracker.errors),
        )
        self.logger.log_apply_result(
            self.kind.value,
            identity,
            status.value,
            list(outcome.errors),
            time.monotonic() - start_time,
        )
        return outcome
