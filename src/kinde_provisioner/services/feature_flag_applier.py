"""Applier for feature flags."""

from typing import Any

from ..models.config import FeatureFlagSpec
from .base_applier import BaseApplier, StepTracker
from .context import ReconciliationContext
from .sequencer import ResourceKind


class FeatureFlagApplier(BaseApplier[FeatureFlagSpec]):
    """Send the declared flag object as-is."""

    kind = ResourceKind.FEATURE_FLAG

    def identity(self, context: ReconciliationContext, spec: FeatureFlagSpec) -> str:
        return spec.identity

    async def step_create(
        self,
        context: ReconciliationContext,
        spec: FeatureFlagSpec,
        state: dict[str, Any],
        tracker: StepTracker,
    ) -> bool:
        result = await tracker.attempt(
            "create feature flag",
            context.client.call("POST", "/feature_flags", spec.payload()),
            conflict_ok=True,
        )
        if result.ok and not result.already_exists:
            self.logger.info(
                f"Created feature flag {spec.identity}",
                resource_kind=self.kind.value,
                identity=spec.identity,
                operation="create",
            )
        return result.ok
