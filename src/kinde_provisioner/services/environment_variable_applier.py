"""Applier for environment variables."""

from typing import Any

from ..models.config import EnvironmentVariableSpec
from .base_applier import BaseApplier, StepTracker
from .context import ReconciliationContext
from .sequencer import ResourceKind


class EnvironmentVariableApplier(BaseApplier[EnvironmentVariableSpec]):
    """One create call per variable; ``sensitive`` maps to ``is_secret``."""

    kind = ResourceKind.ENVIRONMENT_VARIABLE

    def identity(
        self, context: ReconciliationContext, spec: EnvironmentVariableSpec
    ) -> str:
        return spec.key

    async def step_create(
        self,
        context: ReconciliationContext,
        spec: EnvironmentVariableSpec,
        state: dict[str, Any],
        tracker: StepTracker,
    ) -> bool:
        result = await tracker.attempt(
            "create environment variable",
            context.client.call(
                "POST",
                "/environment_variables",
                {"key": spec.key, "value": spec.value, "is_secret": spec.sensitive},
            ),
            conflict_ok=True,
        )
        if result.ok and not result.already_exists:
            self.logger.info(
                f"Created environment variable {spec.key}",
                resource_kind=self.kind.value,
                identity=spec.key,
                operation="create",
            )
        return result.ok
