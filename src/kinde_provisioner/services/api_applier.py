"""
Applier for APIs and their scopes.

Scopes are only created once the parent API exists. Each scope is created
independently; a failing scope does not stop its siblings.
"""

from typing import Any

from ..models.config import ApiSpec, ScopeSpec
from .base_applier import BaseApplier, StepTracker
from .context import ReconciliationContext
from .sequencer import ResourceKind

API_REF = "api_ref"


def scope_payload(scope: ScopeSpec) -> dict[str, Any]:
    body: dict[str, Any] = {"key": scope.key}
    if scope.description is not None:
        body["description"] = scope.description
    return body


class ApiApplier(BaseApplier[ApiSpec]):
    """Create the API, then each declared scope under it."""

    kind = ResourceKind.API

    def identity(self, context: ReconciliationContext, spec: ApiSpec) -> str:
        return spec.identity

    async def step_create(
        self,
        context: ReconciliationContext,
        spec: ApiSpec,
        state: dict[str, Any],
        tracker: StepTracker,
    ) -> bool:
        request = context.adapter.create_api(spec)
        result = await tracker.attempt(
            "create API",
            context.client.call(request.method, request.path, request.body),
            conflict_ok=True,
        )
        if not result.ok:
            return False

        ref = context.adapter.api_ref(spec, result.value)
        if ref is None and spec.scopes:
            tracker.record("create API", "API id is unknown, scopes cannot be added")
            return False

        state[API_REF] = ref
        if not result.already_exists:
            self.logger.info(
                f"Created API {spec.identity}",
                resource_kind=self.kind.value,
                identity=spec.identity,
                operation="create",
            )
        return True

    async def step_scopes(
        self,
        context: ReconciliationContext,
        spec: ApiSpec,
        state: dict[str, Any],
        tracker: StepTracker,
    ) -> bool:
        ref = state[API_REF]
        for scope in spec.scopes:
            await tracker.attempt(
                f"create scope {scope.key}",
                context.client.call("POST", f"/apis/{ref}/scopes", scope_payload(scope)),
                conflict_ok=True,
            )
        return True
