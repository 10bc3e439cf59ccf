"""
Applier for the environment's application and its URL sets.

Creating an application that already exists is not a failure: a conflict,
or any create failure followed by a successful existence check, resolves to
the existing application and its URLs are still attached.
"""

from collections.abc import Callable
from typing import Any

from ..compatibility import EndpointCall
from ..models.config import ApplicationSpec
from .base_applier import BaseApplier, StepTracker
from .context import ReconciliationContext
from .sequencer import ResourceKind

APP_REF = "application_ref"


class ApplicationApplier(BaseApplier[ApplicationSpec]):
    """Create the application, then attach redirect and logout URLs."""

    kind = ResourceKind.APPLICATION

    def identity(self, context: ReconciliationContext, spec: ApplicationSpec) -> str:
        return context.adapter.application_identity(spec) or "<unnamed>"

    async def step_create(
        self,
        context: ReconciliationContext,
        spec: ApplicationSpec,
        state: dict[str, Any],
        tracker: StepTracker,
    ) -> bool:
        adapter = context.adapter
        request = adapter.create_application(spec)
        created = await tracker.attempt(
            "create application",
            context.client.call(request.method, request.path, request.body),
            record=False,
        )
        if created.ok:
            state[APP_REF] = adapter.application_ref(spec, created.value)
            self.logger.info(
                f"Created application {tracker.identity}",
                resource_kind=self.kind.value,
                identity=tracker.identity,
                operation="create",
            )
            return True

        error = created.error
        if error is not None and error.is_conflict:
            # Key-addressed generations can address the app without a lookup
            ref = adapter.application_ref(spec, None)
            if ref is None:
                ref = await self._lookup_ref(context, spec, tracker)
            state[APP_REF] = ref
            self.logger.info(
                f"Application {tracker.identity} already exists",
                resource_kind=self.kind.value,
                identity=tracker.identity,
                operation="create",
            )
            return True

        self.logger.warning(
            f"POST /applications failed for {tracker.identity}; checking existence: {error}",
            resource_kind=self.kind.value,
            identity=tracker.identity,
            operation="create",
        )
        lookup = adapter.application_lookup(spec)
        existing = await tracker.attempt(
            "look up application",
            context.client.call(lookup.method, lookup.path),
            record=False,
        )
        if existing.ok:
            state[APP_REF] = adapter.application_ref(spec, existing.value)
            self.logger.info(
                f"Application {tracker.identity} exists, continuing with URL sets",
                resource_kind=self.kind.value,
                identity=tracker.identity,
                operation="create",
            )
            return True

        tracker.record("create application", str(error))
        tracker.record("look up application", str(existing.error))
        return False

    async def _lookup_ref(
        self,
        context: ReconciliationContext,
        spec: ApplicationSpec,
        tracker: StepTracker,
    ) -> str | None:
        lookup = context.adapter.application_lookup(spec)
        existing = await tracker.attempt(
            "look up application",
            context.client.call(lookup.method, lookup.path),
            record=False,
        )
        if not existing.ok:
            return None
        return context.adapter.application_ref(spec, existing.value)

    async def _attach(
        self,
        context: ReconciliationContext,
        state: dict[str, Any],
        tracker: StepTracker,
        step: str,
        uris: tuple[str, ...],
        build_request: Callable[[str, list[str]], EndpointCall],
    ) -> bool:
        if not uris:
            return True
        ref = state.get(APP_REF)
        if ref is None:
            tracker.record(step, "application id is unknown, URLs not attached")
            return True
        request = build_request(ref, list(uris))
        result = await tracker.attempt(
            step, context.client.call(request.method, request.path, request.body)
        )
        if result.ok:
            self.logger.info(
                f"Updated {step.removeprefix('attach ')} for {tracker.identity}",
                resource_kind=self.kind.value,
                identity=tracker.identity,
                operation=step,
            )
        return True

    async def step_redirect_uris(
        self,
        context: ReconciliationContext,
        spec: ApplicationSpec,
        state: dict[str, Any],
        tracker: StepTracker,
    ) -> bool:
        return await self._attach(
            context,
            state,
            tracker,
            "attach redirect URIs",
            spec.redirect_uris,
            context.adapter.attach_redirect_uris,
        )

    async def step_logout_uris(
        self,
        context: ReconciliationContext,
        spec: ApplicationSpec,
        state: dict[str, Any],
        tracker: StepTracker,
    ) -> bool:
        return await self._attach(
            context,
            state,
            tracker,
            "attach logout URIs",
            spec.logout_uris,
            context.adapter.attach_logout_uris,
        )
