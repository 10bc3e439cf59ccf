"""
Applier for roles, their permissions and the role-permission links.

Three strictly ordered phases:
1. Create the role; without its id nothing can be linked, so a failure here
   fails the instance. A role that already exists is addressed by its key.
2. Create every permission independently; existing ones are kept by key.
3. Link each permission resolved in phase 2 to the role, one call each.
"""

from typing import Any

from ..models.config import PermissionSpec, RoleSpec
from ..utils.management_api import response_id
from .base_applier import BaseApplier, StepTracker
from .context import ReconciliationContext
from .sequencer import ResourceKind

ROLE_ID = "role_id"
PERMISSION_IDS = "permission_ids"


def _payload(spec: RoleSpec | PermissionSpec) -> dict[str, Any]:
    body: dict[str, Any] = {"key": spec.key, "name": spec.name}
    if spec.description is not None:
        body["description"] = spec.description
    return body


class RoleApplier(BaseApplier[RoleSpec]):
    """Create the role and its permissions, then link them."""

    kind = ResourceKind.ROLE

    def identity(self, context: ReconciliationContext, spec: RoleSpec) -> str:
        return spec.key

    async def step_create(
        self,
        context: ReconciliationContext,
        spec: RoleSpec,
        state: dict[str, Any],
        tracker: StepTracker,
    ) -> bool:
        result = await tracker.attempt(
            "create role",
            context.client.call("POST", "/roles", _payload(spec)),
            conflict_ok=True,
        )
        if not result.ok:
            return False

        # Paths accept the key when the response carries no id
        state[ROLE_ID] = response_id(result.value, "role") or spec.key
        if result.already_exists:
            return True
        self.logger.info(
            f"Created role {spec.key}",
            resource_kind=self.kind.value,
            identity=spec.key,
            operation="create",
        )
        return True

    async def step_permissions(
        self,
        context: ReconciliationContext,
        spec: RoleSpec,
        state: dict[str, Any],
        tracker: StepTracker,
    ) -> bool:
        permission_ids: dict[str, str] = {}
        for permission in spec.permissions:
            step = f"create permission {permission.key}"
            result = await tracker.attempt(
                step,
                context.client.call("POST", "/permissions", _payload(permission)),
                conflict_ok=True,
            )
            if result.ok:
                permission_ids[permission.key] = (
                    response_id(result.value, "permission") or permission.key
                )

        state[PERMISSION_IDS] = permission_ids
        return True

    async def step_links(
        self,
        context: ReconciliationContext,
        spec: RoleSpec,
        state: dict[str, Any],
        tracker: StepTracker,
    ) -> bool:
        role_id = state[ROLE_ID]
        for key, permission_id in state[PERMISSION_IDS].items():
            await tracker.attempt(
                f"link permission {key}",
                context.client.call(
                    "PATCH",
                    f"/roles/{role_id}/permissions",
                    {"permissions": [{"id": permission_id}]},
                ),
                conflict_ok=True,
            )
        return True
