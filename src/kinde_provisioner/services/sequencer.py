"""Dependency sequencing for resource kinds and for the steps inside one kind.

Two levels of ordering are declared here:

1. Cross-kind: which resource kinds must be fully applied before another
   kind starts. The Management API has no such dependencies between the
   five kinds, so every kind lands in the same concurrent wave.
2. Intra-kind: the steps needed to realize one instance of a composite kind
   (parent create before child attach/link). Appliers execute their steps in
   the phase order computed from these graphs and skip a step whose
   prerequisite did not complete.

EXAMPLE:
```
role:  create -> permissions -> links
api:   create -> scopes
application: create -> redirect_uris
             create -> logout_uris
```
"""

from __future__ import annotations

import logging
from collections.abc import Hashable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, TypeVar

from ..compatibility import ManagementApiAdapter
from ..constants import (
    KIND_API,
    KIND_APPLICATION,
    KIND_ENVIRONMENT_VARIABLE,
    KIND_FEATURE_FLAG,
    KIND_ROLE,
)
from ..models.config import ProvisioningConfig

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Hashable)

ROOT_STEP = "create"


class ResourceKind(str, Enum):
    """Category of remote object the provisioner can create."""

    APPLICATION = KIND_APPLICATION
    ENVIRONMENT_VARIABLE = KIND_ENVIRONMENT_VARIABLE
    API = KIND_API
    FEATURE_FLAG = KIND_FEATURE_FLAG
    ROLE = KIND_ROLE


class CyclicDependencyError(Exception):
    """Raised when a dependency cycle is detected."""


# Kinds that must finish before the key kind starts
KIND_DEPENDENCIES: dict[ResourceKind, tuple[ResourceKind, ...]] = {
    ResourceKind.APPLICATION: (),
    ResourceKind.ENVIRONMENT_VARIABLE: (),
    ResourceKind.API: (),
    ResourceKind.FEATURE_FLAG: (),
    ResourceKind.ROLE: (),
}

# Steps of one instance and the steps each depends on
STEP_DEPENDENCIES: dict[ResourceKind, dict[str, tuple[str, ...]]] = {
    ResourceKind.APPLICATION: {
        ROOT_STEP: (),
        "redirect_uris": (ROOT_STEP,),
        "logout_uris": (ROOT_STEP,),
    },
    ResourceKind.ENVIRONMENT_VARIABLE: {ROOT_STEP: ()},
    ResourceKind.API: {
        ROOT_STEP: (),
        "scopes": (ROOT_STEP,),
    },
    ResourceKind.FEATURE_FLAG: {ROOT_STEP: ()},
    ResourceKind.ROLE: {
        ROOT_STEP: (),
        "permissions": (ROOT_STEP,),
        "links": ("permissions",),
    },
}


def topological_layers(graph: Mapping[T, tuple[T, ...]]) -> list[list[T]]:
    """
    Group the nodes of a dependency graph into layers.

    Every node appears after all of its dependencies; nodes in the same layer
    are independent of each other. Declaration order is kept inside a layer.

    Raises:
        CyclicDependencyError: If the graph has a cycle
        KeyError: If a node depends on an undeclared node
    """
    for node, deps in graph.items():
        for dep in deps:
            if dep not in graph:
                raise KeyError(f"{node!r} depends on undeclared {dep!r}")

    remaining = dict(graph)
    placed: set[T] = set()
    layers: list[list[T]] = []

    while remaining:
        layer = [
            node
            for node, deps in remaining.items()
            if all(dep in placed for dep in deps)
        ]
        if not layer:
            raise CyclicDependencyError(
                f"Dependency cycle among: {', '.join(map(str, remaining))}"
            )
        layers.append(layer)
        placed.update(layer)
        for node in layer:
            del remaining[node]

    return layers


def kind_waves(
    dependencies: Mapping[ResourceKind, tuple[ResourceKind, ...]] = KIND_DEPENDENCIES,
) -> list[list[ResourceKind]]:
    """Resource kinds grouped into waves that may run concurrently."""
    return topological_layers(dependencies)


def step_phases(kind: ResourceKind) -> list[list[str]]:
    """Steps of one instance of ``kind`` grouped into ordered phases."""
    return topological_layers(STEP_DEPENDENCIES[kind])


@dataclass(frozen=True)
class WorkItem:
    """One declared resource instance to hand to its applier."""

    kind: ResourceKind
    identity: str
    spec: Any

    @property
    def label(self) -> str:
        return f"{self.kind.value}:{self.identity}"


@dataclass
class ReconciliationPlan:
    """Work items grouped into waves; items of one wave run concurrently."""

    waves: list[list[WorkItem]] = field(default_factory=list)

    @property
    def items(self) -> list[WorkItem]:
        return [item for wave in self.waves for item in wave]

    @property
    def is_empty(self) -> bool:
        return not self.items


def work_items(
    config: ProvisioningConfig, adapter: ManagementApiAdapter
) -> dict[ResourceKind, list[WorkItem]]:
    """Declared instances per kind; kinds absent from the document are omitted."""
    items: dict[ResourceKind, list[WorkItem]] = {}

    if config.application is not None:
        identity = adapter.application_identity(config.application) or "<unnamed>"
        items[ResourceKind.APPLICATION] = [
            WorkItem(ResourceKind.APPLICATION, identity, config.application)
        ]
    if config.env_vars:
        items[ResourceKind.ENVIRONMENT_VARIABLE] = [
            WorkItem(ResourceKind.ENVIRONMENT_VARIABLE, spec.key, spec)
            for spec in config.env_vars
        ]
    if config.apis:
        items[ResourceKind.API] = [
            WorkItem(ResourceKind.API, spec.identity, spec) for spec in config.apis
        ]
    if config.feature_flags:
        items[ResourceKind.FEATURE_FLAG] = [
            WorkItem(ResourceKind.FEATURE_FLAG, spec.identity, spec)
            for spec in config.feature_flags
        ]
    if config.roles:
        items[ResourceKind.ROLE] = [
            WorkItem(ResourceKind.ROLE, spec.key, spec) for spec in config.roles
        ]

    return items


def plan(
    config: ProvisioningConfig,
    adapter: ManagementApiAdapter,
    dependencies: Mapping[ResourceKind, tuple[ResourceKind, ...]] = KIND_DEPENDENCIES,
) -> ReconciliationPlan:
    """
    Build the reconciliation plan for a provisioning document.

    Args:
        config: The validated document
        adapter: Adapter for the target API generation (application identity)
        dependencies: Cross-kind dependency graph

    Returns:
        Plan whose waves hold every declared instance
    """
    items = work_items(config, adapter)
    waves = []
    for kinds in kind_waves(dependencies):
        wave = [item for kind in kinds for item in items.get(kind, [])]
        if wave:
            waves.append(wave)

    reconciliation_plan = ReconciliationPlan(waves=waves)
    logger.debug(
        f"Planned {len(reconciliation_plan.items)} resource(s) in {len(waves)} wave(s)"
    )
    return reconciliation_plan
