"""
Models package - Pydantic models for type-safe provisioning.

Defines data models for:
- The declarative provisioning document and its resource specs
- Per-resource reconciliation outcomes and the run report
"""

from .config import (
    ApiSpec,
    ApplicationSpec,
    EnvironmentVariableSpec,
    FeatureFlagSpec,
    PermissionSpec,
    ProvisioningConfig,
    RoleSpec,
    ScopeSpec,
)
from .outcome import OutcomeStatus, ReconciliationOutcome, ReconciliationReport

__all__ = [
    "ApiSpec",
    "ApplicationSpec",
    "EnvironmentVariableSpec",
    "FeatureFlagSpec",
    "OutcomeStatus",
    "PermissionSpec",
    "ProvisioningConfig",
    "ReconciliationOutcome",
    "ReconciliationReport",
    "RoleSpec",
    "ScopeSpec",
]
