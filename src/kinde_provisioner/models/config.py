"""
Pydantic models for the declarative provisioning document.

This module defines the read-only resource specifications parsed from the
JSON document that describes one Kinde environment. The document uses
camelCase keys; the models expose snake_case attributes through aliases.
"""

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator


class _SpecModel(BaseModel):
    """Shared configuration: frozen and alias-aware; unknown keys are ignored."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class ApplicationSpec(_SpecModel):
    """Application with its redirect and logout URL sets."""

    key: str | None = Field(None, description="Application key (key-addressed API)")
    name: str | None = Field(None, description="Application name")
    type: str | None = Field(None, description="Application type, e.g. 'reg' or 'spa'")
    redirect_uris: tuple[str, ...] = Field(
        default=(),
        validation_alias=AliasChoices("redirectUris", "redirectUrls", "redirect_uris"),
        description="Allowed callback URLs",
    )
    logout_uris: tuple[str, ...] = Field(
        default=(),
        validation_alias=AliasChoices("logoutUris", "logoutUrls", "logout_uris"),
        description="Allowed logout redirect URLs",
    )


class EnvironmentVariableSpec(_SpecModel):
    """Environment variable stored in Kinde."""

    key: str = Field(..., min_length=1)
    value: str
    sensitive: bool = Field(False, description="Store the value as a secret")


class ScopeSpec(_SpecModel):
    """Scope declared on an API."""

    key: str = Field(..., min_length=1)
    description: str | None = None

    @model_validator(mode="before")
    @classmethod
    def accept_bare_key(cls, data: Any) -> Any:
        if isinstance(data, str):
            return {"key": data}
        return data


class ApiSpec(_SpecModel):
    """API resource with its scopes."""

    key: str | None = None
    name: str | None = None
    audience: str | None = None
    scopes: tuple[ScopeSpec, ...] = ()

    @model_validator(mode="after")
    def require_identity(self) -> "ApiSpec":
        if not (self.key or self.name):
            raise ValueError("api requires 'key' or 'name'")
        return self

    @property
    def identity(self) -> str:
        return self.key or self.name or ""


class FeatureFlagSpec(BaseModel):
    """
    Feature flag passed through to the API untouched.

    Any key the flag schema defines (name, key, type, value, description...)
    is kept and sent back as declared.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    key: str | None = None
    name: str | None = None

    @model_validator(mode="after")
    def require_identity(self) -> "FeatureFlagSpec":
        if not (self.key or self.name):
            raise ValueError("feature flag requires 'key' or 'name'")
        return self

    @property
    def identity(self) -> str:
        return self.key or self.name or ""

    def payload(self) -> dict[str, Any]:
        """The flag object exactly as declared in the document."""
        payload = {
            field: getattr(self, field)
            for field in ("key", "name")
            if getattr(self, field) is not None
        }
        payload.update(self.model_extra or {})
        return payload


class PermissionSpec(_SpecModel):
    """Permission created and linked to a role."""

    key: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    description: str | None = None


class RoleSpec(_SpecModel):
    """Role with the permissions it grants."""

    key: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    description: str | None = None
    permissions: tuple[PermissionSpec, ...] = ()


class ProvisioningConfig(_SpecModel):
    """
    The whole declarative document for one environment.

    Every top-level key is optional; a missing key means zero instances of
    that resource kind.
    """

    application: ApplicationSpec | None = None
    env_vars: tuple[EnvironmentVariableSpec, ...] = Field(
        default=(), validation_alias=AliasChoices("envVars", "env_vars")
    )
    apis: tuple[ApiSpec, ...] = ()
    feature_flags: tuple[FeatureFlagSpec, ...] = Field(
        default=(), validation_alias=AliasChoices("featureFlags", "feature_flags")
    )
    roles: tuple[RoleSpec, ...] = ()
