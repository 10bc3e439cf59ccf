"""
Constants used throughout the Kinde provisioner.

This module defines all constant values used by the provisioner including:
- Management API and token endpoint paths
- Resource kind labels
- Conflict detection markers
- Default configuration values
"""

# Management API layout
MANAGEMENT_API_PREFIX = "/api/v1"
TOKEN_ENDPOINT_PATH = "/oauth2/token"
CLIENT_CREDENTIALS_GRANT = "client_credentials"

# Resource kind labels used in outcomes and logs
KIND_APPLICATION = "application"
KIND_ENVIRONMENT_VARIABLE = "env_var"
KIND_API = "api"
KIND_FEATURE_FLAG = "feature_flag"
KIND_ROLE = "role"

# HTTP status signalling that a resource already exists
HTTP_CONFLICT = 409

# Lower-cased fragments of an error body that mean "already exists"
EXISTENCE_MARKERS = (
    "already exists",
    "already_exists",
)

# Default configuration values
DEFAULT_CONFIG_PATH = "./config/prod.json"
DEFAULT_HTTP_TIMEOUT_SECONDS = 30.0
DEFAULT_API_GENERATION = "key"

# Error body previews are truncated to keep log lines readable
RESPONSE_BODY_PREVIEW_LIMIT = 1024

# CLI exit codes
EXIT_RESOURCE_FAILURES = 2
