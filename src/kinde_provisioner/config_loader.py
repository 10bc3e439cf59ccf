"""
Loading of the declarative provisioning document.

The document is parsed and validated into an immutable ``ProvisioningConfig``
before any network call is made; every problem found here is fatal.
"""

import logging
from pathlib import Path

from pydantic import ValidationError

from .compatibility import ManagementApiAdapter
from .errors import ConfigurationError
from .models.config import ProvisioningConfig

logger = logging.getLogger(__name__)


def _format_validation_error(error: ValidationError) -> str:
    parts = []
    for detail in error.errors():
        location = ".".join(str(item) for item in detail["loc"]) or "<root>"
        parts.append(f"{location}: {detail['msg']}")
    return "; ".join(parts)


def parse_config(raw: str | bytes, source: str = "<string>") -> ProvisioningConfig:
    """
    Parse a JSON provisioning document.

    Args:
        raw: JSON text
        source: Where the text came from, for error messages

    Returns:
        Validated configuration

    Raises:
        ConfigurationError: If the text is not valid JSON or violates the schema
    """
    try:
        return ProvisioningConfig.model_validate_json(raw)
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid provisioning document {source}: {_format_validation_error(e)}",
            user_action="Fix the listed fields in the configuration document",
        ) from e


def load_config(path: str | Path) -> ProvisioningConfig:
    """
    Read and validate the provisioning document at ``path``.

    Raises:
        ConfigurationError: If the file cannot be read or is invalid
    """
    config_path = Path(path)
    try:
        raw = config_path.read_bytes()
    except OSError as e:
        raise ConfigurationError(
            f"Cannot read configuration document {config_path}: {e.strerror or e}",
            field="CONFIG_PATH",
            user_action="Point CONFIG_PATH (or --config) at an existing JSON file",
        ) from e

    config = parse_config(raw, source=str(config_path))
    logger.debug(f"Loaded provisioning document {config_path}")
    return config


def check_config(config: ProvisioningConfig, adapter: ManagementApiAdapter) -> None:
    """
    Validate the parts of the document that depend on the API generation.

    Raises:
        ConfigurationError: If the application cannot be identified
    """
    if config.application is None:
        return
    message = adapter.validate_application(config.application)
    if message:
        raise ConfigurationError(
            message, user_action="Add the missing field to the 'application' object"
        )
