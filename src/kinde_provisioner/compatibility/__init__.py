import logging

from .adapters import IdAddressedAdapter, KeyAddressedAdapter
from .base import EndpointCall, ManagementApiAdapter

logger = logging.getLogger(__name__)

__all__ = [
    "EndpointCall",
    "IdAddressedAdapter",
    "KeyAddressedAdapter",
    "ManagementApiAdapter",
    "get_adapter",
]


def get_adapter(generation: str) -> ManagementApiAdapter:
    """
    Factory to get the adapter for a Management API generation.

    Args:
        generation: "key" or "id"

    Returns:
        ManagementApiAdapter instance
    """
    if generation == "id":
        logger.debug("Using id-addressed Management API adapter")
        return IdAddressedAdapter()
    if generation != "key":
        logger.warning(
            f"Unknown Management API generation '{generation}'. "
            "Defaulting to the key-addressed adapter."
        )
    return KeyAddressedAdapter()
