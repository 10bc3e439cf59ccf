"""Values shared read-only by every applier during one run."""

from dataclasses import dataclass

from ..compatibility import ManagementApiAdapter
from ..utils.management_api import ManagementApiClient


@dataclass(frozen=True)
class ReconciliationContext:
    """
    Everything an applier needs to talk to the Management API.

    Built once after the token exchange and passed explicitly to the driver
    and every applier; none of it is mutated during the run.
    """

    token: str
    client: ManagementApiClient
    adapter: ManagementApiAdapter
