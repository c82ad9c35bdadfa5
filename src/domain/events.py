"""Domain Events

Published after the owning transaction commits. Consumers run in their own
failure domain. Events sharing an ordering_key are handled in publish order.
"""

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class EstimateCreated:
    estimate_id: str
    owner_id: str
    client_name: str
    project_name: str
    status: str
    total: Decimal

    @property
    def ordering_key(self) -> str:
        return self.estimate_id


@dataclass(frozen=True)
class EstimateStatusChanged:
    estimate_id: str
    owner_id: str
    status: str
    total: Decimal
    client_name: str = ""
    project_name: str = ""

    @property
    def ordering_key(self) -> str:
        return self.estimate_id
