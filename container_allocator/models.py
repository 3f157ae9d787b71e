from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional

ZERO = Decimal("0")

NO_CONTAINER_AVAILABLE = "No container type available in this category."
EMPTY_DEMAND_MESSAGE = "No quantity requested."

REFRIGERATED_LABEL = "Refrigerated products"
DRY_LABEL = "Non-refrigerated products"
COMBINED_LABEL = "Order containing at least one refrigerated product"


@dataclass
class LineItem:
    reference: str
    unit_weight: Decimal
    unit_volume: Decimal
    refrigerated: bool = False
    quantity: int = 0
    name: str = ""


@dataclass
class ContainerType:
    code: str
    weight_capacity: Optional[Decimal]
    volume_capacity: Optional[Decimal]
    refrigerated: bool = False


@dataclass(frozen=True)
class CapacityRecord:
    code: str
    vol_cap: Decimal
    pds_cap: Decimal


@dataclass(frozen=True)
class Demand:
    volume: Decimal = ZERO
    weight: Decimal = ZERO

    @property
    def is_empty(self) -> bool:
        return self.volume <= 0 and self.weight <= 0

    def fits_within(self, other: "Demand") -> bool:
        return self.volume <= other.volume and self.weight <= other.weight

    def reduced_by(self, other: "Demand") -> "Demand":
        # each dimension clamps on its own
        return Demand(
            volume=max(ZERO, self.volume - other.volume),
            weight=max(ZERO, self.weight - other.weight),
        )


@dataclass
class AllocationResult:
    containers: List[str] = field(default_factory=list)
    capacity_volume: Decimal = ZERO
    capacity_weight: Decimal = ZERO
    remaining_volume: Decimal = ZERO
    remaining_weight: Decimal = ZERO
    strategy: str = ""
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def leftover(self) -> Demand:
        if not self.ok:
            return Demand()
        return Demand(volume=self.remaining_volume, weight=self.remaining_weight)


@dataclass
class CategoryAllocation:
    label: str
    refrigerated: bool
    required: Demand
    result: AllocationResult


@dataclass
class AllocationReport:
    status: str
    refrigerated_demand: Demand
    dry_demand: Demand
    categories: List[CategoryAllocation] = field(default_factory=list)
    absorbed_note: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return self.status == "EMPTY"

    def category(self, label: str) -> Optional[CategoryAllocation]:
        return next((c for c in self.categories if c.label == label), None)
