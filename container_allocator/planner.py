from __future__ import annotations

from decimal import Decimal
from typing import Iterable, Optional

import structlog

from container_allocator.catalog import build_capacity_catalog, classify_container_types, filter_by_refrigeration
from container_allocator.config import AllocatorConfig
from container_allocator.models import (
    COMBINED_LABEL,
    DRY_LABEL,
    REFRIGERATED_LABEL,
    AllocationReport,
    CategoryAllocation,
    ContainerType,
    Demand,
    LineItem,
)
from container_allocator.rounding import to_decimal
from container_allocator.search import find_optimal_containers

logger = structlog.get_logger(__name__)


def aggregate_demand(items: Iterable[LineItem]) -> tuple[Demand, Demand]:
    """Sum (volume, weight) per refrigeration class as (refrigerated, dry)."""
    totals = {
        True: [Decimal("0"), Decimal("0")],
        False: [Decimal("0"), Decimal("0")],
    }
    for item in items:
        if item.quantity <= 0:
            continue
        bucket = totals[bool(item.refrigerated)]
        bucket[0] += item.quantity * to_decimal(item.unit_volume)
        bucket[1] += item.quantity * to_decimal(item.unit_weight)
    refrigerated = Demand(volume=totals[True][0], weight=totals[True][1])
    dry = Demand(volume=totals[False][0], weight=totals[False][1])
    return refrigerated, dry


def has_refrigerated_items(items: Iterable[LineItem]) -> bool:
    return any(item.refrigerated and item.quantity > 0 for item in items)


def allocate_category(
    label: str,
    refrigerated: bool,
    required: Demand,
    container_types: Iterable[ContainerType],
    policy: str = "LEXICOGRAPHIC",
) -> CategoryAllocation:
    catalog = build_capacity_catalog(filter_by_refrigeration(container_types, refrigerated))
    result = find_optimal_containers(required.volume, required.weight, catalog, policy)
    return CategoryAllocation(label=label, refrigerated=refrigerated, required=required, result=result)


def absorption_note(dry: Demand, leftover: Demand) -> str:
    return (
        f"{DRY_LABEL} ({dry.volume} m3, {dry.weight} kg) fit in the remaining refrigerated capacity "
        f"({leftover.volume} m3, {leftover.weight} kg); no dry container needed."
    )


def _allocate_combined(
    refrigerated: Demand,
    dry: Demand,
    any_refrigerated: bool,
    container_types: list[ContainerType],
    policy: str,
) -> list[CategoryAllocation]:
    total = Demand(volume=refrigerated.volume + dry.volume, weight=refrigerated.weight + dry.weight)
    if not any_refrigerated:
        return [allocate_category(DRY_LABEL, False, total, container_types, policy)]
    return [allocate_category(COMBINED_LABEL, True, total, container_types, policy)]


def allocate_shipment(
    items: Iterable[LineItem],
    container_types: Iterable[ContainerType],
    policy: str = "LEXICOGRAPHIC",
    split_mode: str = "SPLIT",
) -> AllocationReport:
    """Allocate containers for a shipment.

    In SPLIT mode refrigerated demand is allocated first against refrigerated
    types; dry demand then uses whatever refrigerated capacity is left before
    any dry container is chosen. ALL_REFRIGERATED sends the whole order to
    refrigerated types as soon as one refrigerated item is present.
    """
    items = list(items)
    container_types = list(container_types)
    refrigerated, dry = aggregate_demand(items)
    report = AllocationReport(status="OK", refrigerated_demand=refrigerated, dry_demand=dry)
    if refrigerated.is_empty and dry.is_empty:
        logger.info("shipment_empty")
        report.status = "EMPTY"
        return report

    if split_mode == "ALL_REFRIGERATED":
        report.categories = _allocate_combined(
            refrigerated, dry, has_refrigerated_items(items), container_types, policy
        )
        return report

    leftover = Demand()
    if not refrigerated.is_empty:
        refrigerated_allocation = allocate_category(REFRIGERATED_LABEL, True, refrigerated, container_types, policy)
        report.categories.append(refrigerated_allocation)
        leftover = refrigerated_allocation.result.leftover

    residual = dry
    if not refrigerated.is_empty and not dry.is_empty:
        if dry.fits_within(leftover):
            logger.info("dry_demand_absorbed", volume=str(dry.volume), weight=str(dry.weight))
            report.absorbed_note = absorption_note(dry, leftover)
            return report
        residual = dry.reduced_by(leftover)

    if not residual.is_empty:
        report.categories.append(allocate_category(DRY_LABEL, False, residual, container_types, policy))
    return report


def allocate_from_records(
    items: Iterable[LineItem],
    records: Iterable[dict],
    config: Optional[AllocatorConfig] = None,
) -> AllocationReport:
    config = config or AllocatorConfig()
    container_types = classify_container_types(records, config)
    return allocate_shipment(items, container_types, policy=config.tie_break, split_mode=config.split_mode)
