from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Iterable, Optional

import structlog

from container_allocator.config import AllocatorConfig
from container_allocator.models import CapacityRecord, ContainerType
from container_allocator.rounding import to_decimal

logger = structlog.get_logger(__name__)


def parse_capacity(raw) -> Optional[Decimal]:
    """Return a finite capacity or None when the raw value is not a number."""
    if raw is None:
        return None
    try:
        value = to_decimal(raw)
    except (InvalidOperation, TypeError, ValueError):
        return None
    if not value.is_finite():
        return None
    return value


def classify_container_types(records: Iterable[dict], config: AllocatorConfig) -> list[ContainerType]:
    container_types: list[ContainerType] = []
    for record in records:
        code = str(record.get(config.code_field) or "").strip()
        container_types.append(
            ContainerType(
                code=code,
                weight_capacity=parse_capacity(record.get(config.weight_field)),
                volume_capacity=parse_capacity(record.get(config.volume_field)),
                refrigerated=config.is_refrigerated(code),
            )
        )
    return container_types


def filter_by_refrigeration(container_types: Iterable[ContainerType], refrigerated: bool) -> list[ContainerType]:
    return [ct for ct in container_types if ct.refrigerated == refrigerated]


def build_capacity_catalog(container_types: Iterable[ContainerType]) -> list[CapacityRecord]:
    """Typed capacity records sorted by volume, then weight, ascending.

    The last entry is the type with the greatest volume capacity (ties go to the
    greater weight capacity); the replication fallback depends on that order.
    Entries with a blank code or a missing, non-numeric or non-positive capacity
    are left out without raising.
    """
    catalog: list[CapacityRecord] = []
    for ct in container_types:
        code = (ct.code or "").strip()
        vol_cap = parse_capacity(ct.volume_capacity)
        pds_cap = parse_capacity(ct.weight_capacity)
        if not code or vol_cap is None or pds_cap is None:
            logger.debug("catalog_record_skipped", code=code, reason="invalid")
            continue
        if vol_cap <= 0 or pds_cap <= 0:
            logger.debug("catalog_record_skipped", code=code, reason="non_positive_capacity")
            continue
        catalog.append(CapacityRecord(code=code, vol_cap=vol_cap, pds_cap=pds_cap))
    catalog.sort(key=lambda c: (c.vol_cap, c.pds_cap))
    logger.debug("capacity_catalog_built", entries=len(catalog))
    return catalog


def build_catalog_from_records(
    records: Iterable[dict],
    config: AllocatorConfig,
    refrigerated: bool,
) -> list[CapacityRecord]:
    container_types = classify_container_types(records, config)
    return build_capacity_catalog(filter_by_refrigeration(container_types, refrigerated))
