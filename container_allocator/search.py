from __future__ import annotations

from decimal import Decimal
from typing import Optional, Sequence

import structlog

from container_allocator.models import NO_CONTAINER_AVAILABLE, AllocationResult, CapacityRecord
from container_allocator.rounding import ceil_ratio, round_volume, round_weight

logger = structlog.get_logger(__name__)


def waste_score(waste_vol: Decimal, waste_pds: Decimal, policy: str = "LEXICOGRAPHIC"):
    """Ordering key for covering candidates; smaller is better.

    LEXICOGRAPHIC compares volume waste first and weight waste only on a tie.
    SUM_WASTE compares the summed waste of both dimensions, then volume waste.
    """
    if policy == "SUM_WASTE":
        return (waste_vol + waste_pds, waste_vol)
    return (waste_vol, waste_pds)


def _covers(vol_cap: Decimal, pds_cap: Decimal, volume: Decimal, weight: Decimal) -> bool:
    return vol_cap >= volume and pds_cap >= weight


def _build_result(
    records: Sequence[CapacityRecord],
    volume: Decimal,
    weight: Decimal,
    strategy: str,
) -> AllocationResult:
    cap_vol = sum((r.vol_cap for r in records), Decimal("0"))
    cap_pds = sum((r.pds_cap for r in records), Decimal("0"))
    return AllocationResult(
        containers=[r.code for r in records],
        capacity_volume=cap_vol,
        capacity_weight=cap_pds,
        remaining_volume=round_volume(cap_vol - volume),
        remaining_weight=round_weight(cap_pds - weight),
        strategy=strategy,
    )


def find_single(
    volume: Decimal,
    weight: Decimal,
    catalog: Sequence[CapacityRecord],
    policy: str = "LEXICOGRAPHIC",
) -> Optional[CapacityRecord]:
    best = None
    for record in catalog:
        if not _covers(record.vol_cap, record.pds_cap, volume, weight):
            continue
        score = waste_score(record.vol_cap - volume, record.pds_cap - weight, policy)
        if best is None or score < best[0]:
            best = (score, record)
    return best[1] if best else None


def find_pair(
    volume: Decimal,
    weight: Decimal,
    catalog: Sequence[CapacityRecord],
    policy: str = "LEXICOGRAPHIC",
) -> Optional[tuple[CapacityRecord, CapacityRecord]]:
    best = None
    for i in range(len(catalog)):
        # j starts at i: two units of the same type are a valid pair
        for j in range(i, len(catalog)):
            first, second = catalog[i], catalog[j]
            vol_sum = first.vol_cap + second.vol_cap
            pds_sum = first.pds_cap + second.pds_cap
            if not _covers(vol_sum, pds_sum, volume, weight):
                continue
            score = waste_score(vol_sum - volume, pds_sum - weight, policy)
            if best is None or score < best[0]:
                best = (score, (first, second))
    return best[1] if best else None


def replicate_largest(volume: Decimal, weight: Decimal, catalog: Sequence[CapacityRecord]) -> AllocationResult:
    if not catalog:
        return AllocationResult(error=NO_CONTAINER_AVAILABLE)
    largest = catalog[-1]
    count_by_vol = ceil_ratio(volume, largest.vol_cap)
    count_by_pds = ceil_ratio(weight, largest.pds_cap)
    count = max(count_by_vol, count_by_pds)
    return _build_result([largest] * count, volume, weight, "replication")


def find_optimal_containers(
    volume: Decimal,
    weight: Decimal,
    catalog: Sequence[CapacityRecord],
    policy: str = "LEXICOGRAPHIC",
) -> AllocationResult:
    """Cover (volume, weight) with one container, else a pair, else N copies.

    ``catalog`` must come from ``build_capacity_catalog`` so that its last entry
    is the greatest-volume type.
    """
    single = find_single(volume, weight, catalog, policy)
    if single is not None:
        result = _build_result([single], volume, weight, "single")
    else:
        pair = find_pair(volume, weight, catalog, policy)
        if pair is not None:
            result = _build_result(list(pair), volume, weight, "pair")
        else:
            result = replicate_largest(volume, weight, catalog)
    if result.ok:
        logger.info(
            "allocation_selected",
            strategy=result.strategy,
            containers=result.containers,
            remaining_volume=str(result.remaining_volume),
            remaining_weight=str(result.remaining_weight),
        )
    else:
        logger.warning("allocation_unavailable", volume=str(volume), weight=str(weight), error=result.error)
    return result
