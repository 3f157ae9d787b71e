from decimal import Decimal

from container_allocator.catalog import build_capacity_catalog
from container_allocator.models import NO_CONTAINER_AVAILABLE, CapacityRecord, ContainerType
from container_allocator.search import find_optimal_containers, find_pair, find_single, replicate_largest


def _record(code: str, vol: str, pds: str) -> CapacityRecord:
    return CapacityRecord(code=code, vol_cap=Decimal(vol), pds_cap=Decimal(pds))


def _catalog(*records: CapacityRecord) -> list[CapacityRecord]:
    return build_capacity_catalog(
        ContainerType(code=r.code, weight_capacity=r.pds_cap, volume_capacity=r.vol_cap) for r in records
    )


def test_single_prefers_smallest_volume_waste():
    catalog = _catalog(_record("A", "6", "300"), _record("B", "10", "1000"))

    result = find_optimal_containers(Decimal("5"), Decimal("200"), catalog)

    assert result.containers == ["A"]
    assert result.strategy == "single"
    assert result.remaining_volume == Decimal("1")
    assert result.remaining_weight == Decimal("100")


def test_single_breaks_volume_tie_on_weight_waste():
    catalog = _catalog(_record("HEAVY", "10", "900"), _record("LIGHT", "10", "500"))

    chosen = find_single(Decimal("8"), Decimal("400"), catalog)

    assert chosen.code == "LIGHT"


def test_single_is_preferred_over_a_tighter_pair():
    # two SMALL units would waste less volume than BIG, but a single always wins
    catalog = _catalog(_record("SMALL", "5", "1000"), _record("BIG", "20", "1000"))

    result = find_optimal_containers(Decimal("9"), Decimal("100"), catalog)

    assert result.containers == ["BIG"]
    assert result.strategy == "single"


def test_pair_search_when_no_single_covers():
    catalog = _catalog(_record("A", "6", "300"), _record("B", "10", "1000"))

    result = find_optimal_containers(Decimal("15"), Decimal("200"), catalog)

    assert result.strategy == "pair"
    assert result.containers == ["A", "B"]
    assert result.capacity_volume == Decimal("16")
    assert result.capacity_weight == Decimal("1300")
    assert result.remaining_volume == Decimal("1")
    assert result.remaining_weight == Decimal("1100")


def test_pair_search_includes_same_type_twice():
    catalog = _catalog(_record("A", "6", "300"), _record("B", "10", "1000"))

    pair = find_pair(Decimal("11"), Decimal("500"), catalog)

    assert [r.code for r in pair] == ["A", "A"]


def test_pair_minimizes_volume_then_weight_waste():
    catalog = _catalog(_record("A", "6", "300"), _record("B", "6", "200"), _record("C", "10", "1000"))

    pair = find_pair(Decimal("12"), Decimal("450"), catalog)

    # A+A, A+B and B+B all give 12 m3; B+B is too light and A+B wastes less weight than A+A
    assert sorted(r.code for r in pair) == ["A", "B"]


def test_replication_uses_largest_volume_type():
    catalog = _catalog(_record("SMALL", "4", "10"), _record("LARGE", "10", "20"))

    result = find_optimal_containers(Decimal("100"), Decimal("50"), catalog)

    assert result.strategy == "replication"
    assert result.containers == ["LARGE"] * 10
    assert result.capacity_volume == Decimal("100")
    assert result.capacity_weight == Decimal("200")
    assert result.remaining_volume == Decimal("0")
    assert result.remaining_weight == Decimal("150")


def test_replication_count_is_driven_by_weight_when_heavier():
    catalog = _catalog(_record("LARGE", "10", "20"))

    result = replicate_largest(Decimal("25"), Decimal("95"), catalog)

    assert len(result.containers) == 5
    assert result.capacity_weight >= Decimal("95")
    assert (len(result.containers) - 1) * Decimal("20") < Decimal("95")


def test_replication_takes_heavier_type_on_volume_tie():
    catalog = _catalog(_record("LIGHT", "10", "20"), _record("HEAVY", "10", "30"))

    result = replicate_largest(Decimal("50"), Decimal("10"), catalog)

    assert set(result.containers) == {"HEAVY"}


def test_empty_catalog_reports_error():
    result = find_optimal_containers(Decimal("5"), Decimal("5"), [])

    assert not result.ok
    assert result.error == NO_CONTAINER_AVAILABLE
    assert result.containers == []


def test_leftovers_are_rounded_and_never_negative():
    catalog = _catalog(_record("A", "1.1234567", "10.00049"))

    result = find_optimal_containers(Decimal("0.0000004"), Decimal("0.0001"), catalog)

    assert result.remaining_volume == Decimal("1.123456")
    assert result.remaining_weight == Decimal("10.000")
    assert result.remaining_volume >= 0 and result.remaining_weight >= 0


def test_sum_waste_policy_can_choose_differently():
    catalog = _catalog(_record("ROOMY", "6", "1000"), _record("TIGHT", "7", "210"))

    lexicographic = find_optimal_containers(Decimal("5"), Decimal("200"), catalog)
    summed = find_optimal_containers(Decimal("5"), Decimal("200"), catalog, policy="SUM_WASTE")

    assert lexicographic.containers == ["ROOMY"]
    assert summed.containers == ["TIGHT"]


def test_search_is_repeatable():
    catalog = _catalog(_record("A", "6", "300"), _record("B", "10", "1000"), _record("C", "3", "50"))

    first = find_optimal_containers(Decimal("27.5"), Decimal("2400"), catalog)
    second = find_optimal_containers(Decimal("27.5"), Decimal("2400"), catalog)

    assert first == second


def test_exact_single_tie_keeps_earlier_catalog_entry():
    catalog = _catalog(_record("FIRST", "10", "500"), _record("SECOND", "10", "500"))

    chosen = find_single(Decimal("8"), Decimal("400"), catalog)

    assert [r.code for r in catalog] == ["FIRST", "SECOND"]
    assert chosen.code == "FIRST"


def test_exact_pair_tie_keeps_earlier_catalog_pair():
    catalog = _catalog(_record("FIRST", "6", "300"), _record("SECOND", "6", "300"))

    pair = find_pair(Decimal("11"), Decimal("500"), catalog)

    # FIRST+FIRST, FIRST+SECOND and SECOND+SECOND waste the same; i <= j order reaches FIRST+FIRST first
    assert [r.code for r in pair] == ["FIRST", "FIRST"]
