from __future__ import annotations

from collections import Counter
from decimal import Decimal

import pandas as pd

from container_allocator.models import EMPTY_DEMAND_MESSAGE, AllocationReport, CategoryAllocation
from container_allocator.rounding import round_volume, round_weight

REPORT_COLUMNS = [
    "label",
    "containers",
    "container_count",
    "required_volume_m3",
    "required_weight_kg",
    "capacity_volume_m3",
    "capacity_weight_kg",
    "remaining_volume_m3",
    "remaining_weight_kg",
    "strategy",
    "error",
]


def format_volume(value: Decimal) -> str:
    return f"{round_volume(value):,.6f}"


def format_weight(value: Decimal) -> str:
    return f"{round_weight(value):,.3f}"


def join_codes(codes: list[str]) -> str:
    return " + ".join(codes)


def build_allocation_rows(report: AllocationReport) -> pd.DataFrame:
    rows = []
    for category in report.categories:
        result = category.result
        rows.append(
            {
                "label": category.label,
                "containers": join_codes(result.containers),
                "container_count": len(result.containers),
                "required_volume_m3": category.required.volume,
                "required_weight_kg": category.required.weight,
                "capacity_volume_m3": result.capacity_volume,
                "capacity_weight_kg": result.capacity_weight,
                "remaining_volume_m3": result.remaining_volume,
                "remaining_weight_kg": result.remaining_weight,
                "strategy": result.strategy,
                "error": result.error or "",
            }
        )
    return pd.DataFrame(rows, columns=REPORT_COLUMNS)


def summarize_containers(report: AllocationReport) -> Counter:
    return Counter(code for category in report.categories for code in category.result.containers)


def _category_lines(category: CategoryAllocation) -> list[str]:
    lines = [f"{category.label}:"]
    result = category.result
    if result.error:
        lines.append(f"  ! {result.error}")
        return lines
    lines.append(f"  Selected container(s): {join_codes(result.containers)}")
    lines.append(
        f"  Total capacity: {format_volume(result.capacity_volume)} m3 and {format_weight(result.capacity_weight)} kg"
    )
    lines.append(
        f"  Required: {format_volume(category.required.volume)} m3 and {format_weight(category.required.weight)} kg"
    )
    lines.append(
        f"  Remaining: {format_volume(result.remaining_volume)} m3 and {format_weight(result.remaining_weight)} kg"
    )
    return lines


def format_report_lines(report: AllocationReport) -> list[str]:
    if report.is_empty:
        return [EMPTY_DEMAND_MESSAGE]
    lines: list[str] = []
    for category in report.categories:
        lines.extend(_category_lines(category))
        if category.refrigerated and report.absorbed_note:
            lines.append(f"  {report.absorbed_note}")
    summary = summarize_containers(report)
    if summary:
        lines.append("Containers: " + ", ".join(f"{code} x {count}" for code, count in summary.items()))
    return lines
