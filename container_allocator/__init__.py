from container_allocator.catalog import build_capacity_catalog, classify_container_types, filter_by_refrigeration
from container_allocator.config import AllocatorConfig, CatalogConfigError, load_config, load_container_records
from container_allocator.io import (
    ShipmentInputError,
    apply_quantities,
    load_products_csv,
    load_products_json,
    normalize_line_items,
)
from container_allocator.planner import aggregate_demand, allocate_from_records, allocate_shipment
from container_allocator.reporting import build_allocation_rows, format_report_lines
from container_allocator.search import find_optimal_containers

__all__ = [
    "AllocatorConfig",
    "CatalogConfigError",
    "ShipmentInputError",
    "load_config",
    "load_container_records",
    "load_products_csv",
    "load_products_json",
    "normalize_line_items",
    "apply_quantities",
    "build_capacity_catalog",
    "classify_container_types",
    "filter_by_refrigeration",
    "find_optimal_containers",
    "aggregate_demand",
    "allocate_shipment",
    "allocate_from_records",
    "build_allocation_rows",
    "format_report_lines",
]
