from __future__ import annotations

import io
from dataclasses import replace
from decimal import InvalidOperation
from typing import Iterable, Mapping

import pandas as pd

from container_allocator.models import LineItem
from container_allocator.rounding import to_decimal

REQUIRED_COLUMNS = [
    "reference",
    "unit_weight",
    "unit_volume",
]

OPTIONAL_COLUMNS = {
    "name": "",
    "refrigerated": False,
    "quantity": 0,
}

COLUMN_ALIASES = {
    "reference": "reference",
    "référence": "reference",
    "ref": "reference",
    "sku": "reference",
    "nom": "name",
    "name": "name",
    "poidsunité": "unit_weight",
    "poidsunite": "unit_weight",
    "unitweight": "unit_weight",
    "weight": "unit_weight",
    "weightkg": "unit_weight",
    "volumeunité": "unit_volume",
    "volumeunite": "unit_volume",
    "unitvolume": "unit_volume",
    "volume": "unit_volume",
    "volumem3": "unit_volume",
    "refrigerer": "refrigerated",
    "réfrigérer": "refrigerated",
    "refrigerated": "refrigerated",
    "reefer": "refrigerated",
    "quantité": "quantity",
    "quantite": "quantity",
    "quantity": "quantity",
    "qty": "quantity",
}


class ShipmentInputError(ValueError):
    pass


def _normalize_column_name(name: str) -> str:
    return "".join(ch for ch in str(name).strip() if ch.isalnum()).lower()


def _apply_column_aliases(df: pd.DataFrame) -> pd.DataFrame:
    rename_map: dict[str, str] = {}
    for col in df.columns:
        normalized = _normalize_column_name(col)
        target = COLUMN_ALIASES.get(normalized)
        if target:
            rename_map[col] = target
    if rename_map:
        df = df.rename(columns=rename_map)
    return df


def _is_blank(value) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and pd.isna(value):
        return True
    return isinstance(value, str) and not value.strip()


def _parse_bool(value, default: bool) -> bool:
    if _is_blank(value):
        return default
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in {"1", "1.0", "true", "yes", "y", "oui", "o"}:
        return True
    if text in {"0", "0.0", "false", "no", "n", "non"}:
        return False
    return default


def load_products_csv(content: str) -> pd.DataFrame:
    data = pd.read_csv(io.StringIO(content))
    return _apply_column_aliases(data)


def load_products_json(content: str) -> pd.DataFrame:
    data = pd.read_json(io.StringIO(content), orient="records", dtype=False)
    return _apply_column_aliases(data)


def ensure_columns(df: pd.DataFrame) -> pd.DataFrame:
    missing = [col for col in REQUIRED_COLUMNS if col not in df.columns]
    if missing:
        raise ShipmentInputError(f"missing required columns: {', '.join(missing)}")
    for col, default in OPTIONAL_COLUMNS.items():
        if col not in df.columns:
            df[col] = default
    return df


def _parse_quantity(raw, row_no: int) -> int:
    if _is_blank(raw):
        return 0
    try:
        return int(to_decimal(raw))
    except (InvalidOperation, OverflowError, TypeError, ValueError) as exc:
        raise ShipmentInputError(f"quantity value '{raw}' is not an integer (row {row_no})") from exc


def normalize_line_items(df: pd.DataFrame) -> list[LineItem]:
    df = ensure_columns(df.copy())
    items: list[LineItem] = []
    for position, (_, row) in enumerate(df.iterrows()):
        row_no = position + 1

        def parse_unit_field(field_name: str):
            raw = row.get(field_name)
            try:
                value = to_decimal(raw)
            except (InvalidOperation, TypeError, ValueError) as exc:
                raise ShipmentInputError(f"{field_name} value '{raw}' is not a number (row {row_no})") from exc
            if not value.is_finite():
                raise ShipmentInputError(f"{field_name} value '{raw}' is not a number (row {row_no})")
            if value < 0:
                raise ShipmentInputError(f"{field_name} must not be negative (row {row_no})")
            return value

        reference = row.get("reference")
        if _is_blank(reference):
            raise ShipmentInputError(f"reference is empty (row {row_no})")
        name = row.get("name")
        items.append(
            LineItem(
                reference=str(reference).strip(),
                name="" if _is_blank(name) else str(name).strip(),
                unit_weight=parse_unit_field("unit_weight"),
                unit_volume=parse_unit_field("unit_volume"),
                refrigerated=_parse_bool(row.get("refrigerated"), False),
                quantity=_parse_quantity(row.get("quantity"), row_no),
            )
        )
    return items


def apply_quantities(items: Iterable[LineItem], quantities: Mapping[str, int]) -> list[LineItem]:
    """Copies of ``items`` carrying the quantities typed into the order table.

    References absent from ``quantities`` get 0.
    """
    updated: list[LineItem] = []
    for position, item in enumerate(items):
        raw = quantities.get(item.reference)
        updated.append(replace(item, quantity=_parse_quantity(raw, position + 1)))
    return updated
