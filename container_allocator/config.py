from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List

import yaml

TIE_BREAK_POLICIES = ("LEXICOGRAPHIC", "SUM_WASTE")
SPLIT_MODES = ("SPLIT", "ALL_REFRIGERATED")

DEFAULT_REFRIGERATED_CODES = frozenset({"TC20R", "TC40R", "TC40HCR"})
DEFAULT_CAPACITY_PROFILES = {
    "standard": "Capacite_plus_de_quatre",
    "compact": "Capacite_quatre_ou_moins",
}


class CatalogConfigError(ValueError):
    pass


@dataclass
class AllocatorConfig:
    refrigerated_codes: FrozenSet[str] = DEFAULT_REFRIGERATED_CODES
    code_field: str = "NAME "
    weight_field: str = "Poids_max"
    capacity_profiles: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_CAPACITY_PROFILES))
    volume_profile: str = "standard"
    tie_break: str = "LEXICOGRAPHIC"
    split_mode: str = "SPLIT"

    def __post_init__(self):
        self.refrigerated_codes = frozenset(str(code).strip() for code in self.refrigerated_codes if str(code).strip())
        if self.volume_profile not in self.capacity_profiles:
            raise CatalogConfigError(
                f"unknown volume_profile '{self.volume_profile}' (expected one of: {', '.join(self.capacity_profiles)})"
            )
        if self.tie_break not in TIE_BREAK_POLICIES:
            raise CatalogConfigError(f"unknown tie_break '{self.tie_break}' (expected one of: {', '.join(TIE_BREAK_POLICIES)})")
        if self.split_mode not in SPLIT_MODES:
            raise CatalogConfigError(f"unknown split_mode '{self.split_mode}' (expected one of: {', '.join(SPLIT_MODES)})")

    @property
    def volume_field(self) -> str:
        return self.capacity_profiles[self.volume_profile]

    def is_refrigerated(self, code: str) -> bool:
        return code.strip() in self.refrigerated_codes


def _safe_load(text: str):
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise CatalogConfigError(f"configuration could not be parsed: {exc}") from exc


def load_config(text: str, **overrides) -> AllocatorConfig:
    data = _safe_load(text) or {}
    if isinstance(data, list):
        # a bare catalog (e.g. a JSON record list) carries no settings
        data = {}
    if not isinstance(data, dict):
        raise CatalogConfigError("configuration must be a mapping")
    kwargs = {}
    if "refrigerated_codes" in data:
        codes = data["refrigerated_codes"] or []
        if isinstance(codes, str):
            codes = codes.split(",")
        kwargs["refrigerated_codes"] = frozenset(str(code) for code in codes)
    # field names are kept verbatim: raw catalogs carry trailing spaces ("NAME ")
    for key in ("code_field", "weight_field"):
        if data.get(key) is not None:
            kwargs[key] = str(data[key])
    for key in ("volume_profile", "tie_break", "split_mode"):
        if data.get(key) is not None:
            kwargs[key] = str(data[key]).strip()
    if data.get("capacity_profiles"):
        profiles = data["capacity_profiles"]
        if not isinstance(profiles, dict):
            raise CatalogConfigError("capacity_profiles must be a mapping of profile name to field name")
        kwargs["capacity_profiles"] = {str(name): str(column) for name, column in profiles.items()}
    kwargs.update({key: value for key, value in overrides.items() if value is not None})
    return AllocatorConfig(**kwargs)


def load_container_records(text: str) -> List[dict]:
    """Raw container records from YAML or JSON.

    Accepts either a bare list of records or a mapping with a ``containers``
    key, so one file can carry both the configuration and the catalog.
    """
    data = _safe_load(text) or []
    if isinstance(data, dict):
        data = data.get("containers") or []
    if not isinstance(data, list):
        raise CatalogConfigError("container catalog must be a list of records")
    return [record for record in data if isinstance(record, dict)]
