import pytest

from container_allocator.config import AllocatorConfig, CatalogConfigError, load_config, load_container_records

CONFIG_YAML = """
refrigerated_codes: [TC20R, " TC40HCR "]
tie_break: SUM_WASTE
split_mode: ALL_REFRIGERATED
containers:
  - {"NAME ": TC20R, Poids_max: 27400, Capacite_plus_de_quatre: 28.3}
  - {"NAME ": TC40, Poids_max: 26700, Capacite_plus_de_quatre: 67.7}
"""


def test_load_config_reads_settings():
    config = load_config(CONFIG_YAML)

    assert config.refrigerated_codes == frozenset({"TC20R", "TC40HCR"})
    assert config.tie_break == "SUM_WASTE"
    assert config.split_mode == "ALL_REFRIGERATED"
    assert config.code_field == "NAME "
    assert config.volume_field == "Capacite_plus_de_quatre"
    assert config.is_refrigerated(" TC40HCR")


def test_overrides_take_precedence():
    config = load_config(CONFIG_YAML, tie_break="LEXICOGRAPHIC", split_mode=None)

    assert config.tie_break == "LEXICOGRAPHIC"
    assert config.split_mode == "ALL_REFRIGERATED"


def test_refrigerated_codes_accept_comma_separated_text():
    config = load_config("refrigerated_codes: 'TC20R, TC40R'")

    assert config.refrigerated_codes == frozenset({"TC20R", "TC40R"})


def test_empty_config_uses_defaults():
    config = load_config("")

    assert config == AllocatorConfig()


def test_unknown_policy_is_rejected():
    with pytest.raises(CatalogConfigError):
        load_config("tie_break: CHEAPEST")
    with pytest.raises(CatalogConfigError):
        AllocatorConfig(volume_profile="missing")


def test_container_records_from_mapping_or_json_list():
    from_mapping = load_container_records(CONFIG_YAML)
    from_json = load_container_records('[{"NAME ": "TC20", "Poids_max": "28200", "Capacite_plus_de_quatre": "33.2"}]')

    assert [r["NAME "] for r in from_mapping] == ["TC20R", "TC40"]
    assert from_json[0]["Poids_max"] == "28200"


def test_broken_yaml_raises_config_error():
    with pytest.raises(CatalogConfigError):
        load_container_records("containers: [unclosed")


def test_bare_json_catalog_loads_with_default_settings():
    content = '[{"NAME ": "TC20", "Poids_max": 28200, "Capacite_plus_de_quatre": 33.2}]'

    config = load_config(content, tie_break="SUM_WASTE")
    records = load_container_records(content)

    assert config == AllocatorConfig(tie_break="SUM_WASTE")
    assert [r["NAME "] for r in records] == ["TC20"]


def test_scalar_config_is_rejected():
    with pytest.raises(CatalogConfigError):
        load_config("just some text")
