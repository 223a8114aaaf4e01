import json

import pytest

from rigfit.data import Catalog, CatalogRepository, parse_component
from rigfit.schemas import CaseComponent, CpuComponent, PeripheralComponent


def test_sample_catalog_loads_every_category(sample_catalog):
    for category in ["case", "motherboard", "cpu", "ram", "gpu", "storage", "psu", "cooling", "caseFans"]:
        assert sample_catalog.by_category(category), category
    assert isinstance(sample_catalog.resolve("case", "case-lancool-216"), CaseComponent)


def test_category_tag_selects_record_type():
    assert isinstance(parse_component("cpu", {"id": "c", "socket": "AM5"}), CpuComponent)
    keyboard = parse_component("keyboard", {"id": "k", "price": 10})
    assert isinstance(keyboard, PeripheralComponent)
    assert keyboard.category == "keyboard"


def test_parse_component_rejects_unknown_category():
    with pytest.raises(ValueError):
        parse_component("toaster", {"id": "t"})


def test_camel_case_fields_map_to_attributes():
    case = parse_component(
        "case",
        {"id": "c", "maxGpuLength": "380", "maxCpuCoolerHeight": "tall", "maxPsuLength": 200},
    )
    assert case.max_gpu_length == 380
    assert case.max_cpu_cooler_height is None
    assert case.max_psu_length == 200


def test_unknown_fields_are_retained():
    cpu = parse_component("cpu", {"id": "c", "boostClock": 5.1})
    assert cpu.model_dump(by_alias=True)["boostClock"] == 5.1


def test_loose_values_never_fail_parsing():
    board = parse_component(
        "motherboard",
        {"id": "m", "socket": 1700, "ramSupport": ["DDR5", 6000], "price": True, "images": "/one.jpg"},
    )
    assert board.socket == "1700"
    assert board.ram_support == ["DDR5", "6000"]
    assert board.price is None
    assert board.images == ["/one.jpg"]


def test_from_raw_skips_unknown_categories_and_bad_entries():
    catalog = Catalog.from_raw(
        {
            "cpu": [{"id": "c1"}, {"name": "no id"}, "junk"],
            "toaster": [{"id": "t"}],
        }
    )
    assert [c.id for c in catalog.by_category("cpu")] == ["c1"]
    assert catalog.by_category("toaster") == []
    assert len(catalog) == 1


def test_resolve_handles_missing_ids(catalog):
    assert catalog.resolve("cpu", None) is None
    assert catalog.resolve("cpu", "nope") is None
    assert catalog.resolve("nope", "cpu-am5") is None


def test_by_category_returns_copy(catalog):
    catalog.by_category("cpu").clear()
    assert catalog.by_category("cpu")


def test_repository_rejects_non_object_files(tmp_path):
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps([{"id": "x"}]), encoding="utf-8")
    with pytest.raises(ValueError):
        CatalogRepository(path)


def test_repository_reload_picks_up_changes(tmp_path):
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps({"cpu": [{"id": "a"}]}), encoding="utf-8")
    repo = CatalogRepository(path)
    assert len(repo.catalog) == 1

    path.write_text(json.dumps({"cpu": [{"id": "a"}, {"id": "b"}]}), encoding="utf-8")
    repo.reload()
    assert [c.id for c in repo.catalog.by_category("cpu")] == ["a", "b"]
