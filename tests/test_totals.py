import pytest

from rigfit.builder import build_total, estimate_power_draw, is_build_complete, missing_categories
from rigfit.builder.variants import resolve_variant
from rigfit.data import Catalog
from rigfit.schemas import PeripheralSelection, Selection
from rigfit.variant_store import VariantSelectionStore


FULL_SELECTION = Selection(
    case="case-atx",
    motherboard="mb-am5",
    cpu="cpu-am5",
    ram="ram-ddr5",
    gpu="gpu-short",
    storage="ssd",
    psu="psu-850",
    cooling="cool-low",
    caseFans="fans",
)


def test_total_sums_base_prices(catalog):
    total = build_total(FULL_SELECTION, PeripheralSelection(), catalog, VariantSelectionStore())
    assert total == pytest.approx(90 + 180 + 180 + 100 + 580 + 90 + 125 + 50 + 30)


def test_total_uses_variant_prices(catalog):
    store = VariantSelectionStore()
    store.set_option("ssd", "storage", "2TB")
    base = build_total(FULL_SELECTION, PeripheralSelection(), catalog, VariantSelectionStore())
    total = build_total(FULL_SELECTION, PeripheralSelection(), catalog, store)
    assert total == pytest.approx(base + 70)


def test_total_adds_peripherals(catalog):
    peripherals = PeripheralSelection(keyboard=["kb"], mouse=["mouse-a", "mouse-b"])
    total = build_total(Selection(), peripherals, catalog, VariantSelectionStore())
    assert total == pytest.approx(150 + 80 + 60)


def test_total_ignores_dangling_ids(catalog):
    selection = Selection(cpu="cpu-am5", gpu="gpu-missing")
    peripherals = PeripheralSelection(mouse=["mouse-missing"])
    assert build_total(selection, peripherals, catalog, VariantSelectionStore()) == pytest.approx(180)


def test_removing_component_subtracts_its_resolved_price(catalog):
    store = VariantSelectionStore({"ssd": {"storage": "2TB"}})
    peripherals = PeripheralSelection(keyboard=["kb"])
    before = build_total(FULL_SELECTION, peripherals, catalog, store)
    after = build_total(FULL_SELECTION.with_choice("storage", None), peripherals, catalog, store)

    ssd_price = resolve_variant(catalog.resolve("storage", "ssd"), store.get("ssd")).price
    assert ssd_price == 160
    assert before - after == pytest.approx(ssd_price)


def test_total_is_deterministic(catalog):
    store = VariantSelectionStore({"ssd": {"storage": "2TB"}})
    args = (FULL_SELECTION, PeripheralSelection(mouse=["mouse-a"]), catalog, store)
    assert build_total(*args) == build_total(*args)


def test_components_without_price_count_as_zero():
    catalog = Catalog.from_raw({"cpu": [{"id": "c"}], "gpu": [{"id": "g", "price": "n/a"}]})
    total = build_total(Selection(cpu="c", gpu="g"), PeripheralSelection(), catalog, VariantSelectionStore())
    assert total == 0


def test_variant_store_returns_empty_for_unknown_ids():
    store = VariantSelectionStore()
    assert store.get("nothing") == {}
    assert "nothing" not in store


def test_variant_store_survives_selection_changes(catalog):
    store = VariantSelectionStore()
    store.set_option("ssd", "storage", "2TB")

    selection = Selection(storage="ssd").with_choice("storage", None)
    assert build_total(selection, PeripheralSelection(), catalog, store) == 0

    selection = selection.with_choice("storage", "ssd")
    assert build_total(selection, PeripheralSelection(), catalog, store) == pytest.approx(160)


def test_variant_store_get_returns_copy():
    store = VariantSelectionStore()
    store.set_option("ssd", "storage", "2TB")
    store.get("ssd")["storage"] = "1TB"
    assert store.get("ssd") == {"storage": "2TB"}


def test_estimate_power_draw_from_parts(catalog):
    assert estimate_power_draw(Selection(cpu="cpu-am5", gpu="gpu-short"), catalog) == 65 + 220 + 150


def test_estimate_power_draw_infers_from_names():
    catalog = Catalog.from_raw(
        {
            "cpu": [{"id": "c", "name": "Intel Core i9-14900K"}, {"id": "c8", "name": "Generic 8-core"}],
            "gpu": [{"id": "g", "name": "Radeon RX 7900 XTX"}, {"id": "g2", "name": "Unknown card", "powerDraw": 180}],
        }
    )
    assert estimate_power_draw(Selection(cpu="c", gpu="g"), catalog) == 150 + 355 + 150
    assert estimate_power_draw(Selection(cpu="c8", gpu="g2"), catalog) == 95 + 180 + 150


def test_core_count_inference_needs_cores_in_name():
    catalog = Catalog.from_raw(
        {
            "cpu": [
                {"id": "i5", "name": "Intel Core i5-12400"},
                {"id": "c16", "name": "Workstation 16 cores"},
                {"id": "c8", "name": "Budget chip, 8 cores", "cores": 4},
                {"id": "cn", "name": "Mystery cores", "cores": 12},
            ]
        }
    )
    assert estimate_power_draw(Selection(cpu="i5"), catalog) == 95 + 150
    assert estimate_power_draw(Selection(cpu="c16"), catalog) == 170 + 150
    assert estimate_power_draw(Selection(cpu="c8"), catalog) == 100 + 150
    # 名称中没有核心数时使用 cores 字段
    assert estimate_power_draw(Selection(cpu="cn"), catalog) == 120 + 150


def test_zero_gpu_power_falls_back_to_name():
    catalog = Catalog.from_raw(
        {
            "gpu": [
                {"id": "g0", "name": "GeForce RTX 4070", "power": 0, "powerConsumption": 250},
                {"id": "g1", "name": "Unknown card", "powerConsumption": 250},
            ]
        }
    )
    assert estimate_power_draw(Selection(gpu="g0"), catalog) == 200 + 150
    assert estimate_power_draw(Selection(gpu="g1"), catalog) == 250 + 150


def test_estimate_power_draw_without_parts(catalog):
    assert estimate_power_draw(Selection(), catalog) == 150


def test_build_completeness():
    assert is_build_complete(FULL_SELECTION)
    # 显卡可选
    assert is_build_complete(FULL_SELECTION.with_choice("gpu", None))
    partial = FULL_SELECTION.with_choice("psu", None).with_choice("ram", None)
    assert not is_build_complete(partial)
    assert missing_categories(partial) == ["ram", "psu"]


def test_with_choice_rejects_unknown_category():
    with pytest.raises(ValueError):
        Selection().with_choice("keyboard", "kb")
