from pathlib import Path

import pytest

from rigfit.data import Catalog, CatalogRepository


ROOT = Path(__file__).resolve().parents[1]


RAW_CATALOG = {
    "case": [
        {
            "id": "case-atx",
            "name": "Airflow ATX",
            "price": 90,
            "compatibility": ["atx", "micro-atx"],
            "maxGpuLength": 340,
            "maxCpuCoolerHeight": 160,
            "maxPsuLength": 180,
        },
        {
            "id": "case-itx",
            "name": "Compact ITX",
            "price": 120,
            "compatibility": ["mini-itx"],
            "maxGpuLength": 300,
            "maxCpuCoolerHeight": 60,
            "maxPsuLength": 130,
        },
        {
            "id": "case-unknown",
            "name": "Mystery Box",
            "price": 40,
        },
    ],
    "motherboard": [
        {
            "id": "mb-am5",
            "name": "B650 ATX",
            "price": 180,
            "socket": "AM5",
            "formFactor": "ATX",
            "ramSupport": "DDR5-6000+",
            "compatibility": ["Ryzen 7000"],
        },
        {
            "id": "mb-lga",
            "name": "Z790 ITX",
            "price": 300,
            "socket": "LGA1700",
            "formFactor": "Mini-ITX",
            "ramSupport": ["DDR5-7800"],
        },
        {
            "id": "mb-ddr4",
            "name": "B760M DDR4",
            "price": 110,
            "socket": "LGA1700",
            "formFactor": "Micro-ATX",
            "ramSupport": ["DDR4-3200"],
        },
    ],
    "cpu": [
        {"id": "cpu-am5", "name": "Ryzen 5 7600", "price": 180, "socket": "AM5", "generation": "Ryzen 7000", "tdp": 65},
        {"id": "cpu-lga", "name": "Core i7-14700K", "price": 390, "socket": "LGA1700", "generation": "14th Gen", "tdp": 253},
    ],
    "ram": [
        {"id": "ram-ddr5", "name": "DDR5 32GB", "price": 100, "type": "DDR5"},
        {"id": "ram-ddr4", "name": "DDR4 16GB", "price": 40, "type": "DDR4"},
    ],
    "gpu": [
        {"id": "gpu-short", "name": "RTX 4070 SUPER", "price": 580, "length": 267, "power": 220},
        {"id": "gpu-long", "name": "RTX 4090", "price": 1900, "length": 358, "power": 450},
    ],
    "storage": [
        {
            "id": "ssd",
            "name": "990 Pro",
            "price": 90,
            "storage": ["1TB", "2TB"],
            "pricesByOption": {"storage": {"1TB": 90, "2TB": 160}},
        }
    ],
    "psu": [
        {"id": "psu-850", "name": "RM850x", "price": 125, "wattage": 850, "length": 160},
        {"id": "psu-sfx", "name": "SF600", "price": 120, "wattage": 600, "length": 100},
    ],
    "cooling": [
        {"id": "cool-tower", "name": "NH-D15", "price": 100, "type": "Air", "height": 165, "tdpSupport": 250},
        {"id": "cool-low", "name": "NH-L9", "price": 50, "type": "Air", "height": 37, "tdpSupport": 95},
        {"id": "cool-aio", "name": "Galahad 360", "price": 130, "type": "Liquid", "height": 400, "tdpSupport": 300},
    ],
    "caseFans": [
        {"id": "fans", "name": "P12 5-pack", "price": 30},
    ],
    "keyboard": [
        {"id": "kb", "name": "K70", "price": 150},
    ],
    "mouse": [
        {"id": "mouse-a", "name": "G502", "price": 80},
        {"id": "mouse-b", "name": "Viper", "price": 60},
    ],
}


@pytest.fixture
def catalog() -> Catalog:
    return Catalog.from_raw(RAW_CATALOG)


@pytest.fixture
def sample_catalog() -> Catalog:
    return CatalogRepository(ROOT / "data" / "catalog.json").catalog
