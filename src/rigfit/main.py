from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from .builder import (
    build_total,
    detect_options,
    eligible,
    estimate_power_draw,
    evaluate,
    explain_ineligible,
    has_multiple_prices,
    is_build_complete,
    lowest_price,
    report,
    resolve_variant,
)
from .data import CatalogRepository
from .data.repository import KNOWN_CATEGORIES
from .schemas import (
    CompatibilityRequest,
    EligibleRequest,
    PeripheralRequest,
    ResolveRequest,
    ResolveResponse,
    SelectRequest,
    TotalRequest,
    TotalResponse,
    VariantRequest,
)
from .service import BuildService
from .variant_store import VariantSelectionStore

ROOT = Path(__file__).resolve().parents[2]

load_dotenv(ROOT / ".env")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_str(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip()


CATALOG_PATH = Path(_env_str("RIGFIT_CATALOG_PATH", str(ROOT / "data" / "catalog.json")))
LOG_LEVEL = _env_str("RIGFIT_LOG_LEVEL", "INFO").upper()
CORS_ORIGINS = [o.strip() for o in _env_str("RIGFIT_CORS_ORIGINS", "*").split(",") if o.strip()]
SESSION_TTL_SECONDS = _env_int("RIGFIT_SESSION_TTL_SECONDS", 604800)
SESSION_CLEANUP_INTERVAL_SECONDS = _env_int("RIGFIT_SESSION_CLEANUP_INTERVAL_SECONDS", 3600)

logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

repo = CatalogRepository(CATALOG_PATH)
catalog = repo.catalog
print(f"[rigfit] Catalog loaded: {len(catalog)} components")

service = BuildService(
    catalog,
    session_ttl_seconds=SESSION_TTL_SECONDS,
    session_cleanup_interval_seconds=SESSION_CLEANUP_INTERVAL_SECONDS,
)

app = FastAPI(title="rigfit")
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _require_category(category: str) -> None:
    if category not in KNOWN_CATEGORIES:
        raise HTTPException(status_code=404, detail=f"unknown category: {category}")


@app.get("/api/catalog")
def list_catalog():
    return {
        category: [c.model_dump(by_alias=True) for c in catalog.by_category(category)]
        for category in catalog.categories()
    }


@app.get("/api/catalog/{category}")
def list_category(category: str):
    _require_category(category)
    return [c.model_dump(by_alias=True) for c in catalog.by_category(category)]


@app.post("/api/eligible")
def list_eligible(payload: EligibleRequest):
    _require_category(payload.category)
    return {
        "eligible": [
            c.model_dump(by_alias=True)
            for c in eligible(catalog, payload.category, payload.selection)
        ],
        "ineligible": [
            d.model_dump() for d in explain_ineligible(catalog, payload.category, payload.selection)
        ],
    }


@app.post("/api/compatibility")
def check_compatibility(payload: CompatibilityRequest):
    grouped = report(evaluate(payload.selection, catalog.resolve))
    return grouped.model_dump(by_alias=True)


@app.post("/api/resolve")
def resolve(payload: ResolveRequest):
    _require_category(payload.category)
    component = catalog.resolve(payload.category, payload.component_id)
    if component is None:
        raise HTTPException(status_code=404, detail="component not found")
    return ResolveResponse(
        resolved=resolve_variant(component, payload.variant),
        options=detect_options(component),
        has_multiple_prices=has_multiple_prices(component),
        lowest_price=lowest_price(component),
    ).model_dump()


@app.post("/api/total")
def total(payload: TotalRequest):
    return TotalResponse(
        total=build_total(
            payload.selection,
            payload.peripherals,
            catalog,
            VariantSelectionStore(payload.variants),
        ),
        estimated_power=estimate_power_draw(payload.selection, catalog),
        complete=is_build_complete(payload.selection),
    ).model_dump()


@app.get("/api/sessions/{session_id}")
def session_snapshot(session_id: str):
    return service.snapshot(session_id).model_dump(by_alias=True)


@app.post("/api/sessions/{session_id}/select")
def session_select(session_id: str, payload: SelectRequest):
    try:
        snapshot = service.select(session_id, payload.category, payload.component_id)
    except ValueError as err:
        raise HTTPException(status_code=404, detail=str(err))
    except KeyError as err:
        raise HTTPException(status_code=404, detail=err.args[0])
    return snapshot.model_dump(by_alias=True)


@app.post("/api/sessions/{session_id}/peripherals")
def session_peripherals(session_id: str, payload: PeripheralRequest):
    try:
        snapshot = service.set_peripherals(session_id, payload.category, payload.component_ids)
    except ValueError as err:
        raise HTTPException(status_code=404, detail=str(err))
    except KeyError as err:
        raise HTTPException(status_code=404, detail=err.args[0])
    return snapshot.model_dump(by_alias=True)


@app.post("/api/sessions/{session_id}/variant")
def session_variant(session_id: str, payload: VariantRequest):
    snapshot = service.set_variant(session_id, payload.component_id, payload.option, payload.value)
    return snapshot.model_dump(by_alias=True)
