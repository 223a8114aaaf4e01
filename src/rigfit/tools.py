from __future__ import annotations

from typing import Dict, List, Optional

from langchain_core.tools import tool
from pydantic import BaseModel, Field

from .builder import (
    build_total,
    eligible,
    evaluate,
    has_multiple_prices,
    lowest_price,
    report,
    resolve_variant,
)
from .data import Catalog
from .schemas import PeripheralSelection, Selection
from .variant_store import VariantSelectionStore


class EligiblePartsInput(BaseModel):
    category: str = Field(description="Build category such as cpu, gpu, motherboard")
    selection: Dict[str, str] = Field(
        default_factory=dict, description="Currently selected component id per category"
    )


class CompatibilityInput(BaseModel):
    selection: Dict[str, str] = Field(
        default_factory=dict, description="Selected component id per category"
    )


class VariantPriceInput(BaseModel):
    category: str
    component_id: str
    variant: Dict[str, str] = Field(
        default_factory=dict, description="Chosen option value per option key, e.g. colour"
    )


class BuildTotalInput(BaseModel):
    selection: Dict[str, str] = Field(default_factory=dict)
    peripherals: Dict[str, List[str]] = Field(default_factory=dict)
    variants: Dict[str, Dict[str, str]] = Field(
        default_factory=dict, description="Variant choices keyed by component id"
    )


class Toolset:
    def __init__(self, catalog: Catalog):
        self.catalog = catalog

    def register(self):
        catalog = self.catalog

        @tool("list_eligible_parts", args_schema=EligiblePartsInput)
        def list_eligible_parts(category: str, selection: Optional[Dict[str, str]] = None) -> List[dict]:
            """List catalog parts of a category that stay compatible with the current selection."""
            current = Selection.model_validate(selection or {})
            return [
                {"id": c.id, "name": c.name, "price": c.price}
                for c in eligible(catalog, category, current)
            ]

        @tool("check_compatibility", args_schema=CompatibilityInput)
        def check_compatibility(selection: Optional[Dict[str, str]] = None) -> dict:
            """Report compatibility problems of a build, grouped into critical and warning."""
            current = Selection.model_validate(selection or {})
            grouped = report(evaluate(current, catalog.resolve))
            return grouped.model_dump(by_alias=True)

        @tool("resolve_variant_price", args_schema=VariantPriceInput)
        def resolve_variant_price(
            category: str, component_id: str, variant: Optional[Dict[str, str]] = None
        ) -> dict:
            """Resolve the effective price and EAN of a component for the chosen options."""
            component = catalog.resolve(category, component_id)
            if component is None:
                return {"error": f"{category} component not found: {component_id}"}
            resolved = resolve_variant(component, variant or {})
            return {
                "price": resolved.price,
                "ean": resolved.ean,
                "has_multiple_prices": has_multiple_prices(component),
                "lowest_price": lowest_price(component),
            }

        @tool("build_total", args_schema=BuildTotalInput)
        def total(
            selection: Optional[Dict[str, str]] = None,
            peripherals: Optional[Dict[str, List[str]]] = None,
            variants: Optional[Dict[str, Dict[str, str]]] = None,
        ) -> float:
            """Sum the variant-aware price of the selected components and peripherals."""
            return build_total(
                Selection.model_validate(selection or {}),
                PeripheralSelection.model_validate(peripherals or {}),
                catalog,
                VariantSelectionStore(variants or {}),
            )

        return {
            "list_eligible_parts": list_eligible_parts,
            "check_compatibility": check_compatibility,
            "resolve_variant_price": resolve_variant_price,
            "build_total": total,
        }
