"""Builder 模块：兼容性检查、配件过滤、变体解析与总价计算"""

from .compatibility import evaluate, report
from .filters import eligible, explain_ineligible
from .totals import build_total, estimate_power_draw, is_build_complete, missing_categories
from .variants import (
    default_variant,
    detect_options,
    has_multiple_prices,
    has_options_available,
    lowest_price,
    resolve_variant,
)

__all__ = [
    "evaluate",
    "report",
    "eligible",
    "explain_ineligible",
    "build_total",
    "estimate_power_draw",
    "is_build_complete",
    "missing_categories",
    "default_variant",
    "detect_options",
    "has_multiple_prices",
    "has_options_available",
    "lowest_price",
    "resolve_variant",
]
