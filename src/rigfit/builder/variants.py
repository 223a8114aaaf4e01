"""
变体解析模块 - Variant Resolution Module

根据买家选择的选项（颜色、尺寸、容量等）解析配件的实际价格、EAN 和图片。
Resolve a component's effective price, EAN and images from the buyer's chosen options (colour, size, capacity, ...).
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Set, Tuple

from ..schemas import OptionDimension, ResolvedVariant

logger = logging.getLogger(__name__)

PLACEHOLDER_IMAGE = "/static/images/component-placeholder.svg"
PLACEHOLDER_IMAGES: List[str] = [PLACEHOLDER_IMAGE] * 4

# 候选选项字段（发现顺序）
OPTION_FIELDS = ["colour", "color", "size", "style", "storage", "type"]

# 价格覆盖的优先级，先命中者胜出
PRICE_PRECEDENCE = ["size", "storage", "colour", "color", "type", "style"]

ALIASES = {"colour": "color", "color": "colour"}


def image_url(ref: Any) -> str:
    """
    图片引用转 URL - Image reference to URL

    引用可以是字符串，也可以是带 url 或 src 的字典。
    A reference is either a string or a mapping carrying url or src.
    """
    if isinstance(ref, str) and ref:
        return ref
    if isinstance(ref, Mapping):
        url = ref.get("url") or ref.get("src")
        if isinstance(url, str) and url:
            return url
    return PLACEHOLDER_IMAGE


def _unique(values: List[str]) -> List[str]:
    seen: Set[str] = set()
    result = []
    for value in values:
        if value not in seen:
            seen.add(value)
            result.append(value)
    return result


def detect_options(component: Any) -> List[OptionDimension]:
    """
    发现选项维度 - Detect option dimensions

    列表字段需有多个不同的值；字符串字段需是逗号分隔的列表。
    同时存在 colour 和 color 时只保留 colour。
    A list field needs more than one distinct value; a string field must be comma separated.
    When both colour and color are present only colour is kept.
    """
    options: List[OptionDimension] = []
    for field in OPTION_FIELDS:
        value = getattr(component, field, None)
        if isinstance(value, list):
            values = _unique([str(v).strip() for v in value if str(v).strip()])
            if len(values) > 1:
                options.append(OptionDimension(key=field, values=values))
        elif isinstance(value, str) and "," in value:
            values = _unique([v.strip() for v in value.split(",") if v.strip()])
            if values:
                options.append(OptionDimension(key=field, values=values))

    if any(o.key == "colour" for o in options):
        options = [o for o in options if o.key != "color"]
    return options


def default_variant(component: Any) -> Dict[str, str]:
    """每个选项维度取第一个值，用于初始化卡片"""
    return {option.key: option.values[0] for option in detect_options(component)}


def _unwrap(entry: Any) -> Optional[Tuple[float, Optional[str]]]:
    """价格覆盖可以是数字，也可以是 {price, ean?}"""
    if isinstance(entry, bool):
        return None
    if isinstance(entry, (int, float)):
        return entry, None
    if isinstance(entry, Mapping):
        price = entry.get("price")
        if isinstance(price, bool) or not isinstance(price, (int, float)):
            return None
        ean = entry.get("ean")
        if isinstance(ean, (int, float)) and not isinstance(ean, bool):
            ean = str(ean)
        return price, ean if isinstance(ean, str) and ean else None
    return None


def _price_override(
    component: Any, variant: Mapping[str, str]
) -> Optional[Tuple[float, Optional[str]]]:
    prices = getattr(component, "prices_by_option", None) or {}
    if not prices or not variant:
        return None
    for key in PRICE_PRECEDENCE:
        selected = variant.get(key)
        if not selected:
            continue
        for lookup_key in (key, ALIASES.get(key)):
            if lookup_key is None:
                continue
            options = prices.get(lookup_key)
            if isinstance(options, Mapping) and selected in options:
                unwrapped = _unwrap(options[selected])
                if unwrapped is not None:
                    return unwrapped
    return None


def resolve_images(component: Any, variant: Mapping[str, str] | None = None) -> List[str]:
    by_option = getattr(component, "images_by_option", None) or {}
    if variant and by_option:
        for option in detect_options(component):
            alias = ALIASES.get(option.key)
            selected = variant.get(option.key) or (variant.get(alias) if alias else None)
            if not selected:
                continue
            for lookup_key in (option.key, alias):
                if lookup_key is None:
                    continue
                refs = (by_option.get(lookup_key) or {}).get(selected)
                if refs:
                    return [image_url(ref) for ref in refs]

    base = getattr(component, "images", None) or []
    if base:
        return [image_url(ref) for ref in base]
    return list(PLACEHOLDER_IMAGES)


def resolve_variant(component: Any, variant: Mapping[str, str] | None = None) -> ResolvedVariant:
    """
    解析变体 - Resolve variant

    参数 Parameters:
        component: 配件
                   Component
        variant: 该配件的选项选择，可为空
                 The buyer's option choices for this component, may be empty

    返回 Returns:
        实际价格、EAN 和图片；无覆盖时回退到基础值
        Effective price, EAN and images, falling back to the base values
    """
    variant = variant or {}
    override = _price_override(component, variant)
    base_price = getattr(component, "price", None)
    base_ean = getattr(component, "ean", None)
    if override is None:
        price, ean = base_price, base_ean
    else:
        price, ean = override[0], override[1] or base_ean
    return ResolvedVariant(price=price, ean=ean, images=resolve_images(component, variant))


def override_prices(component: Any) -> Set[float]:
    """所有选项覆盖中出现的不同价格"""
    prices: Set[float] = set()
    for options in (getattr(component, "prices_by_option", None) or {}).values():
        if not isinstance(options, Mapping):
            continue
        for entry in options.values():
            unwrapped = _unwrap(entry)
            if unwrapped is not None:
                prices.add(unwrapped[0])
    return prices


def has_multiple_prices(component: Any) -> bool:
    prices = override_prices(component)
    if len(prices) > 1:
        logger.debug(
            "Multiple prices found for %s: %s",
            getattr(component, "name", None) or getattr(component, "id", "?"),
            sorted(prices),
        )
        return True
    return False


def lowest_price(component: Any) -> Optional[float]:
    """“From £X” 展示用的最低价，与当前选择无关"""
    prices = override_prices(component)
    if prices:
        return min(prices)
    return getattr(component, "price", None)


def has_options_available(component: Any) -> bool:
    return (
        has_multiple_prices(component)
        or bool(detect_options(component))
        or bool(getattr(component, "prices_by_option", None))
    )
