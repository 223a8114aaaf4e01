"""
总价计算模块 - Build Total Module

按变体解析各配件价格并汇总整机总价，附带功耗估算与完整性检查。
Sum the build's variant-aware price, plus a power-draw estimate and a completeness check.
"""

from __future__ import annotations

import logging
import re
from typing import Any, List, Mapping, Optional, Protocol

from ..schemas import PeripheralSelection, Selection
from .compatibility import BASE_SYSTEM_POWER, as_number
from .variants import resolve_variant

logger = logging.getLogger(__name__)


class CatalogProtocol(Protocol):
    def resolve(self, category: str, component_id: Optional[str]) -> Optional[Any]: ...


class VariantStoreProtocol(Protocol):
    def get(self, component_id: str) -> Mapping[str, str]: ...


REQUIRED_CATEGORIES = ["case", "motherboard", "cpu", "ram", "storage", "psu", "cooling"]
"""
整机必需类别 - Required Build Categories

显卡和机箱风扇为可选（集成显卡 / 机箱自带风扇）。
GPU and case fans are optional (integrated graphics / bundled fans).
"""

# 名称推断的默认功耗 - Name-based default power figures
CPU_TDP_BY_NAME = [
    (re.compile(r"9950x|14900ks|13900ks|9900x3d|7950x3d"), 170),
    (re.compile(r"9900x|14900k|13900k|7950x"), 150),
    (re.compile(r"9800x3d|14700k|13700k|7900x|7800x3d"), 120),
    (re.compile(r"14600k|13600k|7700x|7600x"), 100),
]

GPU_POWER_BY_NAME = [
    (re.compile(r"rtx\s?5090|rtx\s?4090"), 575),
    (re.compile(r"rtx\s?5080|rtx\s?4080\s?super"), 385),
    (re.compile(r"rtx\s?4080"), 320),
    (re.compile(r"rtx\s?5070\s?ti|rtx\s?4070\s?ti\s?super"), 285),
    (re.compile(r"rtx\s?5070|rtx\s?4070\s?super"), 220),
    (re.compile(r"rtx\s?4070"), 200),
    (re.compile(r"rtx\s?5060\s?ti|rtx\s?4060\s?ti"), 165),
    (re.compile(r"rtx\s?5060|rtx\s?4060"), 140),
    (re.compile(r"rx\s?7900\s?xtx"), 355),
    (re.compile(r"rx\s?7900\s?xt"), 315),
    (re.compile(r"rx\s?7800\s?xt"), 263),
    (re.compile(r"rx\s?7700\s?xt"), 245),
]

_CORES_PATTERN = re.compile(r"(\d+)[\s-]?cores?")


def build_total(
    selection: Selection,
    peripherals: PeripheralSelection,
    catalog: CatalogProtocol,
    variant_store: VariantStoreProtocol,
) -> float:
    """
    计算整机总价 - Calculate Build Total

    计算规则 Rules:
    1. 每个已选配件按其变体选择解析价格（无选择时使用基础价格）
    2. 外设没有变体维度，按基础价格累加
    3. 目录中找不到的 id 不计入

    参数 Parameters:
        selection: 主机配置
                   Main build selection
        peripherals: 外设选择
                     Peripheral selection
        catalog: 配件目录
                 Component catalog
        variant_store: 变体选择存储，按配件 id 查询
                       Variant selection store, looked up by component id

    返回 Returns:
        总价
        Total price
    """
    component_sum = 0.0
    for category, component_id in selection.items():
        component = catalog.resolve(category, component_id)
        if component is None:
            logger.debug("Dangling %s selection %r ignored in total", category, component_id)
            continue
        resolved = resolve_variant(component, variant_store.get(component_id))
        component_sum += resolved.price or 0

    peripheral_sum = 0.0
    for category, ids in peripherals.items():
        for component_id in ids:
            component = catalog.resolve(category, component_id)
            if component is None:
                continue
            peripheral_sum += getattr(component, "price", None) or 0

    return component_sum + peripheral_sum


def _cpu_tdp(cpu: Any) -> float:
    tdp = as_number(getattr(cpu, "tdp", None))
    if tdp:
        return tdp
    name = (getattr(cpu, "name", None) or "").lower()
    for pattern, watts in CPU_TDP_BY_NAME:
        if pattern.search(name):
            return watts
    if "cores" in name:
        match = _CORES_PATTERN.search(name)
        cores = int(match.group(1)) if match else (as_number(getattr(cpu, "cores", None)) or 6)
        if cores >= 16:
            return 170
        if cores >= 12:
            return 120
        if cores >= 8:
            return 100
        return 65
    return 95


def _gpu_power(gpu: Any) -> float:
    # 取第一个数值字段，为 0 时按名称推断
    for attr in ("power", "power_consumption", "power_draw"):
        value = as_number(getattr(gpu, attr, None))
        if value is not None:
            if value:
                return value
            break
    name = (getattr(gpu, "name", None) or "").lower()
    for pattern, watts in GPU_POWER_BY_NAME:
        if pattern.search(name):
            return watts
    return 200


def estimate_power_draw(selection: Selection, catalog: CatalogProtocol) -> int:
    """
    估算整机功耗 - Estimate Power Draw

    CPU TDP + 显卡功耗 + 150W 基础功耗；配件缺少数据时按名称推断。
    CPU TDP + GPU power + 150W base; missing figures are inferred from the part name.
    """
    cpu = catalog.resolve("cpu", selection.get("cpu"))
    gpu = catalog.resolve("gpu", selection.get("gpu"))
    cpu_tdp = _cpu_tdp(cpu) if cpu is not None else 0
    gpu_power = _gpu_power(gpu) if gpu is not None else 0
    return int(cpu_tdp + gpu_power + BASE_SYSTEM_POWER)


def missing_categories(selection: Selection) -> List[str]:
    return [c for c in REQUIRED_CATEGORIES if not selection.get(c)]


def is_build_complete(selection: Selection) -> bool:
    return not missing_categories(selection)
