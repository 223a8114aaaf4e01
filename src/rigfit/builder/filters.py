"""
配件过滤模块 - Category Filter Module

根据当前已选配件，筛选某个类别中仍然兼容的候选配件。
Filter the candidates of one category down to those still compatible with the current selection.

每条成对规则按两个方向分别实现：A 按 B 的选择过滤，B 按 A 的选择过滤。
Every pairwise rule is implemented once per direction: A filtered by B's choice, and B filtered by A's choice.
"""

from __future__ import annotations

from typing import Any, Callable, List, NamedTuple, Optional, Protocol

from ..schemas import IneligibleComponent, Selection
from .compatibility import as_list, as_number, fmt, form_factor_list, ram_supported

Check = Callable[[Any, Any], Optional[str]]


class CatalogProtocol(Protocol):
    def by_category(self, category: str) -> List[Any]: ...
    def resolve(self, category: str, component_id: Optional[str]) -> Optional[Any]: ...


class DirectionalCheck(NamedTuple):
    target: str
    other: str
    check: Check


# === CPU <-> 主板：插槽 ===


def _cpu_vs_motherboard(cpu: Any, motherboard: Any) -> Optional[str]:
    cpu_socket = getattr(cpu, "socket", None)
    board_socket = getattr(motherboard, "socket", None)
    if cpu_socket and board_socket and cpu_socket != board_socket:
        return (
            f"Socket mismatch: {cpu_socket} CPU cannot fit in "
            f"{board_socket} motherboard socket"
        )
    return None


def _motherboard_vs_cpu(motherboard: Any, cpu: Any) -> Optional[str]:
    board_socket = getattr(motherboard, "socket", None)
    cpu_socket = getattr(cpu, "socket", None)
    if board_socket and cpu_socket and board_socket != cpu_socket:
        return f"Socket mismatch: {board_socket} motherboard cannot fit {cpu_socket} CPU"
    return None


# === 内存 <-> 主板：内存类型 ===


def _ram_vs_motherboard(ram: Any, motherboard: Any) -> Optional[str]:
    board_support = as_list(getattr(motherboard, "ram_support", None))
    ram_types = as_list(getattr(ram, "type", None))
    if board_support and ram_types and not ram_supported(ram_types, board_support):
        return (
            f"Memory type mismatch: {', '.join(ram_types)} RAM not supported by "
            f"motherboard (supports: {', '.join(board_support)})"
        )
    return None


def _motherboard_vs_ram(motherboard: Any, ram: Any) -> Optional[str]:
    board_support = as_list(getattr(motherboard, "ram_support", None))
    selected_types = as_list(getattr(ram, "type", None))
    if board_support and selected_types and not ram_supported(selected_types, board_support):
        return (
            f"Memory type mismatch: Selected {', '.join(selected_types)} RAM not "
            f"supported (supports: {', '.join(board_support)})"
        )
    return None


# === 机箱 <-> 主板：板型 ===


def _case_vs_motherboard(case: Any, motherboard: Any) -> Optional[str]:
    form_factor = getattr(motherboard, "form_factor", None)
    if not form_factor:
        return None
    supported = form_factor_list(getattr(case, "compatibility", None))
    # 板型未知的机箱无法确认能装下
    if form_factor.lower() not in supported:
        return (
            f"Form factor mismatch: {form_factor} motherboard won't fit in this case "
            f"(supports: {', '.join(supported) if supported else 'unknown'})"
        )
    return None


def _motherboard_vs_case(motherboard: Any, case: Any) -> Optional[str]:
    supported = form_factor_list(getattr(case, "compatibility", None))
    if not supported:
        return None
    form_factor = getattr(motherboard, "form_factor", None)
    if not form_factor or form_factor.lower() not in supported:
        return (
            f"Form factor mismatch: {form_factor or 'unknown'} motherboard won't fit "
            "in selected case"
        )
    return None


# === 显卡 <-> 机箱：长度 ===


def _gpu_vs_case(gpu: Any, case: Any) -> Optional[str]:
    length = as_number(getattr(gpu, "length", None))
    limit = as_number(getattr(case, "max_gpu_length", None))
    if length is not None and limit is not None and length > limit:
        return (
            f"Length clearance: {fmt(length)}mm GPU too long for {fmt(limit)}mm "
            "case clearance"
        )
    return None


def _case_vs_gpu(case: Any, gpu: Any) -> Optional[str]:
    limit = as_number(getattr(case, "max_gpu_length", None))
    length = as_number(getattr(gpu, "length", None))
    if length is not None and limit is not None and length > limit:
        return (
            f"GPU clearance: Selected {fmt(length)}mm GPU won't fit in this case "
            f"(max: {fmt(limit)}mm)"
        )
    return None


# === 散热器 <-> 机箱：风冷高度 ===


def _cooling_vs_case(cooling: Any, case: Any) -> Optional[str]:
    if getattr(cooling, "type", None) != "Air":
        return None
    height = as_number(getattr(cooling, "height", None))
    limit = as_number(getattr(case, "max_cpu_cooler_height", None))
    if height is not None and limit is not None and height > limit:
        return (
            f"Height clearance: {fmt(height)}mm cooler too tall for {fmt(limit)}mm "
            "case clearance"
        )
    return None


def _case_vs_cooling(case: Any, cooling: Any) -> Optional[str]:
    if getattr(cooling, "type", None) != "Air":
        return None
    limit = as_number(getattr(case, "max_cpu_cooler_height", None))
    height = as_number(getattr(cooling, "height", None))
    if height is not None and limit is not None and height > limit:
        return (
            f"Cooler clearance: Selected {fmt(height)}mm air cooler won't fit in this "
            f"case (max: {fmt(limit)}mm)"
        )
    return None


# === 电源 <-> 机箱：长度 ===


def _psu_vs_case(psu: Any, case: Any) -> Optional[str]:
    length = as_number(getattr(psu, "length", None))
    limit = as_number(getattr(case, "max_psu_length", None))
    if length is not None and limit is not None and length > limit:
        return f"PSU length: {fmt(length)}mm PSU too long for {fmt(limit)}mm case limit"
    return None


def _case_vs_psu(case: Any, psu: Any) -> Optional[str]:
    limit = as_number(getattr(case, "max_psu_length", None))
    length = as_number(getattr(psu, "length", None))
    if length is not None and limit is not None and length > limit:
        return (
            f"PSU clearance: Selected {fmt(length)}mm PSU won't fit in this case "
            f"(max: {fmt(limit)}mm)"
        )
    return None


DIRECTIONAL_CHECKS: List[DirectionalCheck] = [
    DirectionalCheck("cpu", "motherboard", _cpu_vs_motherboard),
    DirectionalCheck("motherboard", "cpu", _motherboard_vs_cpu),
    DirectionalCheck("gpu", "case", _gpu_vs_case),
    DirectionalCheck("case", "gpu", _case_vs_gpu),
    DirectionalCheck("ram", "motherboard", _ram_vs_motherboard),
    DirectionalCheck("motherboard", "ram", _motherboard_vs_ram),
    DirectionalCheck("case", "motherboard", _case_vs_motherboard),
    DirectionalCheck("motherboard", "case", _motherboard_vs_case),
    DirectionalCheck("cooling", "case", _cooling_vs_case),
    DirectionalCheck("case", "cooling", _case_vs_cooling),
    DirectionalCheck("psu", "case", _psu_vs_case),
    DirectionalCheck("case", "psu", _case_vs_psu),
]


def _active_checks(
    catalog: CatalogProtocol, category: str, selection: Selection
) -> List[tuple[Check, Any]]:
    """当前选择下适用于目标类别的 (检查, 对方配件)"""
    active = []
    for entry in DIRECTIONAL_CHECKS:
        if entry.target != category:
            continue
        other = catalog.resolve(entry.other, selection.get(entry.other))
        if other is not None:
            active.append((entry.check, other))
    return active


def eligible(catalog: CatalogProtocol, category: str, selection: Selection) -> List[Any]:
    """
    获取可选配件 - Get eligible components

    参数 Parameters:
        catalog: 配件目录
                 Component catalog
        category: 目标类别
                  Target category
        selection: 当前配置
                   Current selection

    返回 Returns:
        按目录顺序排列的兼容候选；未选择任何配件时返回整个类别
        Compatible candidates in catalog order; the whole category when nothing is selected
    """
    candidates = catalog.by_category(category)
    if selection.is_empty():
        return candidates
    checks = _active_checks(catalog, category, selection)
    if not checks:
        return candidates
    return [c for c in candidates if not any(check(c, other) for check, other in checks)]


def explain_ineligible(
    catalog: CatalogProtocol, category: str, selection: Selection
) -> List[IneligibleComponent]:
    """
    说明不兼容原因 - Explain ineligible components

    列出被过滤掉的候选及每条失败检查的原因。
    Lists each filtered-out candidate with one reason per failed check.
    """
    if selection.is_empty():
        return []
    checks = _active_checks(catalog, category, selection)
    details: List[IneligibleComponent] = []
    for candidate in catalog.by_category(category):
        reasons = [r for r in (check(candidate, other) for check, other in checks) if r]
        if reasons:
            details.append(
                IneligibleComponent(
                    id=candidate.id,
                    name=getattr(candidate, "name", None),
                    reasons=reasons,
                )
            )
    return details
