"""兼容性检查模块"""

from __future__ import annotations

import math
from typing import Any, Callable, List, Optional, Sequence

from ..schemas import CATEGORY_LABELS, CompatibilityIssue, IssueReport, Selection

Resolver = Callable[[str, str], Optional[Any]]

# PSU 估算常量
DEFAULT_CPU_TDP = 65
DEFAULT_GPU_POWER = 150
BASE_SYSTEM_POWER = 150
PSU_HEADROOM = 1.2


def as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value


def as_list(value: Any) -> List[str]:
    """把字符串/列表/数字统一为字符串列表"""
    if value is None or isinstance(value, bool):
        return []
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value if v is not None and not isinstance(v, bool)]
    return [str(value)]


def form_factor_list(value: Any) -> List[str]:
    """机箱支持的板型，小写；逗号分隔的字符串也接受"""
    items: List[str] = []
    for entry in as_list(value):
        items.extend(part.strip().lower() for part in entry.split(",") if part.strip())
    return items


def ram_supported(ram_types: Sequence[str], board_support: Sequence[str]) -> bool:
    # 子串匹配："DDR5" 视为被 "DDR5-6000" 支持
    return any(r in b for r in ram_types for b in board_support)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def recommended_psu_wattage(cpu_tdp: Any, gpu_power: Any) -> tuple[int, int]:
    """返回 (估算功耗, 建议电源功率)"""
    tdp = as_number(cpu_tdp)
    power = as_number(gpu_power)
    estimated = (tdp if tdp else DEFAULT_CPU_TDP) + (power if power else DEFAULT_GPU_POWER)
    estimated += BASE_SYSTEM_POWER
    return round_half_up(estimated), round_half_up(estimated * PSU_HEADROOM)


def fmt(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def label(component: Any, category: str) -> str:
    name = getattr(component, "name", None)
    return name or CATEGORY_LABELS.get(category, category)


def evaluate(selection: Selection, resolve: Resolver) -> List[CompatibilityIssue]:
    """检查已选配件的兼容性

    Args:
        selection: 当前配置
        resolve: (category, id) -> 配件或 None，由调用方提供

    Returns:
        按规则顺序排列的兼容性问题，空列表表示无问题
    """

    def pick(category: str) -> Optional[Any]:
        component_id = selection.get(category)
        if not component_id:
            return None
        return resolve(category, component_id)

    cpu = pick("cpu")
    motherboard = pick("motherboard")
    ram = pick("ram")
    gpu = pick("gpu")
    psu = pick("psu")
    case = pick("case")
    cooling = pick("cooling")

    issues: List[CompatibilityIssue] = []

    # 1. CPU 与主板插槽
    if cpu is not None and motherboard is not None:
        cpu_socket = getattr(cpu, "socket", None)
        board_socket = getattr(motherboard, "socket", None)
        if cpu_socket and board_socket and cpu_socket != board_socket:
            cpu_name, board_name = label(cpu, "cpu"), label(motherboard, "motherboard")
            issues.append(
                CompatibilityIssue(
                    severity="critical",
                    title="CPU & Motherboard Socket Mismatch",
                    description=(
                        f"The {cpu_name} uses {cpu_socket} socket, but the {board_name} has "
                        f"{board_socket} socket. These components are not compatible."
                    ),
                    recommendation="Please select a CPU and motherboard with matching sockets.",
                    affected_components=[cpu_name, board_name],
                )
            )

    # 2. CPU 代数支持
    if cpu is not None and motherboard is not None:
        generations = getattr(motherboard, "compatibility", None)
        generation = getattr(cpu, "generation", None)
        if isinstance(generations, list) and generation and generation not in generations:
            cpu_name, board_name = label(cpu, "cpu"), label(motherboard, "motherboard")
            issues.append(
                CompatibilityIssue(
                    severity="warning",
                    title="CPU Generation Compatibility",
                    description=(
                        f"The {board_name} may not fully support the {cpu_name} "
                        "without a BIOS update."
                    ),
                    recommendation=(
                        "Ensure the motherboard BIOS is updated to support this CPU generation."
                    ),
                    affected_components=[cpu_name, board_name],
                )
            )

    # 3. 内存类型
    if ram is not None and motherboard is not None:
        ram_types = as_list(getattr(ram, "type", None))
        board_support = as_list(getattr(motherboard, "ram_support", None))
        if ram_types and board_support and not ram_supported(ram_types, board_support):
            ram_name, board_name = label(ram, "ram"), label(motherboard, "motherboard")
            issues.append(
                CompatibilityIssue(
                    severity="critical",
                    title="RAM Type Incompatibility",
                    description=(
                        f"The {board_name} supports {', '.join(board_support)}, but you've "
                        f"selected {', '.join(ram_types)} memory."
                    ),
                    recommendation="Select memory that matches the motherboard's supported type.",
                    affected_components=[ram_name, board_name],
                )
            )

    # 4. 主板与机箱板型
    if motherboard is not None and case is not None:
        supported = form_factor_list(getattr(case, "compatibility", None))
        form_factor = getattr(motherboard, "form_factor", None)
        if supported and form_factor and form_factor.lower() not in supported:
            board_name, case_name = label(motherboard, "motherboard"), label(case, "case")
            issues.append(
                CompatibilityIssue(
                    severity="critical",
                    title="Motherboard & Case Size Mismatch",
                    description=(
                        f"The {board_name} ({form_factor}) will not fit in the {case_name} case."
                    ),
                    recommendation="Select a case that supports your motherboard form factor.",
                    affected_components=[board_name, case_name],
                )
            )

    # 5. 显卡长度
    if gpu is not None and case is not None:
        length = as_number(getattr(gpu, "length", None))
        limit = as_number(getattr(case, "max_gpu_length", None))
        if length is not None and limit is not None and length > limit:
            gpu_name, case_name = label(gpu, "gpu"), label(case, "case")
            issues.append(
                CompatibilityIssue(
                    severity="critical",
                    title="GPU Too Large for Case",
                    description=(
                        f"The {gpu_name} ({fmt(length)}mm) exceeds the {case_name} maximum "
                        f"GPU clearance ({fmt(limit)}mm)."
                    ),
                    recommendation="Select a larger case or a more compact graphics card.",
                    affected_components=[gpu_name, case_name],
                )
            )

    # 6. 电源功率
    if cpu is not None and gpu is not None and psu is not None:
        wattage = as_number(getattr(psu, "wattage", None))
        estimated, recommended = recommended_psu_wattage(
            getattr(cpu, "tdp", None), getattr(gpu, "power", None)
        )
        if wattage is not None and wattage < recommended:
            cpu_name, gpu_name, psu_name = label(cpu, "cpu"), label(gpu, "gpu"), label(psu, "psu")
            issues.append(
                CompatibilityIssue(
                    severity="warning",
                    title="Insufficient PSU Wattage",
                    description=(
                        f"Your system may consume up to {estimated}W, but the {psu_name} only "
                        f"provides {fmt(wattage)}W. We recommend {recommended}W for optimal "
                        "performance."
                    ),
                    recommendation=(
                        "Consider upgrading to a higher wattage power supply for better "
                        "efficiency and headroom."
                    ),
                    affected_components=[cpu_name, gpu_name, psu_name],
                )
            )

    # 7. 风冷散热器高度
    if cooling is not None and case is not None and getattr(cooling, "type", None) == "Air":
        height = as_number(getattr(cooling, "height", None))
        limit = as_number(getattr(case, "max_cpu_cooler_height", None))
        if height is not None and limit is not None and height > limit:
            cooler_name, case_name = label(cooling, "cooling"), label(case, "case")
            issues.append(
                CompatibilityIssue(
                    severity="critical",
                    title="CPU Cooler Too Tall",
                    description=(
                        f"The {cooler_name} ({fmt(height)}mm) exceeds the {case_name} maximum "
                        f"CPU cooler height ({fmt(limit)}mm)."
                    ),
                    recommendation="Select a lower profile cooler or a larger case.",
                    affected_components=[cooler_name, case_name],
                )
            )

    # 8. 散热器 TDP
    if cpu is not None and cooling is not None:
        tdp = as_number(getattr(cpu, "tdp", None))
        rated = as_number(getattr(cooling, "tdp_support", None))
        if tdp is not None and rated is not None and tdp > rated:
            cpu_name, cooler_name = label(cpu, "cpu"), label(cooling, "cooling")
            issues.append(
                CompatibilityIssue(
                    severity="warning",
                    title="CPU Cooler May Be Inadequate",
                    description=(
                        f"The {cpu_name} has a {fmt(tdp)}W TDP, but the {cooler_name} is rated "
                        f"for {fmt(rated)}W."
                    ),
                    recommendation=(
                        "Consider a more powerful cooling solution for optimal temperatures."
                    ),
                    affected_components=[cpu_name, cooler_name],
                )
            )

    # 9. 电源长度
    if psu is not None and case is not None:
        length = as_number(getattr(psu, "length", None))
        limit = as_number(getattr(case, "max_psu_length", None))
        if length is not None and limit is not None and length > limit:
            psu_name, case_name = label(psu, "psu"), label(case, "case")
            issues.append(
                CompatibilityIssue(
                    severity="critical",
                    title="PSU Too Long for Case",
                    description=(
                        f"The {psu_name} ({fmt(length)}mm) exceeds the {case_name} maximum "
                        f"PSU length ({fmt(limit)}mm)."
                    ),
                    recommendation="Select a more compact power supply or a larger case.",
                    affected_components=[psu_name, case_name],
                )
            )

    return issues


def report(issues: Sequence[CompatibilityIssue]) -> IssueReport:
    """按严重程度分组，保持原有顺序"""
    return IssueReport(
        critical=[i for i in issues if i.severity == "critical"],
        warning=[i for i in issues if i.severity == "warning"],
    )
