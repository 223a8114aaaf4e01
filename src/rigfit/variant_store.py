from __future__ import annotations

from typing import Dict, Mapping

from .schemas import VariantSelection


class VariantSelectionStore:
    """
    变体选择存储 - Variant Selection Store

    按配件 id 保存买家的选项选择，独立于主机配置：
    更换已选配件不会丢弃之前的选项，回到该配件时选择仍然有效。
    Holds the buyer's option choices per component id, independent of the build selection:
    swapping the selected component keeps earlier choices for when the buyer returns to it.
    """

    def __init__(self, initial: Mapping[str, Mapping[str, str]] | None = None):
        self._selections: Dict[str, VariantSelection] = {
            component_id: dict(choices) for component_id, choices in (initial or {}).items()
        }

    def get(self, component_id: str) -> VariantSelection:
        """不存在时返回空选择"""
        return dict(self._selections.get(component_id, {}))

    def set_option(self, component_id: str, key: str, value: str) -> VariantSelection:
        # 首次修改时懒创建
        choices = self._selections.setdefault(component_id, {})
        choices[key] = value
        return dict(choices)

    def as_dict(self) -> Dict[str, VariantSelection]:
        return {component_id: dict(c) for component_id, c in self._selections.items()}

    def __contains__(self, component_id: object) -> bool:
        return component_id in self._selections

    def __len__(self) -> int:
        return len(self._selections)
