"""
配件目录 - Component Catalog

按类别分组的内存配件目录，以及从 JSON 文件加载目录的仓库。
In-memory component catalog grouped by category, and a repository that loads it from a JSON file.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional

from pydantic import TypeAdapter, ValidationError

from ..schemas import BUILD_CATEGORIES, PERIPHERAL_CATEGORIES, Component

logger = logging.getLogger(__name__)

KNOWN_CATEGORIES = BUILD_CATEGORIES + PERIPHERAL_CATEGORIES

_component_adapter: TypeAdapter = TypeAdapter(Component)


def parse_component(category: str, raw: Mapping[str, Any]) -> Component:
    """
    解析单个配件 - Parse a single component

    目录按类别分组，类别标签由分组键注入。
    The catalog is grouped by category, so the category tag is injected from the group key.
    """
    if category not in KNOWN_CATEGORIES:
        raise ValueError(f"unknown category: {category}")
    return _component_adapter.validate_python({**raw, "category": category})


class Catalog:
    """
    配件目录类 - Catalog Class

    只读的配件集合。引擎通过 by_category / resolve 访问，从不修改目录。
    Read-only component collection. The engine reads it through by_category / resolve and never mutates it.
    """

    def __init__(self, components: Mapping[str, Iterable[Component]] | None = None):
        self._slices: Dict[str, List[Component]] = {}
        self._index: Dict[str, Dict[str, Component]] = {}
        for category, items in (components or {}).items():
            items = list(items)
            self._slices[category] = items
            self._index[category] = {c.id: c for c in items}

    @classmethod
    def from_raw(cls, raw: Mapping[str, Iterable[Mapping[str, Any]]]) -> "Catalog":
        """
        从原始字典构建目录 - Build catalog from raw mappings

        未知类别直接忽略并记录日志；单个配件校验失败时跳过该配件。
        Unknown categories are skipped with a log line; a component that fails validation is skipped.
        """
        grouped: Dict[str, List[Component]] = {}
        for category, items in raw.items():
            if category not in KNOWN_CATEGORIES:
                logger.warning("Skipping unknown catalog category %r", category)
                continue
            parsed: List[Component] = []
            for item in items or []:
                if not isinstance(item, Mapping):
                    logger.warning("Skipping non-object %s entry %r", category, item)
                    continue
                try:
                    parsed.append(parse_component(category, item))
                except ValidationError as err:
                    logger.warning(
                        "Skipping invalid %s component %r: %s",
                        category,
                        item.get("id"),
                        err.errors()[0].get("msg", "invalid"),
                    )
            grouped[category] = parsed
        return cls(grouped)

    def categories(self) -> List[str]:
        return list(self._slices)

    def by_category(self, category: str) -> List[Component]:
        """
        按类别获取配件 - Get components by category

        返回目录顺序的副本；未知类别返回空列表。
        Returns a copy in catalog order; an unknown category yields an empty list.
        """
        return list(self._slices.get(category, []))

    def resolve(self, category: str, component_id: Optional[str]) -> Optional[Component]:
        """
        按类别和 id 查找配件 - Find component by category and id

        找不到时返回 None（悬空选择视为未选择）。
        Returns None when missing (a dangling selection behaves as unselected).
        """
        if not component_id:
            return None
        return self._index.get(category, {}).get(component_id)

    def __len__(self) -> int:
        return sum(len(items) for items in self._slices.values())


class CatalogRepository:
    """
    目录仓库类 - Catalog Repository Class

    从 JSON 文件加载配件目录，格式为 {category: [component, ...]}。
    Loads the component catalog from a JSON file shaped {category: [component, ...]}.
    """

    def __init__(self, data_path: Path):
        self.data_path = data_path
        self._catalog = Catalog()
        self.reload()

    def reload(self) -> None:
        with self.data_path.open("r", encoding="utf-8") as f:
            raw = json.load(f)
        if not isinstance(raw, dict):
            raise ValueError(f"catalog file must hold a JSON object: {self.data_path}")
        self._catalog = Catalog.from_raw(raw)
        logger.info("Loaded %d components from %s", len(self._catalog), self.data_path)

    @property
    def catalog(self) -> Catalog:
        return self._catalog
