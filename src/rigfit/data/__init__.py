"""Data 模块：配件目录与仓库"""

from .repository import Catalog, CatalogRepository, parse_component

__all__ = [
    "Catalog",
    "CatalogRepository",
    "parse_component",
]
