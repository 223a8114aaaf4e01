from __future__ import annotations

from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


BuildCategory = Literal[
    "case",
    "motherboard",
    "cpu",
    "ram",
    "gpu",
    "storage",
    "psu",
    "cooling",
    "caseFans",
]

PeripheralCategory = Literal[
    "keyboard",
    "mouse",
    "monitor",
    "gamepad",
    "mousepad",
    "software",
    "headset",
    "cable",
]

BUILD_CATEGORIES: List[str] = [
    "case",
    "motherboard",
    "cpu",
    "ram",
    "gpu",
    "storage",
    "psu",
    "cooling",
    "caseFans",
]

PERIPHERAL_CATEGORIES: List[str] = [
    "keyboard",
    "mouse",
    "monitor",
    "gamepad",
    "mousepad",
    "software",
    "headset",
    "cable",
]

CATEGORY_LABELS: Dict[str, str] = {
    "case": "Case",
    "motherboard": "Motherboard",
    "cpu": "CPU",
    "gpu": "GPU",
    "ram": "RAM",
    "storage": "Storage",
    "psu": "PSU",
    "cooling": "Cooling",
    "caseFans": "Case Fans",
}

# 选项字段可以是字符串、字符串列表或数字
OptionValue = Union[str, List[str], float, None]
StringOrList = Union[str, List[str], None]


def _lenient_number(value: Any) -> Optional[float]:
    """非数值视为缺失"""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


def _lenient_text(value: Any) -> Optional[str]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return str(value)
    return value if isinstance(value, str) else None


def _lenient_strings(value: Any) -> Union[str, List[str], None]:
    if isinstance(value, (list, tuple)):
        return [t for t in (_lenient_text(v) for v in value) if t is not None]
    return _lenient_text(value)


def _lenient_option(value: Any) -> OptionValue:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value
    return _lenient_strings(value)


class ComponentBase(BaseModel):
    """所有类别共享的字段"""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    # 标识
    id: str
    name: Optional[str] = None
    brand: Optional[str] = None

    # 价格
    price: Optional[float] = None
    ean: Optional[str] = None
    prices_by_option: Dict[str, Dict[str, Any]] = Field(
        default_factory=dict, alias="pricesByOption"
    )

    # 图片
    images: List[Any] = Field(default_factory=list)
    images_by_option: Dict[str, Dict[str, List[Any]]] = Field(
        default_factory=dict, alias="imagesByOption"
    )

    # 选项维度
    colour: OptionValue = None
    color: OptionValue = None
    size: OptionValue = None
    style: OptionValue = None
    storage: OptionValue = None
    type: OptionValue = None

    @field_validator("price", mode="before")
    @classmethod
    def _coerce_price(cls, value: Any) -> Optional[float]:
        return _lenient_number(value)

    @field_validator("ean", "name", "brand", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> Optional[str]:
        return _lenient_text(value)

    @field_validator("colour", "color", "size", "style", "storage", "type", mode="before")
    @classmethod
    def _coerce_option(cls, value: Any) -> OptionValue:
        return _lenient_option(value)

    @field_validator("prices_by_option", mode="before")
    @classmethod
    def _coerce_price_map(cls, value: Any) -> Dict[str, Any]:
        if not isinstance(value, dict):
            return {}
        return {k: v for k, v in value.items() if isinstance(v, dict)}

    @field_validator("images_by_option", mode="before")
    @classmethod
    def _coerce_image_map(cls, value: Any) -> Dict[str, Any]:
        if not isinstance(value, dict):
            return {}
        cleaned: Dict[str, Dict[str, List[Any]]] = {}
        for key, options in value.items():
            if not isinstance(options, dict):
                continue
            cleaned[key] = {}
            for option, refs in options.items():
                if isinstance(refs, list):
                    cleaned[key][option] = refs
                elif isinstance(refs, (str, dict)):
                    cleaned[key][option] = [refs]
        return cleaned

    @field_validator("images", mode="before")
    @classmethod
    def _coerce_images(cls, value: Any) -> List[Any]:
        if isinstance(value, list):
            return value
        if isinstance(value, (str, dict)):
            return [value]
        return []

    def display_name(self, fallback: str) -> str:
        return self.name or fallback


class CaseComponent(ComponentBase):
    category: Literal["case"] = "case"
    form_factor: Optional[str] = Field(default=None, alias="formFactor")
    compatibility: StringOrList = None
    max_gpu_length: Optional[float] = Field(default=None, alias="maxGpuLength")
    max_cpu_cooler_height: Optional[float] = Field(default=None, alias="maxCpuCoolerHeight")
    max_psu_length: Optional[float] = Field(default=None, alias="maxPsuLength")

    @field_validator("max_gpu_length", "max_cpu_cooler_height", "max_psu_length", mode="before")
    @classmethod
    def _coerce_numbers(cls, value: Any) -> Optional[float]:
        return _lenient_number(value)

    @field_validator("form_factor", mode="before")
    @classmethod
    def _coerce_text_fields(cls, value: Any) -> Optional[str]:
        return _lenient_text(value)

    @field_validator("compatibility", mode="before")
    @classmethod
    def _coerce_lists(cls, value: Any) -> StringOrList:
        return _lenient_strings(value)


class MotherboardComponent(ComponentBase):
    category: Literal["motherboard"] = "motherboard"
    socket: Optional[str] = None
    chipset: Optional[str] = None
    form_factor: Optional[str] = Field(default=None, alias="formFactor")
    ram_support: StringOrList = Field(default=None, alias="ramSupport")
    # 支持的 CPU 代数
    compatibility: StringOrList = None

    @field_validator("socket", "chipset", "form_factor", mode="before")
    @classmethod
    def _coerce_text_fields(cls, value: Any) -> Optional[str]:
        return _lenient_text(value)

    @field_validator("ram_support", "compatibility", mode="before")
    @classmethod
    def _coerce_lists(cls, value: Any) -> StringOrList:
        return _lenient_strings(value)


class CpuComponent(ComponentBase):
    category: Literal["cpu"] = "cpu"
    socket: Optional[str] = None
    generation: Optional[str] = None
    tdp: Optional[float] = None
    cores: Optional[float] = None

    @field_validator("tdp", "cores", mode="before")
    @classmethod
    def _coerce_numbers(cls, value: Any) -> Optional[float]:
        return _lenient_number(value)

    @field_validator("socket", "generation", mode="before")
    @classmethod
    def _coerce_text_fields(cls, value: Any) -> Optional[str]:
        return _lenient_text(value)


class RamComponent(ComponentBase):
    category: Literal["ram"] = "ram"


class GpuComponent(ComponentBase):
    category: Literal["gpu"] = "gpu"
    length: Optional[float] = None
    power: Optional[float] = None
    power_consumption: Optional[float] = Field(default=None, alias="powerConsumption")
    power_draw: Optional[float] = Field(default=None, alias="powerDraw")

    @field_validator("length", "power", "power_consumption", "power_draw", mode="before")
    @classmethod
    def _coerce_numbers(cls, value: Any) -> Optional[float]:
        return _lenient_number(value)


class StorageComponent(ComponentBase):
    category: Literal["storage"] = "storage"


class PsuComponent(ComponentBase):
    category: Literal["psu"] = "psu"
    wattage: Optional[float] = None
    length: Optional[float] = None

    @field_validator("wattage", "length", mode="before")
    @classmethod
    def _coerce_numbers(cls, value: Any) -> Optional[float]:
        return _lenient_number(value)


class CoolingComponent(ComponentBase):
    category: Literal["cooling"] = "cooling"
    height: Optional[float] = None
    tdp_support: Optional[float] = Field(default=None, alias="tdpSupport")

    @field_validator("height", "tdp_support", mode="before")
    @classmethod
    def _coerce_numbers(cls, value: Any) -> Optional[float]:
        return _lenient_number(value)


class CaseFanComponent(ComponentBase):
    category: Literal["caseFans"] = "caseFans"


class PeripheralComponent(ComponentBase):
    category: PeripheralCategory


Component = Annotated[
    Union[
        CaseComponent,
        MotherboardComponent,
        CpuComponent,
        RamComponent,
        GpuComponent,
        StorageComponent,
        PsuComponent,
        CoolingComponent,
        CaseFanComponent,
        PeripheralComponent,
    ],
    Field(discriminator="category"),
]


class Selection(BaseModel):
    """主机配置：每个类别最多一个配件 id"""

    model_config = ConfigDict(populate_by_name=True)

    case: Optional[str] = None
    motherboard: Optional[str] = None
    cpu: Optional[str] = None
    ram: Optional[str] = None
    gpu: Optional[str] = None
    storage: Optional[str] = None
    psu: Optional[str] = None
    cooling: Optional[str] = None
    case_fans: Optional[str] = Field(default=None, alias="caseFans")

    def get(self, category: str) -> Optional[str]:
        attr = "case_fans" if category == "caseFans" else category
        return getattr(self, attr, None)

    def items(self) -> List[tuple[str, str]]:
        """已选择的 (类别, id)，按固定类别顺序"""
        pairs = []
        for category in BUILD_CATEGORIES:
            component_id = self.get(category)
            if component_id:
                pairs.append((category, component_id))
        return pairs

    def is_empty(self) -> bool:
        return not self.items()

    def with_choice(self, category: str, component_id: Optional[str]) -> "Selection":
        if category not in BUILD_CATEGORIES:
            raise ValueError(f"unknown build category: {category}")
        data = {c: i for c, i in self.items()}
        if component_id:
            data[category] = component_id
        else:
            data.pop(category, None)
        return Selection.model_validate(data)


class PeripheralSelection(BaseModel):
    """外设：每个类别 0..N 个 id"""

    keyboard: List[str] = Field(default_factory=list)
    mouse: List[str] = Field(default_factory=list)
    monitor: List[str] = Field(default_factory=list)
    gamepad: List[str] = Field(default_factory=list)
    mousepad: List[str] = Field(default_factory=list)
    software: List[str] = Field(default_factory=list)
    headset: List[str] = Field(default_factory=list)
    cable: List[str] = Field(default_factory=list)

    def items(self) -> List[tuple[str, List[str]]]:
        return [(c, list(getattr(self, c))) for c in PERIPHERAL_CATEGORIES]


VariantSelection = Dict[str, str]


class CompatibilityIssue(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    severity: Literal["critical", "warning"]
    title: str
    description: str
    recommendation: str
    affected_components: List[str] = Field(default_factory=list, alias="affectedComponents")


class IssueReport(BaseModel):
    critical: List[CompatibilityIssue] = Field(default_factory=list)
    warning: List[CompatibilityIssue] = Field(default_factory=list)

    @property
    def has_blocking(self) -> bool:
        return bool(self.critical)


class OptionDimension(BaseModel):
    key: str
    values: List[str]


class ResolvedVariant(BaseModel):
    price: Optional[float] = None
    ean: Optional[str] = None
    images: List[str] = Field(default_factory=list)


class IneligibleComponent(BaseModel):
    id: str
    name: Optional[str] = None
    reasons: List[str] = Field(default_factory=list)


# === API 请求/响应 ===


class EligibleRequest(BaseModel):
    category: str
    selection: Selection = Field(default_factory=Selection)


class CompatibilityRequest(BaseModel):
    selection: Selection = Field(default_factory=Selection)


class ResolveRequest(BaseModel):
    category: str
    component_id: str
    variant: VariantSelection = Field(default_factory=dict)


class ResolveResponse(BaseModel):
    resolved: ResolvedVariant
    options: List[OptionDimension] = Field(default_factory=list)
    has_multiple_prices: bool = False
    lowest_price: Optional[float] = None


class TotalRequest(BaseModel):
    selection: Selection = Field(default_factory=Selection)
    peripherals: PeripheralSelection = Field(default_factory=PeripheralSelection)
    variants: Dict[str, VariantSelection] = Field(default_factory=dict)


class TotalResponse(BaseModel):
    total: float
    estimated_power: int = 0
    complete: bool = False


class SelectRequest(BaseModel):
    category: str
    component_id: Optional[str] = None


class PeripheralRequest(BaseModel):
    category: str
    component_ids: List[str] = Field(default_factory=list)


class VariantRequest(BaseModel):
    component_id: str
    option: str
    value: str


class BuildSnapshot(BaseModel):
    session_id: str
    selection: Selection
    peripherals: PeripheralSelection
    variants: Dict[str, VariantSelection] = Field(default_factory=dict)
    total: float = 0
    estimated_power: int = 0
    complete: bool = False
    issues: IssueReport = Field(default_factory=IssueReport)
    # 每次变更递增，调用方可据此缓存
    revision: int = 0
