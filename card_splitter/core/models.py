"""
Data classes и Enum для разбора листов с картами
"""
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

from .exceptions import ValidationError


class CardType(Enum):
    FRONT = "front"
    BACK = "back"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional['CardType']:
        if value is None:
            return None
        if isinstance(value, cls):
            return value
        card_type = cls(str(value).lower())
        if card_type == cls.UNKNOWN:
            raise ValidationError("Card type must be 'front' or 'back'")
        return card_type


class PageType(Enum):
    CARD = "card"
    RULE = "rule"
    SKIP = "skip"


class FileKind(Enum):
    PDF = "pdf"
    IMAGE = "image"


class FlipEdge(Enum):
    SHORT = "short"
    LONG = "long"


class GutterOrientation(Enum):
    VERTICAL = "vertical"
    HORIZONTAL = "horizontal"


class PageOrientation(Enum):
    PORTRAIT = "portrait"
    LANDSCAPE = "landscape"


class MirrorAxis(Enum):
    NONE = "none"
    ROWS = "rows"
    COLUMNS = "columns"


class GroupKind(Enum):
    AUTO = "auto"
    MANUAL = "manual"


# Режимы печати

@dataclass(frozen=True)
class Simplex:
    type_name = "simplex"


@dataclass(frozen=True)
class Duplex:
    flip_edge: FlipEdge = FlipEdge.SHORT
    type_name = "duplex"


@dataclass(frozen=True)
class GutterFold:
    orientation: GutterOrientation = GutterOrientation.VERTICAL
    type_name = "gutter-fold"


PdfMode = Union[Simplex, Duplex, GutterFold]


def pdf_mode_to_dict(mode: PdfMode) -> Dict[str, str]:
    data = {'type': mode.type_name}
    if isinstance(mode, Duplex):
        data['flipEdge'] = mode.flip_edge.value
    elif isinstance(mode, GutterFold):
        data['orientation'] = mode.orientation.value
    return data


def pdf_mode_from_dict(data: Dict[str, Any]) -> PdfMode:
    """Восстановление режима печати из словаря {type, flipEdge, orientation}"""
    if not isinstance(data, dict):
        raise ValidationError(f"PDF mode must be an object, got {type(data).__name__}")
    mode_type = data.get('type')
    try:
        if mode_type == Simplex.type_name:
            return Simplex()
        if mode_type == Duplex.type_name:
            return Duplex(FlipEdge(data.get('flipEdge', FlipEdge.SHORT.value)))
        if mode_type == GutterFold.type_name:
            return GutterFold(GutterOrientation(data.get('orientation', GutterOrientation.VERTICAL.value)))
    except ValueError as e:
        raise ValidationError(f"Invalid PDF mode {data}: {e}") from e
    raise ValidationError(f"Unknown PDF mode type: {mode_type}")


# Геометрия

@dataclass(frozen=True)
class GridSettings:
    rows: int = 2
    columns: int = 3

    def __post_init__(self):
        if int(self.rows) < 1 or int(self.columns) < 1:
            raise ValidationError(f"Grid must have at least 1 row and 1 column, got {self.rows}x{self.columns}")

    @property
    def cards_per_page(self) -> int:
        return self.rows * self.columns

    def to_dict(self) -> Dict[str, int]:
        return {'rows': self.rows, 'columns': self.columns}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GridSettings':
        return cls(int(data['rows']), int(data['columns']))


@dataclass(frozen=True)
class CropSettings:
    top: float = 0
    right: float = 0
    bottom: float = 0
    left: float = 0

    def to_dict(self) -> Dict[str, float]:
        return {'top': self.top, 'right': self.right, 'bottom': self.bottom, 'left': self.left}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CropSettings':
        return cls(
            data.get('top', 0), data.get('right', 0),
            data.get('bottom', 0), data.get('left', 0)
        )


@dataclass(frozen=True)
class PageDimensions:
    width: float
    height: float

    @property
    def is_valid(self) -> bool:
        return self.width > 0 and self.height > 0

    def to_dict(self) -> Dict[str, float]:
        return {'width': self.width, 'height': self.height}


@dataclass(frozen=True)
class CardRegion:
    x: float
    y: float
    width: float
    height: float


# Пропуски и ручное переопределение типа карты

@dataclass(frozen=True)
class SkippedCard:
    page_index: int
    grid_row: int
    grid_column: int
    card_type: Optional[CardType] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {'pageIndex': self.page_index, 'gridRow': self.grid_row, 'gridColumn': self.grid_column}
        if self.card_type is not None:
            data['cardType'] = self.card_type.value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SkippedCard':
        return cls(
            int(data['pageIndex']), int(data['gridRow']), int(data['gridColumn']),
            CardType.parse(data.get('cardType'))
        )


@dataclass(frozen=True)
class CardTypeOverride:
    page_index: int
    grid_row: int
    grid_column: int
    card_type: CardType

    def to_dict(self) -> Dict[str, Any]:
        return {
            'pageIndex': self.page_index,
            'gridRow': self.grid_row,
            'gridColumn': self.grid_column,
            'cardType': self.card_type.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CardTypeOverride':
        return cls(
            int(data['pageIndex']), int(data['gridRow']), int(data['gridColumn']),
            CardType.parse(data['cardType'])
        )


@dataclass(frozen=True)
class ExtractionSettings:
    grid: GridSettings = field(default_factory=GridSettings)
    crop: CropSettings = field(default_factory=CropSettings)
    page_dimensions: Optional[PageDimensions] = None
    skipped_cards: Tuple[SkippedCard, ...] = ()
    card_type_overrides: Tuple[CardTypeOverride, ...] = ()
    card_crop: Optional[CropSettings] = None
    image_rotation: Optional[Dict[str, int]] = None
    gutter_width: float = 0

    def with_changes(self, **changes) -> 'ExtractionSettings':
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'grid': self.grid.to_dict(),
            'crop': self.crop.to_dict(),
            'skippedCards': [card.to_dict() for card in self.skipped_cards],
            'cardTypeOverrides': [override.to_dict() for override in self.card_type_overrides],
            'gutterWidth': self.gutter_width,
        }
        if self.page_dimensions is not None:
            data['pageDimensions'] = self.page_dimensions.to_dict()
        if self.card_crop is not None:
            data['cardCrop'] = self.card_crop.to_dict()
        if self.image_rotation is not None:
            data['imageRotation'] = dict(self.image_rotation)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ExtractionSettings':
        dimensions = data.get('pageDimensions')
        card_crop = data.get('cardCrop')
        rotation = data.get('imageRotation')
        return cls(
            grid=GridSettings.from_dict(data['grid']) if data.get('grid') else GridSettings(),
            crop=CropSettings.from_dict(data.get('crop') or {}),
            page_dimensions=PageDimensions(dimensions['width'], dimensions['height']) if dimensions else None,
            skipped_cards=tuple(SkippedCard.from_dict(item) for item in data.get('skippedCards') or []),
            card_type_overrides=tuple(
                CardTypeOverride.from_dict(item) for item in data.get('cardTypeOverrides') or []
            ),
            card_crop=CropSettings.from_dict(card_crop) if card_crop else None,
            image_rotation=dict(rotation) if rotation else None,
            gutter_width=data.get('gutterWidth') or 0,
        )


# Файлы и страницы

@dataclass(frozen=True)
class FileSource:
    name: str
    kind: FileKind
    original_page_count: int
    size: int = 0
    import_timestamp: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'type': self.kind.value,
            'originalPageCount': self.original_page_count,
            'size': self.size,
            'importTimestamp': self.import_timestamp,
        }


@dataclass(frozen=True)
class Page:
    source_file: str
    original_page_index: int
    file_kind: FileKind
    display_order: int = 0
    type: CardType = CardType.FRONT
    page_type: PageType = PageType.CARD
    skip: bool = False
    removed: bool = False
    rotation: Optional[int] = None
    scale: Optional[float] = None
    custom_crop: Optional[CropSettings] = None
    width: Optional[float] = None
    height: Optional[float] = None

    @property
    def is_active(self) -> bool:
        return not self.skip and not self.removed

    @property
    def identity(self) -> Tuple[str, int, FileKind]:
        return (self.source_file, self.original_page_index, self.file_kind)

    @property
    def dimensions(self) -> Optional[PageDimensions]:
        if self.width is None or self.height is None:
            return None
        return PageDimensions(self.width, self.height)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'sourceFile': self.source_file,
            'originalPageIndex': self.original_page_index,
            'fileType': self.file_kind.value,
            'displayOrder': self.display_order,
            'type': self.type.value,
            'pageType': self.page_type.value,
            'skip': self.skip,
            'removed': self.removed,
        }
        if self.rotation is not None:
            data['rotation'] = self.rotation
        if self.scale is not None:
            data['scale'] = self.scale
        if self.custom_crop is not None:
            data['customCrop'] = self.custom_crop.to_dict()
        if self.width is not None and self.height is not None:
            data['width'] = self.width
            data['height'] = self.height
        return data


# Группы

@dataclass(frozen=True)
class PageGroup:
    id: str
    name: str
    page_indices: Tuple[int, ...] = ()
    kind: GroupKind = GroupKind.MANUAL
    order: float = 0
    processing_mode: PdfMode = field(default_factory=Simplex)
    settings: Optional[Dict[str, Any]] = None
    color: str = "#3b82f6"
    created_at: float = 0.0
    modified_at: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'id': self.id,
            'name': self.name,
            'pageIndices': list(self.page_indices),
            'type': self.kind.value,
            'order': self.order,
            'processingMode': pdf_mode_to_dict(self.processing_mode),
            'color': self.color,
            'createdAt': self.created_at,
            'modifiedAt': self.modified_at,
        }
        if self.settings is not None:
            data['settings'] = self.settings
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PageGroup':
        return cls(
            id=data['id'],
            name=data['name'],
            page_indices=tuple(data.get('pageIndices') or ()),
            kind=GroupKind(data.get('type', GroupKind.MANUAL.value)),
            order=data.get('order', 0),
            processing_mode=pdf_mode_from_dict(data.get('processingMode') or {'type': 'simplex'}),
            settings=data.get('settings'),
            color=data.get('color', "#3b82f6"),
            created_at=data.get('createdAt', 0.0),
            modified_at=data.get('modifiedAt', 0.0),
        )


@dataclass(frozen=True)
class PageRecord:
    """Страница вместе с файлом-источником и группой, в которую она входит"""
    page_index: int
    page: Page
    source: Optional[FileSource]
    group_id: str
    group_name: str

    def to_dict(self) -> Dict[str, Any]:
        data = self.page.to_dict()
        data['pageIndex'] = self.page_index
        data['groupId'] = self.group_id
        data['groupName'] = self.group_name
        if self.source is not None:
            data['fileSize'] = self.source.size
            data['fileImportTimestamp'] = self.source.import_timestamp
        return data


# Результаты идентификации

@dataclass(frozen=True)
class CardInfo:
    type: CardType
    id: int


UNKNOWN_CARD = CardInfo(CardType.UNKNOWN, 0)


@dataclass(frozen=True)
class CardEntry:
    card_index: int
    page_index: int
    grid_row: int
    grid_column: int
    card_type: CardType
    card_id: int
    skipped: bool = False
    overridden: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            'cardIndex': self.card_index,
            'pageIndex': self.page_index,
            'gridRow': self.grid_row,
            'gridColumn': self.grid_column,
            'type': self.card_type.value,
            'id': self.card_id,
            'skipped': self.skipped,
            'overridden': self.overridden,
        }


class ValidationResult:
    def __init__(self):
        self.errors: List[str] = []
        self.warnings: List[str] = []
        self.is_valid: bool = True

    def add_error(self, message: str):
        self.errors.append(message)
        self.is_valid = False

    def add_warning(self, message: str):
        self.warnings.append(message)

    def get_report(self) -> str:
        report = []
        if self.errors:
            report.append("ОШИБКИ:")
            for err in self.errors:
                report.append(f"  ❌ {err}")
        if self.warnings:
            report.append("\nПРЕДУПРЕЖДЕНИЯ:")
            for warn in self.warnings:
                report.append(f"  ⚠️ {warn}")
        if self.is_valid and not self.warnings:
            report.append("✅ Настройки прошли проверку")
        return "\n".join(report)


@dataclass(frozen=True)
class DecodedFile:
    """Результат декодирования файла: источник и размеры каждой страницы"""
    source: FileSource
    page_sizes: Tuple[Tuple[float, float], ...] = ()
    payload: Any = None

    @property
    def name(self) -> str:
        return self.source.name
