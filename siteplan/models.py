"""
Site feature model for the lot constraint engine.

Existing conditions (buildings, septic components, wells, easements,
wetlands) and candidate structures, plus the comment and permit types the
engine emits. Inputs are frozen: the engine only ever reads a snapshot.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple, Any

from siteplan.geometry import Rect


# ═══════════════════════════════════════════════════════════════════════════
# EXISTING SITE FEATURES
# ═══════════════════════════════════════════════════════════════════════════
class FeatureKind(Enum):
    """Closed set of existing-feature kinds the evaluator understands."""
    STRUCTURE = "structure"
    SEPTIC_TANK = "septic_tank"
    DRAINFIELD = "drainfield"
    RESERVE_AREA = "reserve_area"
    WELL = "well"
    WETLAND = "wetland"
    DRIVEWAY = "driveway"
    EASEMENT = "easement"
    UTILITY_LINE = "utility_line"


SEPTIC_KINDS = (FeatureKind.SEPTIC_TANK, FeatureKind.DRAINFIELD, FeatureKind.RESERVE_AREA)

# Fixed triggers in categories also keyed by feature id carry this prefix,
# so they can never collide with a feature's comment id.
RULE_PREFIX = "rule:"


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class SiteFeature:
    """
    An existing condition on the lot.

    required_buffer is the clearance (feet) a new structure must keep from
    this feature. Wells also carry a location point used for distance
    checks; it defaults to the centre of the well's rectangle.
    """
    id: str
    kind: FeatureKind
    x: float
    y: float
    width: float
    height: float
    required_buffer: float = 0.0
    editable: bool = False
    label: str = ""
    structure_type: Optional[str] = None  # "house", "garage", "shed", "pool" for kind=structure
    location: Optional[Point] = None

    def __post_init__(self):
        if self.id.startswith(RULE_PREFIX):
            raise ValueError(f"Feature {self.id}: ids starting with '{RULE_PREFIX}' are reserved")
        if self.required_buffer < 0:
            raise ValueError(f"Feature {self.id}: required_buffer must be >= 0, got {self.required_buffer}")
        if self.width < 0 or self.height < 0:
            raise ValueError(f"Feature {self.id}: negative dimensions {self.width}x{self.height}")
        if not self.label:
            object.__setattr__(self, "label", self.kind.value.replace("_", " ").title())
        if self.kind == FeatureKind.WELL and self.location is None:
            cx, cy = self.rect.center
            object.__setattr__(self, "location", Point(cx, cy))

    @property
    def rect(self) -> Rect:
        return Rect(self.x, self.y, self.width, self.height)

    @property
    def area(self) -> float:
        return self.width * self.height


# ═══════════════════════════════════════════════════════════════════════════
# EASEMENTS
# ═══════════════════════════════════════════════════════════════════════════
class EasementType(Enum):
    UTILITY = "utility"
    ACCESS = "access"
    DRAINAGE = "drainage"
    CONSERVATION = "conservation"
    SCENIC = "scenic"

    @property
    def blocks_structures(self) -> bool:
        """Whether permanent structures are barred inside the easement."""
        return self in (EasementType.UTILITY, EasementType.DRAINAGE, EasementType.CONSERVATION)


class EasementEdge(Enum):
    FRONT = "front"
    LEFT = "left"
    RIGHT = "right"
    REAR = "rear"
    INTERIOR = "interior"


@dataclass(frozen=True)
class Easement:
    """A recorded right held by a third party over part of the lot."""
    id: str
    type: EasementType
    holder: str
    width: float
    edge: EasementEdge
    restrictions: Tuple[str, ...] = ()
    recorded_document: Optional[str] = None
    extent_depth: Optional[float] = None  # how far a side strip runs into the lot

    def __post_init__(self):
        if self.width <= 0:
            raise ValueError(f"Easement {self.id}: width must be positive")
        object.__setattr__(self, "restrictions", tuple(self.restrictions))

    def project(self, lot_width: float, lot_depth: float, extent: Optional[Rect] = None) -> SiteFeature:
        """
        Build the geometric feature for this easement.

        The feature shares the easement's id so the evaluator and the
        recorded easement stay correlated. Interior easements have no
        implied position and need an explicit extent.
        """
        if extent is None:
            if self.edge == EasementEdge.INTERIOR:
                raise ValueError(f"Easement {self.id}: interior easements need an explicit extent")
            depth = self.extent_depth if self.extent_depth is not None else lot_depth
            if self.edge == EasementEdge.FRONT:
                extent = Rect(0, 0, lot_width, self.width)
            elif self.edge == EasementEdge.REAR:
                extent = Rect(0, lot_depth - self.width, lot_width, self.width)
            elif self.edge == EasementEdge.LEFT:
                extent = Rect(0, 0, self.width, depth)
            else:
                extent = Rect(lot_width - self.width, 0, self.width, depth)

        return SiteFeature(
            id=self.id,
            kind=FeatureKind.EASEMENT,
            x=extent.x,
            y=extent.y,
            width=extent.width,
            height=extent.height,
            label=f"{self.type.value.title()} Easement ({self.width:g}')",
        )


# ═══════════════════════════════════════════════════════════════════════════
# SITE MODEL
# ═══════════════════════════════════════════════════════════════════════════
class SepticSuitability(Enum):
    WELL_SUITED = "well_suited"
    SOMEWHAT_LIMITED = "somewhat_limited"
    VERY_LIMITED = "very_limited"
    NOT_RATED = "not_rated"


@dataclass(frozen=True)
class SiteModel:
    """
    Everything known about existing conditions on one lot.

    Built once per property lookup and read-only afterwards.
    """
    features: Tuple[SiteFeature, ...] = ()
    easements: Tuple[Easement, ...] = ()

    # Utilities
    sewer_available: bool = False
    sewer_distance_ft: Optional[float] = None
    water_available: bool = True
    water_distance_ft: Optional[float] = None
    gas_available: bool = False
    electric_available: bool = True
    neighbor_well_distance_ft: Optional[float] = None

    # Environment
    wetlands_mapped: bool = False
    flood_zone: Optional[str] = None
    slope_percent: float = 0.0
    soil_type: str = ""
    septic_suitability: SepticSuitability = SepticSuitability.NOT_RATED

    def __post_init__(self):
        object.__setattr__(self, "features", tuple(self.features))
        object.__setattr__(self, "easements", tuple(self.easements))

        seen = set()
        for feature in self.features:
            if feature.id in seen:
                raise ValueError(f"Duplicate site feature id: {feature.id}")
            seen.add(feature.id)

        for easement in self.easements:
            projection = self.feature_by_id(easement.id)
            if projection is None or projection.kind != FeatureKind.EASEMENT:
                raise ValueError(f"Easement {easement.id} has no matching easement feature")

    def features_of(self, *kinds: FeatureKind) -> List[SiteFeature]:
        return [f for f in self.features if f.kind in kinds]

    def feature_by_id(self, feature_id: str) -> Optional[SiteFeature]:
        for feature in self.features:
            if feature.id == feature_id:
                return feature
        return None

    def easement_for(self, feature: SiteFeature) -> Optional[Easement]:
        for easement in self.easements:
            if easement.id == feature.id:
                return easement
        return None

    @property
    def existing_structures(self) -> List[SiteFeature]:
        return self.features_of(FeatureKind.STRUCTURE)

    @property
    def on_site_well(self) -> bool:
        return bool(self.features_of(FeatureKind.WELL))

    @property
    def has_drainfield(self) -> bool:
        return bool(self.features_of(FeatureKind.DRAINFIELD))

    @property
    def wetlands_present(self) -> bool:
        return self.wetlands_mapped or bool(self.features_of(FeatureKind.WETLAND))


# ═══════════════════════════════════════════════════════════════════════════
# CANDIDATE STRUCTURES
# ═══════════════════════════════════════════════════════════════════════════
class StructureType(Enum):
    PRIMARY_DWELLING = "house"
    ADU = "adu"
    DADU = "dadu"
    GARAGE = "garage"
    CARPORT = "carport"
    SHOP = "shop"
    BARN = "barn"
    POOL = "pool"
    DECK = "deck"
    PATIO = "patio"
    SHED = "shed"
    OTHER = "other"


DWELLING_TYPES = (StructureType.PRIMARY_DWELLING, StructureType.ADU, StructureType.DADU)


@dataclass(frozen=True)
class CandidateStructure:
    """A structure the user is placing. Each evaluation sees a fresh snapshot."""
    id: str
    type: StructureType
    label: str
    x: float
    y: float
    width: float
    depth: float
    bedrooms: Optional[int] = None
    stories: Optional[int] = None
    rotation: float = 0.0  # display only

    def __post_init__(self):
        if self.width <= 0 or self.depth <= 0:
            raise ValueError(f"Structure {self.id}: width and depth must be positive")

    @property
    def rect(self) -> Rect:
        return Rect(self.x, self.y, self.width, self.depth)

    @property
    def footprint(self) -> float:
        return self.width * self.depth

    @property
    def is_dwelling(self) -> bool:
        return self.type in DWELLING_TYPES

    @property
    def is_primary(self) -> bool:
        return self.type == StructureType.PRIMARY_DWELLING

    @property
    def bears_bedrooms(self) -> bool:
        """
        Adds bedrooms, and with them septic design flow.

        A dwelling with no bedroom count is assumed to add at least one.
        """
        if self.bedrooms is None:
            return self.is_dwelling
        return self.bedrooms > 0


# ═══════════════════════════════════════════════════════════════════════════
# ENGINE OUTPUT
# ═══════════════════════════════════════════════════════════════════════════
class Severity(Enum):
    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"
    SUCCESS = "success"

    @property
    def rank(self) -> int:
        return {"critical": 3, "warning": 2, "info": 1, "success": 0}[self.value]

    @property
    def is_problem(self) -> bool:
        return self in (Severity.CRITICAL, Severity.WARNING)


class CommentCategory(Enum):
    SETBACK = "setback"
    EASEMENT = "easement"
    SEPTIC = "septic"
    WELL = "well"
    UTILITY = "utility"
    ENVIRONMENTAL = "environmental"
    STRUCTURE = "structure"
    PERMIT = "permit"
    COVERAGE = "coverage"


def make_comment_id(category: CommentCategory, structure_id: Optional[str], trigger: str) -> str:
    """Stable id from (category, structure, triggering feature/rule)."""
    return f"{category.value}:{structure_id or 'lot'}:{trigger}"


def rule_trigger(name: str) -> str:
    return f"{RULE_PREFIX}{name}"


@dataclass(frozen=True)
class Comment:
    """One piece of placement feedback."""
    id: str
    category: CommentCategory
    severity: Severity
    title: str
    message: str
    citation: Optional[str] = None
    suggested_action: Optional[str] = None
    structure_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "category": self.category.value,
            "severity": self.severity.value,
            "title": self.title,
            "message": self.message,
            "citation": self.citation,
            "suggested_action": self.suggested_action,
            "structure_id": self.structure_id,
        }


@dataclass(frozen=True)
class PermitRequirement:
    permit_type: str
    authority: str
    estimated_fee_range: str
    timeline_estimate: str
    required: bool
    triggered_by: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "permit_type": self.permit_type,
            "authority": self.authority,
            "estimated_fee_range": self.estimated_fee_range,
            "timeline_estimate": self.timeline_estimate,
            "required": self.required,
            "triggered_by": self.triggered_by,
        }
