"""
Deck material calculator.

Phase order: decking → framing → posts/footings → ledger → fasteners →
stairs (one group per stair set) → railing.

Stair input comes in two shapes: a list of StairSet entries, or the legacy
single-stair fields (stair_steps + stair_width). DeckDimensions.resolved_stairs()
turns either into one canonical list; nothing past the constructor looks at
the legacy fields.
"""

import enum
import math
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from ..schemas import BuildQuality, Complexity, MaterialList, ProjectType
from .base import BaseCalculator


class DeckingMaterial(str, enum.Enum):
    PRESSURE_TREATED = "pressure-treated"
    CEDAR = "cedar"
    COMPOSITE = "composite"
    PVC = "pvc"


class FramingMaterial(str, enum.Enum):
    PRESSURE_TREATED = "pressure-treated"
    CEDAR = "cedar"


class RailingStyle(str, enum.Enum):
    WOOD = "wood"
    METAL = "metal"
    COMPOSITE = "composite"
    CABLE = "cable"


class DeckSide(str, enum.Enum):
    FRONT = "front"
    BACK = "back"
    LEFT = "left"
    RIGHT = "right"


class StairSet(BaseModel):
    id: str
    steps: int = Field(ge=1, le=20)
    width: float = Field(ge=2, le=10)  # feet
    location: Optional[DeckSide] = None


class DeckDimensions(BaseModel):
    length: float = Field(ge=4, le=100)  # feet
    width: float = Field(ge=4, le=50)    # feet
    height: float = Field(ge=0, le=20)   # feet off ground
    has_stairs: bool = False
    stairs: Optional[List[StairSet]] = None
    # Legacy single-stair fields
    stair_steps: Optional[int] = Field(default=None, ge=1, le=20)
    stair_width: Optional[float] = Field(default=None, ge=2, le=10)
    has_railing: bool = False
    railing_sides: List[DeckSide] = Field(default_factory=list)

    @field_validator("railing_sides")
    @classmethod
    def _no_duplicate_sides(cls, sides):
        if len(set(sides)) != len(sides):
            raise ValueError("railing_sides must not repeat a side")
        return sides

    @field_validator("stairs")
    @classmethod
    def _unique_stair_ids(cls, stairs):
        if stairs:
            ids = [s.id for s in stairs]
            if len(set(ids)) != len(ids):
                raise ValueError("stair set ids must be unique")
        return stairs

    def resolved_stairs(self) -> List[StairSet]:
        """Canonical stair sets: the list if given, else one set from legacy fields."""
        if not self.has_stairs:
            return []
        if self.stairs:
            return list(self.stairs)
        if self.stair_steps and self.stair_width:
            return [StairSet(id="stair-1", steps=self.stair_steps,
                             width=self.stair_width, location=DeckSide.FRONT)]
        return []


class DeckOptions(BaseModel):
    decking_material: DeckingMaterial
    framing_material: FramingMaterial
    joist_spacing: Literal[12, 16, 24]  # inches on-center
    railing_style: Optional[RailingStyle] = None
    build_quality: BuildQuality


class DeckProject(BaseModel):
    dimensions: DeckDimensions
    options: DeckOptions

    @model_validator(mode="after")
    def _check_features(self):
        dims = self.dimensions
        if dims.has_stairs and not dims.resolved_stairs():
            raise ValueError("has_stairs requires at least one stair set (stairs or stair_steps + stair_width)")
        if dims.has_railing:
            if not dims.railing_sides:
                raise ValueError("has_railing requires at least one railing side")
            if self.options.railing_style is None:
                raise ValueError("has_railing requires a railing_style")
        return self


DECKING_NAMES = {
    DeckingMaterial.PRESSURE_TREATED: "Pressure-Treated Pine Decking",
    DeckingMaterial.CEDAR: "Cedar Decking",
    DeckingMaterial.COMPOSITE: "Composite Decking (Trex-style)",
    DeckingMaterial.PVC: "PVC Decking",
}

FRAMING_NAMES = {
    FramingMaterial.PRESSURE_TREATED: "Pressure-Treated",
    FramingMaterial.CEDAR: "Cedar",
}

RAILING_NAMES = {
    RailingStyle.WOOD: "Pressure-Treated Wood",
    RailingStyle.METAL: "Aluminum",
    RailingStyle.COMPOSITE: "Composite",
    RailingStyle.CABLE: "Cable",
}

RAILING_POST_NAMES = {
    RailingStyle.WOOD: '4x4 Pressure-Treated Railing Posts (42")',
    RailingStyle.METAL: 'Aluminum Railing Posts (42")',
    RailingStyle.COMPOSITE: 'Composite Railing Posts (42")',
    RailingStyle.CABLE: '4x4 Pressure-Treated Railing Posts (42")',
}

STANDARD_LUMBER_LENGTHS = [8, 10, 12, 14, 16, 18, 20]

# Structural spacing (feet)
BEAM_SPACING_FT = 8         # one beam line per 8' of deck width
BEAM_SECTION_FT = 10        # beam stock per 10' of deck length
POST_SPACING_FT = 6
RAILING_POST_SPACING_FT = 6
LAG_BOLT_SPACING_FT = 16 / 12
STRINGERS_PER_SET = 3

SCREWS_PER_SQFT = 2.5
SCREWS_PER_BOX = 1000       # ~1000 screws per 5 lb box
CONCRETE_BAGS_PER_FOOTING = 3
BALUSTERS_PER_FOOT = 2.5    # 4" spacing
STAIR_RAIL_FT_PER_STEP = 1.2

# Labor
HOURS_PER_SQFT = {
    Complexity.SIMPLE: 0.5,
    Complexity.MODERATE: 0.75,
    Complexity.COMPLEX: 1.0,
}
HOURS_PER_STAIR_SET = 2.0
HOURS_PER_STEP = 0.5
RAILING_FT_PER_HOUR = 4.0


def _ft(value: float) -> str:
    """12.0 → '12', 12.5 → '12.5'."""
    return "%g" % value


class DeckMaterialCalculator(BaseCalculator):

    PROJECT_TYPE = ProjectType.DECK
    PROJECT_MODEL = DeckProject
    WASTE_FACTOR = 1.15  # decking cut loss
    PREMIUM_LABOR_MULTIPLIER = 1.15

    def calculate(self) -> MaterialList:
        self._reset()
        stair_sets = self.dimensions.resolved_stairs()
        area = self.dimensions.length * self.dimensions.width

        items = []
        items.extend(self._decking(area))
        items.extend(self._framing())
        items.extend(self._posts_and_footings())
        items.extend(self._ledger())
        items.extend(self._fasteners(area))
        for index, stair_set in enumerate(stair_sets, start=1):
            items.extend(self._stairs(index, stair_set))
        if self.dimensions.has_railing:
            items.extend(self._railing(stair_sets))

        complexity = self._complexity(area)
        labor_hours = self._labor_hours(area, complexity, stair_sets)

        return self.make_material_list(
            items=items,
            area=area,
            labor_hours=labor_hours,
            complexity=complexity,
        )

    # --- Phases ---

    def _decking(self, area: float) -> list:
        pct = round((self.waste_factor - 1) * 100)
        return [self.make_material_item(
            item_id="decking-boards",
            category="Decking",
            name=self._decking_name(),
            quantity=self.apply_waste(area),
            unit="sqft",
            description=f"{_ft(self.dimensions.length)}' x {_ft(self.dimensions.width)}' deck surface",
            notes=f"Includes {pct}% waste factor",
        )]

    def _framing(self) -> list:
        dims = self.dimensions
        framing = self._framing_name()
        items = []

        num_joists = self._joist_count()
        joist_length = self._closest_lumber_length(dims.width)
        items.append(self.make_material_item(
            item_id="joists",
            category="Framing",
            name=f"2x8 {framing} Joists",
            quantity=num_joists,
            unit="each",
            description=f"{joist_length}' joists at {self.options.joist_spacing}\" OC",
            notes=f"Spanning {_ft(dims.width)}' width",
        ))

        rim_length = dims.length * 2 + dims.width * 2
        items.append(self.make_material_item(
            item_id="rim-joists",
            category="Framing",
            name=f"2x8 {framing} Rim Joists",
            quantity=self.pieces_for_length(rim_length, 8),
            unit="each",
            description="Perimeter rim joists",
            notes=f"Total linear feet: {math.ceil(rim_length)}'",
        ))

        beam_lines = self.support_count(dims.width, BEAM_SPACING_FT)
        items.append(self.make_material_item(
            item_id="beams",
            category="Framing",
            name=f"2x10 {framing} Beams",
            quantity=beam_lines * self.support_count(dims.length, BEAM_SECTION_FT),
            unit="each",
            description="Support beams",
            notes="Double 2x10 beam configuration",
        ))
        return items

    def _posts_and_footings(self) -> list:
        dims = self.dimensions
        total_posts = self._post_count()
        # height + 2' below grade + 6" above the deck surface
        post_length = self._closest_lumber_length(dims.height + 2.5)

        return [
            self.make_material_item(
                item_id="posts",
                category="Structure",
                name=f"6x6 {self._framing_name()} Posts",
                quantity=total_posts,
                unit="each",
                description=f"{post_length}' posts for {_ft(dims.height)}' deck height",
                notes=f"{total_posts} posts at {POST_SPACING_FT}' spacing",
            ),
            self.make_material_item(
                item_id="concrete",
                category="Foundation",
                name="Concrete Mix (80lb bags)",
                quantity=total_posts * CONCRETE_BAGS_PER_FOOTING,
                unit="bags",
                description='12" diameter x 36" deep footings',
                notes="Code-compliant frost depth",
            ),
            self.make_material_item(
                item_id="footing-forms",
                category="Foundation",
                name='12" Concrete Footing Forms',
                quantity=total_posts,
                unit="each",
                description="Cardboard tube forms",
                notes='36" length',
            ),
        ]

    def _ledger(self) -> list:
        length = self.dimensions.length
        return [
            self.make_material_item(
                item_id="ledger-board",
                category="Framing",
                name=f"2x8 {self._framing_name()} Ledger Board",
                quantity=self.pieces_for_length(length, 8),
                unit="each",
                description="Attaches deck to house",
                notes=f"{_ft(length)}' total length",
            ),
            self.make_material_item(
                item_id="ledger-flashing",
                category="Waterproofing",
                name="Galvanized Ledger Flashing",
                quantity=math.ceil(length),
                unit="lnft",
                description="Protects house from water damage",
                notes="Code-required flashing",
            ),
        ]

    def _fasteners(self, area: float) -> list:
        composite = self.options.decking_material in (DeckingMaterial.COMPOSITE, DeckingMaterial.PVC)
        return [
            self.make_material_item(
                item_id="deck-screws",
                category="Fasteners",
                name="Deck Screws (5lb box)",
                quantity=math.ceil(area * SCREWS_PER_SQFT / SCREWS_PER_BOX),
                unit="boxes",
                description="Exterior grade deck screws",
                notes="Composite-rated screws" if composite else "Standard deck screws",
            ),
            self.make_material_item(
                item_id="joist-hangers",
                category="Fasteners",
                name="Galvanized Joist Hangers (2x8)",
                quantity=self._joist_count() * 2,  # both ends
                unit="each",
                description="Heavy-duty joist hangers",
                notes="Includes hanger nails",
            ),
            self.make_material_item(
                item_id="lag-bolts",
                category="Fasteners",
                name='1/2" x 6" Galvanized Lag Bolts',
                # staggered pair every 16"
                quantity=self.spacing_count(self.dimensions.length, LAG_BOLT_SPACING_FT) * 2,
                unit="each",
                description="Ledger board attachment",
                notes='Staggered pairs at 16" spacing',
            ),
        ]

    def _stairs(self, set_number: int, stair_set: StairSet) -> list:
        framing = self._framing_name()
        location = stair_set.location.value if stair_set.location else None
        location_text = f" ({location})" if location else ""
        width = _ft(stair_set.width)
        tags = {"stair_set": set_number, "location": location}

        items = [
            self.make_material_item(
                item_id=f"stair-stringers-{set_number}",
                category="Stairs",
                name=f"2x12 {framing} Stringers{location_text}",
                quantity=STRINGERS_PER_SET,
                unit="each",
                description=f"{stair_set.steps}-step staircase support",
                notes=f"{width}' wide stairs - Set {set_number}",
                **tags,
            ),
            self.make_material_item(
                item_id=f"stair-treads-{set_number}",
                category="Stairs",
                name=f"{self._decking_name()} Stair Treads{location_text}",
                quantity=stair_set.steps,
                unit="sets",
                description="Stair tread boards",
                notes=f"{width}' wide per step - Set {set_number}",
                **tags,
            ),
        ]
        # Closed risers on premium builds only
        if self.is_premium:
            items.append(self.make_material_item(
                item_id=f"stair-risers-{set_number}",
                category="Stairs",
                name=f"1x8 {framing} Risers{location_text}",
                quantity=stair_set.steps,
                unit="each",
                description="Closed riser boards",
                notes=f"Premium enclosed stairs - Set {set_number}",
                **tags,
            ))
        return items

    def _railing(self, stair_sets: List[StairSet]) -> list:
        sides = self.dimensions.railing_sides
        style = self.options.railing_style
        railing_length = self._railing_length(stair_sets)
        rail_name = self.label(RAILING_NAMES, style, "railing_style")
        total_ft = math.ceil(railing_length)

        items = [
            self.make_material_item(
                item_id="railing-posts",
                category="Railing",
                name=self.label(RAILING_POST_NAMES, style, "railing_style"),
                # line posts + one corner post per side
                quantity=self.support_count(railing_length, RAILING_POST_SPACING_FT) + len(sides),
                unit="each",
                description="Railing support posts",
                notes=f"{RAILING_POST_SPACING_FT}' spacing, code-compliant",
            ),
            self.make_material_item(
                item_id="top-rail",
                category="Railing",
                name=f"{rail_name} Top Rail",
                quantity=self.pieces_for_length(railing_length, 8),
                unit="each",
                description="Top horizontal rail",
                notes=f"{total_ft}' total length",
            ),
            self.make_material_item(
                item_id="bottom-rail",
                category="Railing",
                name=f"{rail_name} Bottom Rail",
                quantity=self.pieces_for_length(railing_length, 8),
                unit="each",
                description="Bottom horizontal rail",
                notes=f"{total_ft}' total length",
            ),
        ]

        if style == RailingStyle.CABLE:
            items.append(self.make_material_item(
                item_id="cable-railing",
                category="Railing",
                name="Stainless Steel Cable Railing Kit",
                quantity=self.pieces_for_length(railing_length, 8),
                unit="kits",
                description="Cable railing system",
                notes=f"{total_ft}' total length",
            ))
        else:
            items.append(self.make_material_item(
                item_id="balusters",
                category="Railing",
                name=f"{rail_name} Balusters",
                quantity=math.ceil(round(railing_length * BALUSTERS_PER_FOOT, 6)),
                unit="each",
                description="Vertical balusters",
                notes='4" spacing, code-compliant',
            ))
        return items

    # --- Derived values ---

    def _joist_count(self) -> int:
        return self.spacing_count(self.dimensions.length, self.options.joist_spacing / 12)

    def _post_count(self) -> int:
        posts_per_beam = self.support_count(self.dimensions.length, POST_SPACING_FT)
        beam_lines = self.support_count(self.dimensions.width, BEAM_SPACING_FT)
        return posts_per_beam * beam_lines

    def _railing_length(self, stair_sets: List[StairSet]) -> float:
        dims = self.dimensions
        length = 0.0
        for side in dims.railing_sides:
            if side in (DeckSide.FRONT, DeckSide.BACK):
                length += dims.length
            else:
                length += dims.width
        # Both sides of every staircase
        for stair_set in stair_sets:
            length += stair_set.steps * STAIR_RAIL_FT_PER_STEP * 2
        return length

    def _complexity(self, area: float) -> Complexity:
        dims = self.dimensions
        opts = self.options
        score = 0

        if area > 400:
            score += 2
        elif area > 200:
            score += 1

        if dims.height > 6:
            score += 2
        elif dims.height > 3:
            score += 1

        if dims.has_stairs:
            score += 1
        if dims.has_railing:
            score += 1
        if opts.decking_material in (DeckingMaterial.COMPOSITE, DeckingMaterial.PVC):
            score += 1
        if opts.railing_style in (RailingStyle.CABLE, RailingStyle.METAL):
            score += 1

        if score >= 6:
            return Complexity.COMPLEX
        if score >= 3:
            return Complexity.MODERATE
        return Complexity.SIMPLE

    def _labor_hours(self, area: float, complexity: Complexity, stair_sets: List[StairSet]) -> int:
        hours = area * HOURS_PER_SQFT[complexity]
        for stair_set in stair_sets:
            hours += HOURS_PER_STAIR_SET + stair_set.steps * HOURS_PER_STEP
        if self.dimensions.has_railing:
            hours += self._railing_length(stair_sets) / RAILING_FT_PER_HOUR
        return self.finish_labor_hours(hours)

    def _decking_name(self) -> str:
        return self.label(DECKING_NAMES, self.options.decking_material, "decking_material")

    def _framing_name(self) -> str:
        return self.label(FRAMING_NAMES, self.options.framing_material, "framing_material")

    @staticmethod
    def _closest_lumber_length(feet: float) -> int:
        for length in STANDARD_LUMBER_LENGTHS:
            if length >= feet:
                return length
        return math.ceil(feet)
