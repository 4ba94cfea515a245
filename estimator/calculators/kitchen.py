"""
Kitchen remodel material calculator.

Phase order: demolition → cabinets → countertops → backsplash → flooring →
appliances → plumbing → electrical → paint → hardware & accessories.

Quantities follow IRC wet-area rules and typical installer throughput.
Demolition labor is reported separately from installation labor.
"""

import enum
import math
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from ..schemas import BuildQuality, MaterialList, ProjectType
from .base import (
    SQFT_PER_GROUT_BAG,
    SQFT_PER_THINSET_BAG,
    BaseCalculator,
)


class CabinetStyle(str, enum.Enum):
    STOCK = "stock"
    SEMI_CUSTOM = "semi-custom"
    CUSTOM = "custom"


class CabinetMaterial(str, enum.Enum):
    PARTICLE_BOARD = "particle-board"
    PLYWOOD = "plywood"
    SOLID_WOOD = "solid-wood"


class CabinetFinish(str, enum.Enum):
    LAMINATE = "laminate"
    PAINT = "paint"
    STAIN = "stain"


class CountertopMaterial(str, enum.Enum):
    LAMINATE = "laminate"
    GRANITE = "granite"
    QUARTZ = "quartz"
    MARBLE = "marble"
    BUTCHER_BLOCK = "butcher-block"
    CONCRETE = "concrete"


class CountertopEdge(str, enum.Enum):
    STANDARD = "standard"
    BEVELED = "beveled"
    BULLNOSE = "bullnose"
    OGEE = "ogee"


class BacksplashMaterial(str, enum.Enum):
    CERAMIC = "ceramic"
    PORCELAIN = "porcelain"
    GLASS = "glass"
    STONE = "stone"
    SUBWAY_TILE = "subway-tile"


class KitchenFlooring(str, enum.Enum):
    VINYL = "vinyl"
    LAMINATE = "laminate"
    HARDWOOD = "hardwood"
    TILE = "tile"
    LVP = "lvp"


class KitchenSink(str, enum.Enum):
    NONE = "none"
    SINGLE_BOWL = "single-bowl"
    DOUBLE_BOWL = "double-bowl"
    FARMHOUSE = "farmhouse"


class KitchenFaucet(str, enum.Enum):
    NONE = "none"
    STANDARD = "standard"
    PULLDOWN = "pulldown"
    TOUCHLESS = "touchless"


class KitchenDimensions(BaseModel):
    length: float = Field(ge=6, le=40)   # feet
    width: float = Field(ge=6, le=30)    # feet
    ceiling_height: float = Field(default=8, ge=7, le=12)

    upper_cabinet_linear_feet: float = Field(gt=0, le=100)
    lower_cabinet_linear_feet: float = Field(gt=0, le=100)

    countertop_square_feet: float = Field(gt=0, le=500)
    countertop_overhang: float = Field(default=1, ge=0, le=12)  # inches

    has_backsplash: bool = False
    backsplash_square_feet: Optional[float] = Field(default=None, gt=0, le=200)

    include_flooring: bool = False


class Appliances(BaseModel):
    refrigerator: bool = False
    range: bool = False
    microwave: bool = False
    dishwasher: bool = False
    range_hood: bool = False

    def count(self) -> int:
        return sum([self.refrigerator, self.range, self.microwave,
                    self.dishwasher, self.range_hood])


class KitchenLighting(BaseModel):
    recessed: int = Field(default=0, ge=0, le=20)
    pendant: int = Field(default=0, ge=0, le=10)
    under_cabinet: bool = False


class KitchenOptions(BaseModel):
    cabinet_style: CabinetStyle
    cabinet_material: CabinetMaterial
    cabinet_finish: CabinetFinish

    countertop_material: CountertopMaterial
    countertop_edge: CountertopEdge = CountertopEdge.STANDARD

    backsplash_material: Optional[BacksplashMaterial] = None
    flooring_material: Optional[KitchenFlooring] = None

    appliances: Appliances = Field(default_factory=Appliances)

    sink: KitchenSink
    faucet: KitchenFaucet

    lighting: KitchenLighting = Field(default_factory=KitchenLighting)

    # Code: at least two 20A GFCI-protected countertop circuits
    gfci_outlets: int = Field(ge=2, le=20)
    standard_outlets: int = Field(default=0, ge=0, le=20)

    paint_walls: bool = False
    paint_ceiling: bool = False

    include_demolition: bool = False

    build_quality: BuildQuality


class KitchenProject(BaseModel):
    dimensions: KitchenDimensions
    options: KitchenOptions

    @model_validator(mode="after")
    def _check_features(self):
        dims = self.dimensions
        opts = self.options
        if dims.has_backsplash:
            if dims.backsplash_square_feet is None:
                raise ValueError("has_backsplash requires backsplash_square_feet")
            if opts.backsplash_material is None:
                raise ValueError("has_backsplash requires a backsplash_material")
        if dims.include_flooring and opts.flooring_material is None:
            raise ValueError("include_flooring requires a flooring_material")
        return self


CABINET_STYLE_NAMES = {
    CabinetStyle.STOCK: "Stock",
    CabinetStyle.SEMI_CUSTOM: "Semi-Custom",
    CabinetStyle.CUSTOM: "Custom",
}

CABINET_MATERIAL_NAMES = {
    CabinetMaterial.PARTICLE_BOARD: "Particle Board",
    CabinetMaterial.PLYWOOD: "Plywood",
    CabinetMaterial.SOLID_WOOD: "Solid Wood",
}

COUNTERTOP_NAMES = {
    CountertopMaterial.LAMINATE: "Laminate",
    CountertopMaterial.GRANITE: "Granite",
    CountertopMaterial.QUARTZ: "Quartz",
    CountertopMaterial.MARBLE: "Marble",
    CountertopMaterial.BUTCHER_BLOCK: "Butcher Block",
    CountertopMaterial.CONCRETE: "Concrete",
}

STONE_COUNTERTOPS = (CountertopMaterial.GRANITE, CountertopMaterial.QUARTZ, CountertopMaterial.MARBLE)

BACKSPLASH_NAMES = {
    BacksplashMaterial.CERAMIC: "Ceramic Tile",
    BacksplashMaterial.PORCELAIN: "Porcelain Tile",
    BacksplashMaterial.GLASS: "Glass Tile",
    BacksplashMaterial.STONE: "Natural Stone",
    BacksplashMaterial.SUBWAY_TILE: "Subway Tile",
}

FLOORING_NAMES = {
    KitchenFlooring.VINYL: "Vinyl Plank",
    KitchenFlooring.LAMINATE: "Laminate",
    KitchenFlooring.HARDWOOD: "Hardwood",
    KitchenFlooring.TILE: "Ceramic/Porcelain Tile",
    KitchenFlooring.LVP: "Luxury Vinyl Plank (LVP)",
}

FLOATING_FLOORS = (KitchenFlooring.VINYL, KitchenFlooring.LAMINATE, KitchenFlooring.LVP)

SINK_NAMES = {
    KitchenSink.SINGLE_BOWL: "Single Bowl Kitchen Sink",
    KitchenSink.DOUBLE_BOWL: "Double Bowl Kitchen Sink",
    KitchenSink.FARMHOUSE: "Farmhouse Sink",
}

FAUCET_NAMES = {
    KitchenFaucet.STANDARD: "Standard Kitchen Faucet",
    KitchenFaucet.PULLDOWN: "Pull-Down Kitchen Faucet",
    KitchenFaucet.TOUCHLESS: "Touchless Kitchen Faucet",
}

FEET_PER_CABINET = 3
HANDLES_PER_CABINET = 2

# Labor throughput
HOURS_PER_CABINET = 2.5
STONE_COUNTERTOP_HOURS = 8
COUNTERTOP_SQFT_PER_HOUR = 10
BACKSPLASH_SQFT_PER_HOUR = 8
FLOORING_SQFT_PER_HOUR = 15
HOURS_PER_APPLIANCE = 1.5
PLUMBING_HOURS = 5
HOURS_PER_ELECTRICAL_POINT = 1
UNDER_CABINET_LIGHTING_HOURS = 4
PAINT_SQFT_PER_HOUR = 20

DEMOLITION_BASE_HOURS = 8
FLOOR_REMOVAL_SQFT_PER_HOUR = 50


class KitchenMaterialCalculator(BaseCalculator):

    PROJECT_TYPE = ProjectType.KITCHEN
    PROJECT_MODEL = KitchenProject
    WASTE_FACTOR = 1.10
    PREMIUM_LABOR_MULTIPLIER = 1.2

    def calculate(self) -> MaterialList:
        self._reset()
        dims = self.dimensions
        floor_area = dims.length * dims.width

        items = []
        if self.options.include_demolition:
            items.extend(self._demolition(floor_area))
        items.extend(self._cabinets())
        items.extend(self._countertops())
        if dims.has_backsplash:
            items.extend(self._backsplash())
        if dims.include_flooring:
            items.extend(self._flooring(floor_area))
        items.extend(self._appliances())
        items.extend(self._plumbing())
        items.extend(self._electrical())
        items.extend(self._paint(floor_area))
        items.extend(self._hardware_and_accessories())

        labor_hours = self._labor_hours(floor_area)
        demolition_hours = self._demolition_hours(floor_area) if self.options.include_demolition else 0

        return self.make_material_list(
            items=items,
            area=floor_area,
            labor_hours=labor_hours,
            demolition_hours=demolition_hours,
            complexity=self.complexity_from_hours(labor_hours, moderate_at=60, complex_at=120),
        )

    # --- Phases ---

    def _demolition(self, floor_area: float) -> list:
        dims = self.dimensions
        items = [
            self.make_material_item(
                "Demolition", "Cabinet Removal & Disposal",
                dims.upper_cabinet_linear_feet + dims.lower_cabinet_linear_feet,
                "linear ft", notes="Includes disposal fees",
            ),
            self.make_material_item(
                "Demolition", "Countertop Removal & Disposal",
                dims.countertop_square_feet, "sq ft",
            ),
        ]
        if dims.include_flooring:
            items.append(self.make_material_item(
                "Demolition", "Flooring Removal", floor_area, "sq ft",
            ))
        items.append(self.make_material_item(
            "Demolition", "Dumpster Rental", 1, "unit", notes="10-yard dumpster",
        ))
        return items

    def _cabinets(self) -> list:
        dims = self.dimensions
        opts = self.options
        style = self.label(CABINET_STYLE_NAMES, opts.cabinet_style, "cabinet_style")
        material = self.label(CABINET_MATERIAL_NAMES, opts.cabinet_material, "cabinet_material")
        finish_note = f"{opts.cabinet_finish.value} finish"

        total_cabinets = self._cabinet_count()
        return [
            self.make_material_item(
                "Cabinets", f"Upper Cabinets - {style} ({material})",
                dims.upper_cabinet_linear_feet, "linear ft", notes=finish_note,
            ),
            self.make_material_item(
                "Cabinets", f"Lower Cabinets - {style} ({material})",
                dims.lower_cabinet_linear_feet, "linear ft", notes=finish_note,
            ),
            self.make_material_item(
                "Cabinets", "Cabinet Hardware (Handles/Knobs)",
                total_cabinets * HANDLES_PER_CABINET, "pieces",
                notes="Premium quality" if self.is_premium else "Standard quality",
            ),
            self.make_material_item(
                "Cabinets", "Cabinet Installation Hardware", 1, "set",
                notes="Screws, shims, anchors",
            ),
        ]

    def _countertops(self) -> list:
        opts = self.options
        material = self.label(COUNTERTOP_NAMES, opts.countertop_material, "countertop_material")
        items = [self.make_material_item(
            "Countertops", f"{material} Countertop",
            self.apply_waste(self.dimensions.countertop_square_feet), "sq ft",
            notes=f"{opts.countertop_edge.value} edge profile",
        )]

        if opts.countertop_material in STONE_COUNTERTOPS:
            items.append(self.make_material_item(
                "Countertops", "Stone Countertop Fabrication & Installation", 1, "job",
                notes="Includes cutting, edging, sealing",
            ))
        elif opts.countertop_material == CountertopMaterial.LAMINATE:
            items.append(self.make_material_item(
                "Countertops", "Laminate Installation Materials", 1, "set",
                notes="Adhesive, backer strips, end caps",
            ))

        if opts.sink != KitchenSink.NONE:
            items.append(self.make_material_item(
                "Countertops", "Sink Cutout", 1, "cutout",
                notes="Professional cutting and polishing",
            ))
        return items

    def _backsplash(self) -> list:
        material = self.label(BACKSPLASH_NAMES, self.options.backsplash_material, "backsplash_material")
        sqft = self.apply_waste(self.dimensions.backsplash_square_feet)
        return [
            self.make_material_item("Backsplash", material, sqft, "sq ft"),
            self.make_material_item(
                "Backsplash", "Tile Adhesive (Thinset)",
                self.bags_for_area(sqft, SQFT_PER_THINSET_BAG), "bags", notes="50 lb bags",
            ),
            self.make_material_item(
                "Backsplash", "Grout",
                self.bags_for_area(sqft, SQFT_PER_GROUT_BAG), "bags", notes="25 lb bags, sanded",
            ),
            self.make_material_item(
                "Backsplash", "Grout Sealer", 1, "bottle", notes="Penetrating sealer",
            ),
        ]

    def _flooring(self, floor_area: float) -> list:
        flooring = self.options.flooring_material
        material = self.label(FLOORING_NAMES, flooring, "flooring_material")
        sqft = self.apply_waste(floor_area)

        items = [self.make_material_item("Flooring", material, sqft, "sq ft")]
        if flooring in FLOATING_FLOORS:
            items.append(self.make_material_item(
                "Flooring", "Underlayment", sqft, "sq ft", notes="Moisture barrier",
            ))
        if flooring == KitchenFlooring.TILE:
            items.append(self.make_material_item(
                "Flooring", "Floor Tile Adhesive",
                self.bags_for_area(sqft, SQFT_PER_THINSET_BAG), "bags",
            ))
            items.append(self.make_material_item(
                "Flooring", "Floor Grout",
                self.bags_for_area(sqft, SQFT_PER_GROUT_BAG), "bags",
            ))

        perimeter = (self.dimensions.length + self.dimensions.width) * 2
        items.append(self.make_material_item(
            "Flooring", "Transition Strips & Trim", math.ceil(perimeter), "linear ft",
        ))
        return items

    def _appliances(self) -> list:
        appliances = self.options.appliances
        grade = " (Premium)" if self.is_premium else " (Standard)"
        items = []
        if appliances.refrigerator:
            items.append(self.make_material_item("Appliances", "Refrigerator" + grade, 1, "unit"))
        if appliances.range:
            items.append(self.make_material_item("Appliances", "Range/Stove" + grade, 1, "unit"))
        if appliances.microwave:
            items.append(self.make_material_item(
                "Appliances", "Microwave", 1, "unit", notes="Over-range or countertop",
            ))
        if appliances.dishwasher:
            items.append(self.make_material_item("Appliances", "Dishwasher" + grade, 1, "unit"))
        if appliances.range_hood:
            items.append(self.make_material_item(
                "Appliances", "Range Hood", 1, "unit", notes="Required for proper ventilation",
            ))
        return items

    def _plumbing(self) -> list:
        opts = self.options
        quality = self.quality_suffix()
        items = []
        if opts.sink != KitchenSink.NONE:
            sink_name = self.label(SINK_NAMES, opts.sink, "sink") + quality
            items.append(self.make_material_item("Plumbing", sink_name, 1, "unit"))
        if opts.faucet != KitchenFaucet.NONE:
            faucet_name = self.label(FAUCET_NAMES, opts.faucet, "faucet") + quality
            items.append(self.make_material_item("Plumbing", faucet_name, 1, "unit"))
        if self._has_sink_plumbing():
            items.append(self.make_material_item(
                "Plumbing", "Plumbing Installation Kit", 1, "set",
                notes="Supply lines, drain assembly, P-trap",
            ))
        if opts.appliances.dishwasher:
            items.append(self.make_material_item(
                "Plumbing", "Dishwasher Installation Kit", 1, "set",
                notes="Water supply line, drain hose",
            ))
        return items

    def _electrical(self) -> list:
        opts = self.options
        lighting = opts.lighting
        items = [self.make_material_item(
            "Electrical", "GFCI Outlets", opts.gfci_outlets, "outlets",
            notes="Code-required near sinks",
        )]
        if opts.standard_outlets > 0:
            items.append(self.make_material_item(
                "Electrical", "Standard Outlets", opts.standard_outlets, "outlets",
            ))
        if lighting.recessed > 0:
            items.append(self.make_material_item(
                "Electrical", "Recessed LED Lights", lighting.recessed, "fixtures",
            ))
        if lighting.pendant > 0:
            items.append(self.make_material_item(
                "Electrical", "Pendant Light Fixtures", lighting.pendant, "fixtures",
            ))
        if lighting.under_cabinet:
            items.append(self.make_material_item(
                "Electrical", "Under-Cabinet LED Lighting",
                self.dimensions.lower_cabinet_linear_feet, "linear ft",
                notes="Low-profile LED strips",
            ))
        # gfci_outlets >= 2, so there is always wiring
        items.append(self.make_material_item(
            "Electrical", "Electrical Wiring & Materials", 1, "set",
            notes="Wire, boxes, switches, plates",
        ))
        if opts.appliances.range or opts.appliances.dishwasher:
            items.append(self.make_material_item(
                "Electrical", "Appliance Circuit Installation", 1, "set",
                notes="Dedicated 20A circuits for appliances",
            ))
        return items

    def _paint(self, floor_area: float) -> list:
        opts = self.options
        perimeter = (self.dimensions.length + self.dimensions.width) * 2
        wall_area = perimeter * self.dimensions.ceiling_height
        items = []

        if opts.paint_walls:
            wall_gallons = self.gallons_for_area(wall_area)
            items.append(self.make_material_item(
                "Paint & Finish", "Wall Paint", wall_gallons, "gallons",
                notes="Semi-gloss or satin finish",
            ))
            items.append(self.make_material_item(
                "Paint & Finish", "Wall Primer", math.ceil(wall_gallons / 2), "gallons",
            ))
        if opts.paint_ceiling:
            items.append(self.make_material_item(
                "Paint & Finish", "Ceiling Paint", self.gallons_for_area(floor_area), "gallons",
                notes="Flat finish",
            ))
        if opts.paint_walls or opts.paint_ceiling:
            items.append(self.make_material_item(
                "Paint & Finish", "Painting Supplies", 1, "set",
                notes="Brushes, rollers, tape, drop cloths",
            ))
        return items

    def _hardware_and_accessories(self) -> list:
        return [
            self.make_material_item(
                "Hardware & Accessories", "Caulk & Sealant", 3, "tubes",
                notes="Kitchen & bath silicone",
            ),
            self.make_material_item("Hardware & Accessories", "Construction Adhesive", 2, "tubes"),
            self.make_material_item(
                "Hardware & Accessories", "Miscellaneous Hardware", 1, "set",
                notes="Screws, anchors, brackets",
            ),
        ]

    # --- Labor ---

    def _labor_hours(self, floor_area: float) -> int:
        dims = self.dimensions
        opts = self.options
        hours = 0.0

        cabinets = (dims.upper_cabinet_linear_feet + dims.lower_cabinet_linear_feet) / FEET_PER_CABINET
        hours += cabinets * HOURS_PER_CABINET

        if opts.countertop_material in STONE_COUNTERTOPS:
            hours += STONE_COUNTERTOP_HOURS
        else:
            hours += dims.countertop_square_feet / COUNTERTOP_SQFT_PER_HOUR

        if dims.has_backsplash:
            hours += dims.backsplash_square_feet / BACKSPLASH_SQFT_PER_HOUR
        if dims.include_flooring:
            hours += floor_area / FLOORING_SQFT_PER_HOUR

        hours += opts.appliances.count() * HOURS_PER_APPLIANCE

        if self._has_sink_plumbing():
            hours += PLUMBING_HOURS

        electrical_points = (opts.gfci_outlets + opts.standard_outlets
                             + opts.lighting.recessed + opts.lighting.pendant)
        hours += electrical_points * HOURS_PER_ELECTRICAL_POINT
        if opts.lighting.under_cabinet:
            hours += UNDER_CABINET_LIGHTING_HOURS

        if opts.paint_walls or opts.paint_ceiling:
            hours += floor_area / PAINT_SQFT_PER_HOUR

        return self.finish_labor_hours(hours)

    def _demolition_hours(self, floor_area: float) -> int:
        hours = DEMOLITION_BASE_HOURS
        if self.dimensions.include_flooring:
            hours += floor_area / FLOOR_REMOVAL_SQFT_PER_HOUR
        return math.ceil(round(hours, 6))

    # --- Helpers ---

    def _cabinet_count(self) -> int:
        dims = self.dimensions
        return math.ceil(round(
            (dims.upper_cabinet_linear_feet + dims.lower_cabinet_linear_feet) / FEET_PER_CABINET, 6
        ))

    def _has_sink_plumbing(self) -> bool:
        return self.options.sink != KitchenSink.NONE or self.options.faucet != KitchenFaucet.NONE
