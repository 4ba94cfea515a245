"""
Bathroom remodel material calculator.
Based on IRC wet-area rules: cement board + membrane behind tile, GFCI near
water, exhaust fan sized at 1 CFM per sqft (50 CFM minimum).
"""

import enum
import math
from typing import Literal, Optional

from pydantic import BaseModel, Field, model_validator

from ..schemas import BuildQuality, MaterialList, ProjectType
from .base import (
    SQFT_PER_GROUT_BAG,
    SQFT_PER_THINSET_BAG,
    BaseCalculator,
)


class RemodelScope(str, enum.Enum):
    FULL_GUT = "full-gut"
    STANDARD_REMODEL = "standard-remodel"
    SURFACE_UPDATE = "surface-update"


class VanitySinkType(str, enum.Enum):
    SINGLE = "single"
    DOUBLE = "double"


class ToiletType(str, enum.Enum):
    STANDARD = "standard"
    COMFORT_HEIGHT = "comfort-height"
    WALL_MOUNTED = "wall-mounted"


class ShowerTubConfig(str, enum.Enum):
    TUB_SURROUND = "tub-surround"
    WALK_IN_SHOWER = "walk-in-shower"
    TUB_AND_SHOWER = "tub-and-shower"


class WallFinish(str, enum.Enum):
    TILE = "tile"
    PAINT_ONLY = "paint-only"
    PANEL_WAINSCOTING = "panel-wainscoting"


class FloorFinish(str, enum.Enum):
    CERAMIC_TILE = "ceramic-tile"
    PORCELAIN_TILE = "porcelain-tile"
    VINYL_PLANK = "vinyl-plank"
    NATURAL_STONE = "natural-stone"


class BathroomDimensions(BaseModel):
    length: float = Field(ge=4, le=20)
    width: float = Field(ge=4, le=20)
    ceiling_height: float = Field(default=8, ge=7, le=12)

    scope: RemodelScope

    has_ventilation: bool = False
    ventilation_upgrade: bool = False
    has_window: bool = False
    window_replacement: bool = False


class BathroomLighting(BaseModel):
    vanity_lights: int = Field(default=0, ge=0, le=4)
    ceiling_light: bool = False
    exhaust_fan: bool = False


class BathroomOptions(BaseModel):
    vanity_size: Literal[30, 36, 48, 60]  # inches
    vanity_sink_type: VanitySinkType

    toilet_type: ToiletType
    shower_tub_config: ShowerTubConfig

    wall_finish: WallFinish
    tile_height: Optional[float] = Field(default=None, ge=3, le=8)  # partial tile walls

    floor_finish: FloorFinish
    build_quality: BuildQuality

    lighting: BathroomLighting = Field(default_factory=BathroomLighting)

    # At least one GFCI receptacle serving the basin
    gfci_outlets: int = Field(ge=1, le=4)


class BathroomProject(BaseModel):
    dimensions: BathroomDimensions
    options: BathroomOptions

    @model_validator(mode="after")
    def _check_tile_height(self):
        tile_height = self.options.tile_height
        if tile_height is not None and tile_height > self.dimensions.ceiling_height:
            raise ValueError(
                f"tile_height ({tile_height} ft) exceeds ceiling_height "
                f"({self.dimensions.ceiling_height} ft)"
            )
        return self


FLOOR_FINISH_NAMES = {
    FloorFinish.CERAMIC_TILE: "Ceramic Floor Tile",
    FloorFinish.PORCELAIN_TILE: "Porcelain Floor Tile",
    FloorFinish.VINYL_PLANK: "Luxury Vinyl Plank (LVP)",
    FloorFinish.NATURAL_STONE: "Natural Stone Floor Tile",
}

SET_IN_MORTAR = (FloorFinish.CERAMIC_TILE, FloorFinish.PORCELAIN_TILE, FloorFinish.NATURAL_STONE)

TOILET_NAMES = {
    ToiletType.STANDARD: "Standard Height Toilet",
    ToiletType.COMFORT_HEIGHT: "Comfort Height Toilet (ADA)",
    ToiletType.WALL_MOUNTED: "Wall-Mounted Toilet",
}

# Wet-wall area behind the shower/tub before waste
WET_AREA_SQFT = {
    ShowerTubConfig.TUB_SURROUND: 60,
    ShowerTubConfig.WALK_IN_SHOWER: 80,
    ShowerTubConfig.TUB_AND_SHOWER: 120,
}

BACKER_WASTE_FACTOR = 1.10
WAINSCOT_HEIGHT = 3.5  # feet

BASE_HOURS = {
    RemodelScope.FULL_GUT: 80,
    RemodelScope.STANDARD_REMODEL: 50,
    RemodelScope.SURFACE_UPDATE: 20,
}

DEMOLITION_HOURS = {
    RemodelScope.FULL_GUT: 12,
    RemodelScope.STANDARD_REMODEL: 6,
    RemodelScope.SURFACE_UPDATE: 0,
}

WALL_TILE_SQFT_PER_HOUR = 8
FLOOR_TILE_SQFT_PER_HOUR = 10
SINGLE_FIXTURE_HOURS = 8
TUB_AND_SHOWER_HOURS = 16
VANITY_HOURS = 6
TOILET_HOURS = 3
VENTILATION_HOURS = 4
WINDOW_HOURS = 4

MIN_EXHAUST_CFM = 50


class BathroomMaterialCalculator(BaseCalculator):
    """
    Phase order: demolition → rough-in → waterproofing → flooring → wall
    finish → shower/tub → vanity → toilet → electrical → ventilation →
    window → accessories.

    Demolition and waterproofing are skipped for surface updates, rough-in
    only happens on a full gut.
    """

    PROJECT_TYPE = ProjectType.BATHROOM
    PROJECT_MODEL = BathroomProject
    WASTE_FACTOR = 1.15  # tile in wet areas cuts more
    PREMIUM_LABOR_MULTIPLIER = 1.15

    def calculate(self) -> MaterialList:
        self._reset()
        dims = self.dimensions
        opts = self.options
        floor_area = dims.length * dims.width
        gutting = dims.scope != RemodelScope.SURFACE_UPDATE

        items = []
        if gutting:
            items.extend(self._demolition())
        if dims.scope == RemodelScope.FULL_GUT:
            items.extend(self._rough_in())
        if gutting:
            items.extend(self._waterproofing())
        items.extend(self._flooring(floor_area))
        items.extend(self._wall_finish(floor_area))
        items.extend(self._shower_tub())
        items.extend(self._vanity())
        items.extend(self._toilet())
        items.extend(self._electrical())
        if dims.has_ventilation or opts.lighting.exhaust_fan:
            items.extend(self._ventilation(floor_area))
        if self._replacing_window():
            items.extend(self._window())
        items.extend(self._accessories())

        labor_hours = self._labor_hours(floor_area)
        return self.make_material_list(
            items=items,
            area=floor_area,
            labor_hours=labor_hours,
            demolition_hours=DEMOLITION_HOURS[dims.scope],
            complexity=self.complexity_from_hours(labor_hours, moderate_at=70, complex_at=120),
        )

    @property
    def perimeter(self) -> float:
        return (self.dimensions.length + self.dimensions.width) * 2

    def _replacing_window(self) -> bool:
        return self.dimensions.has_window and self.dimensions.window_replacement

    # --- Phases ---

    def _demolition(self) -> list:
        if self.dimensions.scope == RemodelScope.FULL_GUT:
            demo = self.make_material_item(
                "Demolition", "Complete Demo & Disposal", 1, "job",
                notes="All fixtures, tile, drywall to studs",
            )
        else:
            demo = self.make_material_item(
                "Demolition", "Fixture & Surface Removal", 1, "job",
                notes="Remove fixtures and finish materials",
            )
        return [
            demo,
            self.make_material_item("Demolition", "Dumpster Rental", 1, "unit", notes="10-yard dumpster"),
        ]

    def _rough_in(self) -> list:
        return [
            self.make_material_item(
                "Rough-In", "Plumbing Rough-In Materials", 1, "set",
                notes="PEX/Copper supply lines, drain pipes, valves",
            ),
            self.make_material_item(
                "Rough-In", "Electrical Rough-In Materials", 1, "set",
                notes="Wire, boxes, circuit breakers",
            ),
        ]

    def _waterproofing(self) -> list:
        wet_sqft = self.label(WET_AREA_SQFT, self.options.shower_tub_config, "shower_tub_config")
        wet_sqft = self.apply_waste(wet_sqft, BACKER_WASTE_FACTOR)
        return [
            self.make_material_item(
                "Waterproofing", 'Cement Backer Board (1/2")', wet_sqft, "sq ft",
                notes="For wet areas - code required",
            ),
            self.make_material_item(
                "Waterproofing", "Waterproof Membrane", wet_sqft, "sq ft",
                notes="RedGard or similar liquid membrane",
            ),
            self.make_material_item(
                "Waterproofing", "Waterproofing Accessories", 1, "set",
                notes="Tape, sealant, corners",
            ),
        ]

    def _flooring(self, floor_area: float) -> list:
        finish = self.options.floor_finish
        material = self.label(FLOOR_FINISH_NAMES, finish, "floor_finish")
        sqft = self.apply_waste(floor_area)

        items = [self.make_material_item(
            "Flooring", material, sqft, "sq ft",
            notes="Premium grade" if self.is_premium else "Standard grade",
        )]
        if finish in SET_IN_MORTAR:
            items.append(self.make_material_item(
                "Flooring", "Floor Tile Mortar (Thinset)",
                self.bags_for_area(sqft, SQFT_PER_THINSET_BAG), "bags", notes="50 lb bags",
            ))
            items.append(self.make_material_item(
                "Flooring", "Floor Grout",
                self.bags_for_area(sqft, SQFT_PER_GROUT_BAG), "bags", notes="Sanded grout, 25 lb bags",
            ))
            items.append(self.make_material_item(
                "Flooring", "Grout Sealer", 1, "bottle", notes="Penetrating sealer",
            ))
        if finish == FloorFinish.VINYL_PLANK:
            items.append(self.make_material_item(
                "Flooring", "Underlayment", sqft, "sq ft", notes="Moisture barrier",
            ))
        return items

    def _wall_finish(self, floor_area: float) -> list:
        finish = self.options.wall_finish
        if finish == WallFinish.TILE:
            return self._tile_walls()
        if finish == WallFinish.PAINT_ONLY:
            return self._painted_walls(floor_area)
        return self._wainscot_walls()

    def _tile_walls(self) -> list:
        ceiling = self.dimensions.ceiling_height
        tile_height = self.options.tile_height or ceiling
        tile_sqft = self.apply_waste(self.perimeter * tile_height)

        items = [
            self.make_material_item(
                "Wall Tile", "Premium Wall Tile" if self.is_premium else "Standard Wall Tile",
                tile_sqft, "sq ft", notes="%g' height" % tile_height,
            ),
            self.make_material_item(
                "Wall Tile", "Wall Tile Mortar (Thinset)",
                self.bags_for_area(tile_sqft, SQFT_PER_THINSET_BAG), "bags", notes="50 lb bags",
            ),
            self.make_material_item(
                "Wall Tile", "Wall Grout",
                self.bags_for_area(tile_sqft, SQFT_PER_GROUT_BAG), "bags", notes="Unsanded for wall joints",
            ),
        ]
        if tile_height < ceiling:
            items.append(self.make_material_item(
                "Paint", "Wall Paint (Above Tile)",
                self.gallons_for_area(self.perimeter * (ceiling - tile_height)), "gallons",
                notes="Semi-gloss finish",
            ))
        return items

    def _painted_walls(self, floor_area: float) -> list:
        gallons = self.gallons_for_area(self.perimeter * self.dimensions.ceiling_height)
        return [
            self.make_material_item(
                "Paint", "Bathroom Wall Paint", gallons, "gallons",
                notes="Mildew-resistant, semi-gloss",
            ),
            self.make_material_item(
                "Paint", "Primer", math.ceil(gallons / 2), "gallons",
                notes="Moisture-resistant primer",
            ),
            self.make_material_item(
                "Paint", "Ceiling Paint", self.gallons_for_area(floor_area), "gallons",
                notes="Flat finish",
            ),
        ]

    def _wainscot_walls(self) -> list:
        panel_sqft = self.apply_waste(self.perimeter * WAINSCOT_HEIGHT, BACKER_WASTE_FACTOR)
        paint_sqft = self.perimeter * (self.dimensions.ceiling_height - WAINSCOT_HEIGHT)
        return [
            self.make_material_item("Wainscoting", "Beadboard Wainscoting Panels", panel_sqft, "sq ft"),
            self.make_material_item(
                "Wainscoting", "Chair Rail Molding", math.ceil(round(self.perimeter, 6)), "linear ft",
            ),
            self.make_material_item(
                "Paint", "Wall Paint (Above Wainscoting)", self.gallons_for_area(paint_sqft), "gallons",
                notes="Semi-gloss finish",
            ),
        ]

    def _shower_tub(self) -> list:
        config = self.options.shower_tub_config
        quality = self.quality_suffix()
        item = self.make_material_item

        if config == ShowerTubConfig.TUB_SURROUND:
            return [
                item("Fixtures", 'Bathtub (60" Standard)' + quality, 1, "unit", notes="Acrylic or fiberglass"),
                item("Fixtures", "Tub/Shower Valve Kit" + quality, 1, "set",
                     notes="Pressure-balance valve (code required)"),
                item("Fixtures", "Tub Spout & Showerhead" + quality, 1, "set"),
            ]
        if config == ShowerTubConfig.WALK_IN_SHOWER:
            return [
                item("Fixtures", 'Shower Base/Pan (36" x 48")' + quality, 1, "unit",
                     notes="Acrylic or tile-ready"),
                item("Fixtures", "Frameless Glass Shower Door" + quality, 1, "unit",
                     notes='3/8" tempered glass'),
                item("Fixtures", "Shower Valve Kit" + quality, 1, "set", notes="Thermostatic mixing valve"),
                item("Fixtures", "Showerhead & Trim Kit" + quality, 1, "set"),
            ]
        return [
            item("Fixtures", 'Bathtub (60" Standard)' + quality, 1, "unit"),
            item("Fixtures", "Tub/Shower Valve Kit" + quality, 1, "set"),
            item("Fixtures", 'Shower Base/Pan (36" x 36")' + quality, 1, "unit"),
            item("Fixtures", "Glass Shower Door" + quality, 1, "unit"),
            item("Fixtures", "Shower Valve Kit" + quality, 1, "set"),
        ]

    def _vanity(self) -> list:
        opts = self.options
        quality = self.quality_suffix()
        size = opts.vanity_size
        sinks = 2 if opts.vanity_sink_type == VanitySinkType.DOUBLE else 1

        return [
            self.make_material_item(
                "Vanity", f'{size}" Vanity Cabinet{quality}', 1, "unit",
                notes="Double sink ready" if sinks == 2 else "Single sink",
            ),
            self.make_material_item(
                "Vanity", f'{size}" Vanity Top{quality}', 1, "unit",
                notes="Quartz or granite" if self.is_premium else "Cultured marble",
            ),
            self.make_material_item("Vanity", "Undermount Sink" + quality, sinks, "unit", notes="Porcelain"),
            self.make_material_item(
                "Vanity", "Bathroom Faucet" + quality, sinks, "unit", notes="Widespread or centerset",
            ),
            self.make_material_item(
                "Vanity", f'{size}" Vanity Mirror', 1, "unit",
                notes="Framed with LED lighting" if self.is_premium else "Standard frameless",
            ),
        ]

    def _toilet(self) -> list:
        toilet_type = self.options.toilet_type
        name = self.label(TOILET_NAMES, toilet_type, "toilet_type") + self.quality_suffix()

        items = [self.make_material_item(
            "Fixtures", name, 1, "unit", notes="Dual-flush, WaterSense certified",
        )]
        if toilet_type == ToiletType.WALL_MOUNTED:
            items.append(self.make_material_item(
                "Fixtures", "In-Wall Toilet Carrier System", 1, "unit",
                notes="Required for wall-mounted toilet",
            ))
        items.append(self.make_material_item(
            "Fixtures", "Toilet Installation Kit", 1, "set", notes="Wax ring, bolts, supply line",
        ))
        return items

    def _electrical(self) -> list:
        opts = self.options
        lighting = opts.lighting
        items = [self.make_material_item(
            "Electrical", "GFCI Outlets (20A)", opts.gfci_outlets, "outlets",
            notes="Code required near water sources",
        )]
        if lighting.vanity_lights > 0:
            items.append(self.make_material_item(
                "Electrical",
                "Premium Vanity Light Fixtures" if self.is_premium else "Standard Vanity Light Fixtures",
                lighting.vanity_lights, "fixtures", notes="LED, moisture-rated",
            ))
        if lighting.ceiling_light:
            items.append(self.make_material_item(
                "Electrical", "Ceiling Light Fixture", 1, "fixture", notes="LED, moisture-rated",
            ))
        if self.dimensions.scope != RemodelScope.SURFACE_UPDATE:
            items.append(self.make_material_item(
                "Electrical", "Electrical Wiring Materials", 1, "set",
                notes="Wire, boxes, switches, plates",
            ))
        return items

    def _ventilation(self, floor_area: float) -> list:
        cfm = max(MIN_EXHAUST_CFM, math.ceil(round(floor_area, 6)))
        if self.is_premium:
            fan = self.make_material_item(
                "Ventilation", f"Premium Exhaust Fan ({cfm}+ CFM)", 1, "unit",
                notes="Ultra-quiet with humidity sensor",
            )
        else:
            fan = self.make_material_item(
                "Ventilation", f"Exhaust Fan ({cfm} CFM)", 1, "unit",
                notes="Code-compliant, ENERGY STAR",
            )
        return [
            fan,
            self.make_material_item(
                "Ventilation", "Vent Duct & Exterior Termination", 1, "set",
                notes="Rigid or flex duct, damper, exterior cap",
            ),
        ]

    def _window(self) -> list:
        return [
            self.make_material_item(
                "Window", "Bathroom Window Replacement" + self.quality_suffix(), 1, "unit",
                notes="Vinyl, double-pane, obscured glass" if self.is_premium else "Vinyl, obscured glass",
            ),
            self.make_material_item(
                "Window", "Window Trim & Casing", 1, "set", notes="Interior and exterior trim",
            ),
        ]

    def _accessories(self) -> list:
        return [
            self.make_material_item(
                "Accessories", "Towel Bar Set", 1, "set",
                notes="Brushed nickel or chrome" if self.is_premium else "Standard chrome",
            ),
            self.make_material_item("Accessories", "Toilet Paper Holder", 1, "unit"),
            self.make_material_item("Accessories", "Robe Hook", 2, "unit"),
            self.make_material_item(
                "Accessories", "Bathroom Caulk & Sealant", 4, "tubes", notes="Mildew-resistant silicone",
            ),
            self.make_material_item("Accessories", "Construction Adhesive", 2, "tubes"),
        ]

    # --- Labor ---

    def _labor_hours(self, floor_area: float) -> int:
        dims = self.dimensions
        opts = self.options
        hours = float(BASE_HOURS[dims.scope])

        if opts.wall_finish == WallFinish.TILE:
            tile_height = opts.tile_height or dims.ceiling_height
            hours += self.perimeter * tile_height / WALL_TILE_SQFT_PER_HOUR
        if opts.floor_finish in (FloorFinish.CERAMIC_TILE, FloorFinish.PORCELAIN_TILE):
            hours += floor_area / FLOOR_TILE_SQFT_PER_HOUR

        if opts.shower_tub_config == ShowerTubConfig.TUB_AND_SHOWER:
            hours += TUB_AND_SHOWER_HOURS
        else:
            hours += SINGLE_FIXTURE_HOURS

        hours += VANITY_HOURS + TOILET_HOURS

        if dims.has_ventilation:
            hours += VENTILATION_HOURS
        if self._replacing_window():
            hours += WINDOW_HOURS

        return self.finish_labor_hours(hours)
