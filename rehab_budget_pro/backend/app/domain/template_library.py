# backend/app/domain/template_library.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List

# (category, item, unit, cost_type, sort_order)
Line = tuple[str, str, str, str, int]


@dataclass(frozen=True)
class SystemTemplate:
    name: str
    description: str
    scope_level: str
    lines: tuple[Line, ...]
    property_type: str | None = None

    def to_row_kwargs(self) -> Dict[str, Any]:
        return {
            "org_id": None,
            "name": self.name,
            "description": self.description,
            "template_type": "system",
            "property_type": self.property_type,
            "scope_level": self.scope_level,
        }

    def item_kwargs(self) -> List[Dict[str, Any]]:
        return [
            {"category": c, "item": i, "unit": u, "cost_type": ct, "sort_order": so}
            for c, i, u, ct, so in self.lines
        ]


_SOFT = (
    ("soft_costs", "Permits & Inspections", "ls", "both", 100),
    ("soft_costs", "Utilities During Construction", "month", "both", 101),
)
_PAINT = (
    ("interior_paint", "Wall Paint", "sf", "both", 800),
    ("interior_paint", "Ceiling Paint", "sf", "both", 801),
    ("interior_paint", "Trim Paint", "lf", "both", 802),
)
_KITCHEN = (
    ("kitchen", "Cabinets", "lf", "both", 1100),
    ("kitchen", "Countertops", "sf", "both", 1101),
    ("kitchen", "Sink & Faucet", "ea", "both", 1102),
    ("kitchen", "Appliances", "ls", "materials", 1103),
    ("kitchen", "Hardware", "ls", "materials", 1104),
)
_BATH = (
    ("bathrooms", "Vanity", "ea", "both", 1200),
    ("bathrooms", "Toilet", "ea", "both", 1201),
    ("bathrooms", "Tub", "ea", "both", 1202),
    ("bathrooms", "Fixtures", "ea", "both", 1204),
    ("bathrooms", "Exhaust Fan", "ea", "both", 1206),
)
_CLOSE_OUT = (
    ("finishing", "Final Clean", "ls", "labor", 1700),
    ("finishing", "Touch-Up Paint", "ls", "both", 1701),
    ("contingency", "Contingency Fund", "ls", "both", 1800),
)


def system_templates() -> List[SystemTemplate]:
    # Shipped read-only templates; orgs duplicate one to customise it.
    return [
        SystemTemplate(
            name="Light Cosmetic Refresh",
            description="Paint, flooring, fixtures and minor repairs for a structurally sound house.",
            scope_level="light",
            lines=_SOFT
            + _PAINT
            + (
                ("interior_paint", "Door Paint", "ea", "both", 803),
                ("flooring", "LVP/Laminate", "sf", "both", 900),
                ("flooring", "Carpet", "sf", "both", 901),
                ("electrical", "Lighting Fixtures", "ea", "both", 600),
                ("electrical", "Outlets/Switches", "ea", "both", 601),
                ("kitchen", "Hardware", "ls", "materials", 1100),
                ("kitchen", "Sink & Faucet", "ea", "both", 1101),
                ("bathrooms", "Toilet", "ea", "both", 1200),
                ("bathrooms", "Fixtures", "ea", "both", 1201),
                ("exterior", "Exterior Paint", "sf", "both", 1500),
                ("landscaping", "Mulch/Rock", "ls", "materials", 1601),
                ("finishing", "Punch List Items", "ls", "both", 1702),
            )
            + _CLOSE_OUT,
        ),
        SystemTemplate(
            name="Kitchen & Bath Focus",
            description="Kitchen and bathroom updates with the supporting trades around them.",
            scope_level="medium",
            lines=_SOFT
            + (
                ("demo", "Kitchen Demo", "ls", "labor", 200),
                ("demo", "Bathroom Demo", "ea", "labor", 201),
                ("demo", "Dumpster/Hauling", "load", "both", 202),
                ("plumbing", "Rough-In Plumbing", "ls", "both", 400),
                ("plumbing", "Finish Plumbing", "ls", "both", 401),
                ("electrical", "Rough-In Electrical", "ls", "both", 600),
                ("insulation_drywall", "Drywall Repairs", "sf", "both", 700),
                ("tile", "Bathroom Floor Tile", "sf", "both", 1000),
                ("tile", "Kitchen Backsplash", "sf", "both", 1002),
                ("tile", "Shower Tile", "sf", "both", 1003),
            )
            + _PAINT
            + _KITCHEN
            + _BATH
            + _CLOSE_OUT,
        ),
        SystemTemplate(
            name="Full Gut Renovation",
            description="Structural work, all new systems and full interior and exterior refinishing.",
            scope_level="gut",
            lines=_SOFT
            + (
                ("soft_costs", "Architecture/Engineering", "ls", "labor", 102),
                ("demo", "Interior Demo", "sf", "labor", 200),
                ("demo", "Dumpster/Hauling", "load", "both", 202),
                ("demo", "Hazmat Abatement", "ls", "both", 203),
                ("structural", "Foundation Repair", "ls", "both", 300),
                ("structural", "Structural Framing", "ls", "both", 301),
                ("structural", "Subfloor Repair/Replacement", "sf", "both", 303),
                ("plumbing", "Rough-In Plumbing", "ls", "both", 400),
                ("plumbing", "Finish Plumbing", "ls", "both", 401),
                ("plumbing", "Water Heater", "ea", "both", 402),
                ("plumbing", "Main Line/Sewer", "ls", "both", 403),
                ("hvac", "Furnace", "ea", "both", 500),
                ("hvac", "A/C Unit", "ea", "both", 501),
                ("hvac", "Ductwork", "ls", "both", 502),
                ("electrical", "Panel Upgrade", "ea", "both", 600),
                ("electrical", "Rough-In Electrical", "ls", "both", 601),
                ("electrical", "Finish Electrical", "ls", "both", 602),
                ("insulation_drywall", "Insulation", "sf", "both", 700),
                ("insulation_drywall", "Drywall Hang", "sf", "both", 701),
                ("insulation_drywall", "Drywall Finish/Tape", "sf", "labor", 702),
                ("flooring", "Hardwood", "sf", "both", 900),
                ("flooring", "LVP/Laminate", "sf", "both", 901),
                ("tile", "Bathroom Floor Tile", "sf", "both", 1000),
                ("tile", "Shower Tile", "sf", "both", 1003),
                ("doors_windows", "Entry Door", "ea", "both", 1300),
                ("doors_windows", "Window Replacement", "ea", "both", 1302),
                ("interior_trim", "Baseboards", "lf", "both", 1400),
                ("exterior", "Roof", "sq", "both", 1500),
                ("exterior", "Siding", "sf", "both", 1501),
                ("exterior", "Gutters", "lf", "both", 1503),
                ("landscaping", "Lawn/Sod", "sf", "both", 1600),
                ("landscaping", "Driveway", "sf", "both", 1603),
                ("finishing", "Staging", "ls", "both", 1703),
            )
            + _PAINT
            + _KITCHEN
            + _BATH
            + _CLOSE_OUT,
        ),
        SystemTemplate(
            name="Investor Flip Standard",
            description="Typical flip scope without major structural or system replacement.",
            scope_level="heavy",
            lines=_SOFT
            + (
                ("demo", "Interior Demo", "sf", "labor", 200),
                ("demo", "Dumpster/Hauling", "load", "both", 201),
                ("plumbing", "Finish Plumbing", "ls", "both", 401),
                ("plumbing", "Water Heater", "ea", "both", 402),
                ("electrical", "Fixtures/Outlets/Switches", "ea", "both", 602),
                ("electrical", "Lighting Fixtures", "ea", "both", 603),
                ("insulation_drywall", "Drywall Repairs", "sf", "both", 700),
                ("flooring", "LVP/Laminate", "sf", "both", 900),
                ("flooring", "Carpet", "sf", "both", 901),
                ("tile", "Kitchen Backsplash", "sf", "both", 1002),
                ("doors_windows", "Interior Doors", "ea", "both", 1301),
                ("interior_trim", "Baseboards", "lf", "both", 1400),
                ("exterior", "Exterior Paint", "sf", "both", 1500),
                ("landscaping", "Lawn/Sod", "sf", "both", 1600),
            )
            + _PAINT
            + _KITCHEN
            + _BATH
            + _CLOSE_OUT,
        ),
    ]
