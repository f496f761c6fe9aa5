"""Built-in product category templates.

Each template lists the materials a passport in that category normally
declares, substances that must be checked, mandatory fields, typical
lifetime and a starting text for end-of-life instructions.
"""

from __future__ import annotations

from greenpass.models.dpp import CategoryTemplate

_TEMPLATES: dict[str, CategoryTemplate] = {
    "electronics": CategoryTemplate(
        category="electronics",
        label="Electronics & ICT",
        required_materials=["Copper wiring", "Plastic housing", "Printed circuit board"],
        critical_substances=["Lead", "Mercury", "Cadmium", "Hexavalent chromium", "PBB", "PBDE"],
        mandatory_fields=["energy_consumption_kwh", "model_number"],
        typical_lifetime_years=5,
        recyclability_weight=30,
        repairability_weight=25,
        eol_instructions_template=(
            "Return to an authorised WEEE collection point. Do not dispose of with "
            "household waste. Remove batteries before recycling."
        ),
    ),
    "textiles": CategoryTemplate(
        category="textiles",
        label="Textiles & Apparel",
        required_materials=["Cotton", "Polyester"],
        critical_substances=["Azo dyes", "Formaldehyde", "PFAS"],
        mandatory_fields=["water_usage_liters", "country_of_origin"],
        typical_lifetime_years=3,
        recyclability_weight=35,
        repairability_weight=15,
        eol_instructions_template=(
            "Donate wearable items for reuse. Otherwise place in a textile collection "
            "container; do not landfill."
        ),
    ),
    "batteries": CategoryTemplate(
        category="batteries",
        label="Batteries",
        required_materials=["Lithium", "Cobalt", "Nickel", "Graphite"],
        critical_substances=["Lead", "Mercury", "Cadmium"],
        mandatory_fields=["carbon_footprint_kg", "manufacturer"],
        typical_lifetime_years=8,
        recyclability_weight=35,
        repairability_weight=20,
        eol_instructions_template=(
            "Return to the retailer or a dedicated battery collection point. Never "
            "dispose of in household waste or incinerate."
        ),
    ),
    "furniture": CategoryTemplate(
        category="furniture",
        label="Furniture",
        required_materials=["Wood", "Steel frame"],
        critical_substances=["Formaldehyde", "Flame retardants"],
        mandatory_fields=["country_of_origin"],
        typical_lifetime_years=15,
        recyclability_weight=25,
        repairability_weight=30,
        eol_instructions_template=(
            "Disassemble and separate wood, metal and upholstery. Offer for reuse "
            "before taking components to a recycling centre."
        ),
    ),
    "packaging": CategoryTemplate(
        category="packaging",
        label="Packaging",
        required_materials=["Cardboard", "Plastic film"],
        critical_substances=["PFAS", "Bisphenol A"],
        mandatory_fields=["carbon_footprint_kg"],
        typical_lifetime_years=1,
        recyclability_weight=40,
        repairability_weight=0,
        eol_instructions_template=(
            "Flatten cardboard and place in paper recycling. Rinse plastic components "
            "and sort according to local rules."
        ),
    ),
}


def get_category_template(category: str | None) -> CategoryTemplate | None:
    """Return the template for a category key, or None when unknown."""
    if not category:
        return None
    return _TEMPLATES.get(category.strip().lower())


def list_categories() -> list[CategoryTemplate]:
    return list(_TEMPLATES.values())
