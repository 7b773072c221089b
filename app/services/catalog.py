"""Vendor-wide catalog and default price table.

Pure data plus lookups. Every partner calculator starts from these values;
partner feature configs narrow what is offered and pricing overrides replace
individual leaves (see ``feature_config`` and ``pricing_overrides``).
"""

from app.schemas.pricing import FeatureConfig, PriceTable

MODELS = ("s", "standard", "x")

MODEL_LABELS = {
    "s": "Hydropack S",
    "standard": "Hydropack Standard",
    "x": "Hydropack X",
}

TANK_SIZES = ("500", "1550", "3000", "5000")

CITIES = ("Austin", "Corpus Christi", "Dallas", "Houston", "San Antonio")

# Selections that mean "nothing chosen" for optional components
NO_SELECTION = ("", "none")

WARRANTY_OPTIONS = ("warranty5", "warranty8")

PANEL_UPGRADE_OPTIONS = ("none", "100a", "200a")

# Demolition is priced by policy, not by the partner-editable table
DEMOLITION_BASE_FEE = 500
DEMOLITION_PER_FOOT = 10

MODEL_PRICE_FIELDS = ("system", "ship", "pad", "mobility", "warranty5", "warranty8")

DEFAULT_PRICING = {
    "modelPrices": {
        "s": {
            "system": 9999,
            "ship": 645,
            "pad": 1750,
            "mobility": 500,
            "warranty5": 999,
            "warranty8": 1499,
        },
        "standard": {
            "system": 17499,
            "ship": 1095,
            "pad": 1850,
            "mobility": 500,
            "warranty5": 1749,
            "warranty8": 2599,
        },
        "x": {
            "system": 29999,
            "ship": 1550,
            "pad": 2100,
            "mobility": 1000,
            "warranty5": 2999,
            "warranty8": 4499,
        },
    },
    "tankPrices": {
        "500": 770.9,
        "1550": 1430.35,
        "3000": 2428.9,
        "5000": 5125.99,
    },
    "tankPads": {
        "500": 1750,
        "1550": 1850,
        "3000": 2300,
        "5000": 4200,
    },
    "cityDelivery": {
        "Austin": 999,
        "Corpus Christi": 858,
        "Dallas": 577.5,
        "Houston": 200,
        "San Antonio": 660,
    },
    "sensorPrices": {
        "normal": 35,
    },
    "filterPrices": {
        "s": 100,
        "standard": 150,
        "x": 200,
    },
    "pumpPrices": {
        "mini": 800,
    },
    "trenchRates": {
        "trench_elec": 32.5,
        "trench_plumb": 58.5,
        "trench_comb": 65.5,
    },
    "ab_trenchRates": {
        "ab_elec": 35.5,
        "ab_plumb": 26.5,
        "ab_comb": 35.5,
    },
}

# Categories whose leaves are plain numbers (modelPrices nests one level deeper)
FLAT_PRICE_CATEGORIES = tuple(key for key in DEFAULT_PRICING if key != "modelPrices")


def default_price_table() -> PriceTable:
    """The vendor default table as a validated ``PriceTable``."""
    return PriceTable.model_validate(DEFAULT_PRICING)


def is_selected(value) -> bool:
    """True when an optional selection names a component rather than 'none'."""
    if value is None:
        return False
    return str(value).strip().lower() not in NO_SELECTION


def offered_catalog(features: FeatureConfig) -> dict:
    """The catalog a partner calculator may offer under ``features``.

    Models, tanks and cities keep the canonical catalog order regardless of
    the order stored in the partner's config. Optional component lists are
    only included when their toggle is on.
    """
    table = DEFAULT_PRICING
    enabled_models = set(features.enabled_models)
    enabled_tanks = set(features.enabled_tanks)
    enabled_cities = set(features.enabled_cities)

    catalog = {
        "models": [
            {"key": key, "label": MODEL_LABELS[key]} for key in MODELS if key in enabled_models
        ],
        "tanks": [size for size in TANK_SIZES if size in enabled_tanks],
        "cities": [city for city in CITIES if city in enabled_cities],
        "warranties": list(WARRANTY_OPTIONS) if features.enable_warranty_upgrades else [],
        "sensors": list(table["sensorPrices"]) if features.enable_sensors else [],
        "filters": [key for key in table["filterPrices"] if key in enabled_models]
        if features.enable_filters else [],
        "pumps": list(table["pumpPrices"]) if features.enable_pumps else [],
        "trench_types": list(table["trenchRates"]) if features.enable_trenching else [],
        "ab_trench_types": list(table["ab_trenchRates"])
        if features.enable_aboveground_trenching else [],
        "panel_upgrades": list(PANEL_UPGRADE_OPTIONS) if features.enable_panel_upgrade else [],
        "demolition": features.enable_demolition,
        "custom_adjustments": features.enable_custom_adjustments,
    }
    return catalog
