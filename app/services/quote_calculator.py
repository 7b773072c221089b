"""Quote price calculator.

``compute_quote`` turns a calculator configuration and an effective price
table into line items and totals. It is a pure function: the same inputs
always produce the same ``QuoteTotals``, which is what makes a saved quote's
``final_total`` reproducible.

Money is accumulated as ``Decimal`` built from the decimal string of each
price, and only the totals are rounded (half-up, to cents).
"""

import math
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import List, Optional, Union

from app.exceptions import InvalidConfigurationError, ValidationError
from app.schemas.pricing import FeatureConfig, LineItem, PriceTable, QuoteConfig, QuoteTotals
from app.services.catalog import (
    CITIES,
    DEMOLITION_BASE_FEE,
    DEMOLITION_PER_FOOT,
    MODEL_LABELS,
    MODELS,
    TANK_SIZES,
    WARRANTY_OPTIONS,
    is_selected,
)
from app.services.feature_config import DEFAULT_FEATURE_CONFIG

TWO_PLACES = Decimal("0.01")
ZERO = Decimal("0")

Number = Union[int, float, Decimal, str]


def to_decimal(value: Number) -> Decimal:
    """Exact decimal for a price; floats go through their shortest repr."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_money(value: Decimal) -> Decimal:
    return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def _lookup(table: dict, key: str, field: str, what: str) -> Decimal:
    if key not in table:
        raise InvalidConfigurationError(f"Unknown {what} '{key}'", field=field)
    return to_decimal(table[key])


def _non_negative(value: float, field: str) -> Decimal:
    if not math.isfinite(value) or value < 0:
        raise InvalidConfigurationError(f"{field} must be a non-negative number", field=field)
    return to_decimal(value)


def _run_total(sections, rates: dict, field: str) -> Decimal:
    total = ZERO
    for index, section in enumerate(sections):
        rate = _lookup(rates, section.type, f"{field}.{index}.type", "trench type")
        distance = _non_negative(section.distance, f"{field}.{index}.distance")
        total += rate * distance
    return total


def compute_quote(
    config: QuoteConfig,
    prices: PriceTable,
    features: Optional[FeatureConfig] = None,
    discount_amount: Number = 0,
) -> QuoteTotals:
    """Price ``config`` against ``prices``.

    Feature toggles are enforced here, not only in the UI: a component whose
    toggle is off contributes nothing even if the configuration selects it.
    Unrecognised catalog keys raise ``InvalidConfigurationError`` instead of
    pricing as zero. ``features=None`` means the default (all enabled)
    feature config.
    """
    features = features or DEFAULT_FEATURE_CONFIG
    items: List[LineItem] = []

    def add(key: str, label: str, amount: Decimal) -> None:
        items.append(LineItem(key=key, label=label, amount=amount))

    if config.model not in prices.model_prices:
        raise InvalidConfigurationError(f"Unknown model '{config.model}'", field="model")
    model = prices.model_prices[config.model]
    model_label = MODEL_LABELS.get(config.model, config.model)

    add("system", f"{model_label} system", to_decimal(model.system))
    add("shipping", f"{model_label} shipping", to_decimal(model.ship))
    if config.unit_pad:
        add("unit_pad", "Unit pad", to_decimal(model.pad))
    if config.mobility:
        add("mobility", "Mobility kit", to_decimal(model.mobility))

    if features.enable_warranty_upgrades and is_selected(config.warranty):
        if config.warranty not in WARRANTY_OPTIONS:
            raise InvalidConfigurationError(f"Unknown warranty '{config.warranty}'", field="warranty")
        years = config.warranty.replace("warranty", "")
        add("warranty", f"{years}-year warranty upgrade", to_decimal(getattr(model, config.warranty)))

    if is_selected(config.tank):
        add("tank", f"{config.tank} gallon tank", _lookup(prices.tank_prices, config.tank, "tank", "tank size"))
        if config.tank_pad:
            add("tank_pad", "Tank pad", _lookup(prices.tank_pads, config.tank, "tank", "tank size"))

    if config.city.strip():
        add("delivery", f"Delivery to {config.city}", _lookup(prices.city_delivery, config.city, "city", "city"))

    if features.enable_sensors and is_selected(config.sensor):
        # One sensor per connected tank
        add("sensor", "Tank sensor", _lookup(prices.sensor_prices, config.sensor, "sensor", "sensor type"))

    if features.enable_filters and is_selected(config.filter):
        filter_price = _lookup(prices.filter_prices, config.filter, "filter", "filter type")
        quantity = _non_negative(config.filter_qty, "filterQty")
        if quantity:
            add("filters", f"Filters x{config.filter_qty}", filter_price * quantity)

    if features.enable_pumps and is_selected(config.pump):
        add("pump", "Pump", _lookup(prices.pump_prices, config.pump, "pump", "pump type"))

    if features.enable_trenching and config.trenching_sections:
        add(
            "trenching",
            "Underground trenching",
            _run_total(config.trenching_sections, prices.trench_rates, "trenchingSections"),
        )

    if features.enable_aboveground_trenching and config.ab_trenching_sections:
        add(
            "ab_trenching",
            "Aboveground runs",
            _run_total(config.ab_trenching_sections, prices.ab_trench_rates, "ab_trenchingSections"),
        )

    if features.enable_demolition and config.demolition.enabled:
        distance = _non_negative(config.demolition.distance, "demolition.distance")
        add(
            "demolition",
            "Demolition",
            to_decimal(DEMOLITION_BASE_FEE) + to_decimal(DEMOLITION_PER_FOOT) * distance,
        )

    if features.enable_custom_adjustments:
        for index, adjustment in enumerate(config.custom_adjs):
            if not adjustment.enabled:
                continue
            field = f"customAdjs.{index}.amount"
            if not math.isfinite(adjustment.amount):
                raise InvalidConfigurationError("Adjustment amount must be a finite number", field=field)
            add(
                f"custom_{index}",
                adjustment.label.strip() or "Custom adjustment",
                to_decimal(adjustment.amount),
            )

    discount = to_decimal(discount_amount)
    if not discount.is_finite() or discount < 0:
        raise InvalidConfigurationError("Discount must be a non-negative amount", field="discount_amount")

    original_total = sum((item.amount for item in items), ZERO)
    final_total = max(ZERO, original_total - discount)

    try:
        rounded = [round_money(value) for value in (original_total, discount, final_total)]
    except InvalidOperation:
        # Too many digits to carry cents
        raise InvalidConfigurationError("Quote amounts are too large to price", field="config")

    return QuoteTotals(
        line_items=items,
        original_total=rounded[0],
        discount_amount=rounded[1],
        final_total=rounded[2],
    )


def check_selection_enabled(config: QuoteConfig, features: FeatureConfig) -> None:
    """Reject models, tanks or cities the partner's calculator does not offer.

    Keys the catalog does not know at all are an invalid configuration, not an
    unoffered option.
    """
    if config.model not in MODELS:
        raise InvalidConfigurationError(f"Unknown model '{config.model}'", field="model")
    if is_selected(config.tank) and config.tank not in TANK_SIZES:
        raise InvalidConfigurationError(f"Unknown tank size '{config.tank}'", field="tank")
    if config.city.strip() and config.city not in CITIES:
        raise InvalidConfigurationError(f"Unknown city '{config.city}'", field="city")

    errors = []
    if config.model not in features.enabled_models:
        errors.append({"field": "model", "message": f"Model '{config.model}' is not offered", "type": "not_offered"})
    if is_selected(config.tank) and config.tank not in features.enabled_tanks:
        errors.append({"field": "tank", "message": f"Tank '{config.tank}' is not offered", "type": "not_offered"})
    if config.city.strip() and config.city not in features.enabled_cities:
        errors.append({"field": "city", "message": f"City '{config.city}' is not offered", "type": "not_offered"})
    if errors:
        raise ValidationError("Configuration includes options this calculator does not offer", errors=errors)
