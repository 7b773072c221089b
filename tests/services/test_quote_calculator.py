"""Tests for the quote price calculator."""
from decimal import Decimal

import pytest

from app.exceptions import ErrorCode, InvalidConfigurationError, ValidationError
from app.schemas.pricing import QuoteConfig
from app.services.catalog import DEFAULT_PRICING, default_price_table
from app.services.feature_config import DEFAULT_FEATURE_CONFIG, resolve_feature_config
from app.services.pricing_overrides import resolve_price_table
from app.services.quote_calculator import check_selection_enabled, compute_quote

from tests.factories import QuoteConfigFactory


def _config(**overrides) -> QuoteConfig:
    return QuoteConfig.model_validate(QuoteConfigFactory(**overrides))


class TestScenarios:
    """Reference configurations priced against the default table."""

    def test_standard_with_tank_pad_and_houston_delivery(self):
        """Test the standard model with a tank pad and Houston delivery."""
        config = _config(tank="1550", tankPad=True, city="Houston")
        totals = compute_quote(config, default_price_table())

        # system 17499 + ship 1095 + tank 1430.35 + tank pad 1850 + Houston 200
        assert totals.original_total == Decimal("22074.35")
        assert totals.discount_amount == Decimal("0.00")
        assert totals.final_total == Decimal("22074.35")
        assert [item.key for item in totals.line_items] == [
            "system", "shipping", "tank", "tank_pad", "delivery",
        ]

    def test_warranty_ignored_when_upgrades_disabled(self):
        """Test that the warranty is ignored when upgrades are off."""
        features = resolve_feature_config({"enableWarrantyUpgrades": False})
        config = _config(warranty="warranty8")
        totals = compute_quote(config, default_price_table(), features)

        assert totals.line_item("warranty") is None
        assert totals.original_total == Decimal("18594.00")

    def test_warranty_added_when_enabled(self):
        """Test that the warranty is priced when upgrades are on."""
        totals = compute_quote(_config(warranty="warranty8"), default_price_table())
        assert totals.line_item("warranty").amount == Decimal("2599")

    def test_underground_trench_section(self):
        """Test pricing an underground trench section."""
        base = compute_quote(_config(), default_price_table())
        config = _config(trenchingSections=[{"type": "trench_elec", "distance": 40}])
        totals = compute_quote(config, default_price_table())

        assert totals.line_item("trenching").amount == Decimal("1300.0")
        assert totals.original_total - base.original_total == Decimal("1300.00")


class TestComponents:
    def test_no_tank_adds_nothing_even_with_pad(self):
        """No tank means no tank pad charge."""
        totals = compute_quote(_config(tank="none", tankPad=True), default_price_table())
        assert totals.line_item("tank") is None
        assert totals.line_item("tank_pad") is None

    def test_numeric_tank_size_accepted(self):
        """Test that a numeric tank size is accepted."""
        totals = compute_quote(_config(tank=500), default_price_table())
        assert totals.line_item("tank").amount == Decimal("770.9")

    def test_blank_city_adds_no_delivery(self):
        """Test that a blank city adds no delivery."""
        totals = compute_quote(_config(city=""), default_price_table())
        assert totals.line_item("delivery") is None

    def test_unit_pad_and_mobility(self):
        """Test the unit pad and mobility kit."""
        totals = compute_quote(_config(model="x", unitPad=True, mobility=True), default_price_table())
        assert totals.line_item("unit_pad").amount == Decimal("2100")
        assert totals.line_item("mobility").amount == Decimal("1000")

    def test_filter_multiplied_by_quantity(self):
        """Test that the filter price is multiplied by quantity."""
        totals = compute_quote(_config(filter="standard", filterQty=3), default_price_table())
        assert totals.line_item("filters").amount == Decimal("450")

    def test_zero_filter_quantity_adds_nothing(self):
        """A zero filter quantity adds no line item."""
        totals = compute_quote(_config(filter="standard", filterQty=0), default_price_table())
        assert totals.line_item("filters") is None

    def test_sensor_and_pump(self):
        """Test pricing a sensor and a pump."""
        totals = compute_quote(_config(sensor="normal", pump="mini"), default_price_table())
        assert totals.line_item("sensor").amount == Decimal("35")
        assert totals.line_item("pump").amount == Decimal("800")

    def test_aboveground_sections_summed(self):
        """Test that aboveground sections are summed into one line."""
        config = _config(ab_trenchingSections=[
            {"type": "ab_elec", "distance": 10},
            {"type": "ab_plumb", "distance": 4},
        ])
        totals = compute_quote(config, default_price_table())
        assert totals.line_item("ab_trenching").amount == Decimal("461.0")

    def test_demolition_policy(self):
        """Test the demolition base fee and per-foot rate."""
        totals = compute_quote(_config(demolition={"enabled": True, "distance": 25}), default_price_table())
        assert totals.line_item("demolition").amount == Decimal("750")

    def test_disabled_demolition_adds_nothing(self):
        """Test that disabled demolition adds nothing."""
        totals = compute_quote(_config(demolition={"enabled": False, "distance": 25}), default_price_table())
        assert totals.line_item("demolition") is None

    def test_custom_adjustments_are_signed_and_filtered(self):
        """Custom adjustments may be negative and disabled ones are skipped."""
        config = _config(customAdjs=[
            {"enabled": True, "label": "Crane rental", "amount": 400},
            {"enabled": True, "label": "Loyalty credit", "amount": -150.5},
            {"enabled": False, "label": "Ignored", "amount": 999},
        ])
        totals = compute_quote(config, default_price_table())
        custom = [item for item in totals.line_items if item.key.startswith("custom_")]
        assert [item.label for item in custom] == ["Crane rental", "Loyalty credit"]
        assert sum(item.amount for item in custom) == Decimal("249.5")

    def test_panel_upgrade_and_connection_are_unpriced(self):
        """Test that panel upgrade and connection add no charge."""
        plain = compute_quote(_config(), default_price_table())
        totals = compute_quote(_config(panelUpgrade="200a", connection="direct"), default_price_table())
        assert totals.original_total == plain.original_total


class TestFeatureToggles:
    @pytest.mark.parametrize(
        "toggle, overrides, line_key",
        [
            ("enableSensors", {"sensor": "normal"}, "sensor"),
            ("enableFilters", {"filter": "s"}, "filters"),
            ("enablePumps", {"pump": "mini"}, "pump"),
            ("enableTrenching", {"trenchingSections": [{"type": "trench_comb", "distance": 5}]}, "trenching"),
            ("enableAbovegroundTrenching", {"ab_trenchingSections": [{"type": "ab_comb", "distance": 5}]}, "ab_trenching"),
            ("enableDemolition", {"demolition": {"enabled": True, "distance": 5}}, "demolition"),
            ("enableCustomAdjustments", {"customAdjs": [{"label": "Extra", "amount": 10}]}, "custom_0"),
        ],
    )
    def test_disabled_toggle_removes_component(self, toggle, overrides, line_key):
        """Test that each disabled toggle removes its component."""
        config = _config(**overrides)
        enabled = compute_quote(config, default_price_table())
        disabled = compute_quote(config, default_price_table(), resolve_feature_config({toggle: False}))

        assert enabled.line_item(line_key) is not None
        assert disabled.line_item(line_key) is None
        assert disabled.original_total < enabled.original_total


class TestDiscountAndRounding:
    def test_discount_applied_to_unrounded_sum(self):
        """Test that the discount is applied before rounding."""
        config = _config(model="s", tank="5000")
        totals = compute_quote(config, default_price_table(), discount_amount="100.004")
        # 9999 + 645 + 5125.99 = 15769.99; minus 100.004 = 15669.986
        assert totals.original_total == Decimal("15769.99")
        assert totals.discount_amount == Decimal("100.00")
        assert totals.final_total == Decimal("15669.99")

    def test_final_total_never_negative(self):
        """The final total never drops below zero."""
        totals = compute_quote(_config(model="s"), default_price_table(), discount_amount=1_000_000)
        assert totals.final_total == Decimal("0.00")

    def test_negative_discount_rejected(self):
        """Test that a negative discount is rejected."""
        with pytest.raises(InvalidConfigurationError):
            compute_quote(_config(), default_price_table(), discount_amount=-1)

    def test_float_prices_do_not_drift(self):
        """Test that float prices sum without drift."""
        config = _config(model="s", tank="500", city="Dallas")
        totals = compute_quote(config, default_price_table())
        # 9999 + 645 + 770.9 + 577.5
        assert totals.original_total == Decimal("11992.40")


class TestInvalidConfiguration:
    @pytest.mark.parametrize(
        "overrides, field",
        [
            ({"model": "mega"}, "model"),
            ({"tank": "750"}, "tank"),
            ({"city": "El Paso"}, "city"),
            ({"sensor": "wireless"}, "sensor"),
            ({"filter": "huge"}, "filter"),
            ({"pump": "maxi"}, "pump"),
            ({"warranty": "warranty10"}, "warranty"),
            ({"trenchingSections": [{"type": "ab_elec", "distance": 3}]}, "trenchingSections.0.type"),
            ({"trenchingSections": [{"type": "trench_elec", "distance": -3}]}, "trenchingSections.0.distance"),
            ({"demolition": {"enabled": True, "distance": -1}}, "demolition.distance"),
            ({"filter": "s", "filterQty": -2}, "filterQty"),
        ],
    )
    def test_rejected_never_priced_as_zero(self, overrides, field):
        """Test that invalid selections raise instead of pricing as zero."""
        with pytest.raises(InvalidConfigurationError) as exc_info:
            compute_quote(_config(**overrides), default_price_table())
        assert exc_info.value.errors[0]["field"] == field
        assert exc_info.value.status_code == 422

    @pytest.mark.parametrize("amount", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_adjustment_amount(self, amount):
        """Test that NaN or infinite adjustments are rejected on their own field."""
        config = _config(customAdjs=[{"label": "Credit", "amount": 10}, {"label": "Bad", "amount": amount}])
        with pytest.raises(InvalidConfigurationError) as exc_info:
            compute_quote(config, default_price_table())
        assert exc_info.value.errors[0]["field"] == "customAdjs.1.amount"

    @pytest.mark.parametrize(
        "overrides",
        [
            {"trenchingSections": [{"type": "trench_elec", "distance": 1e27}]},
            {"demolition": {"enabled": True, "distance": 1e27}},
            {"filter": "s", "filterQty": 10 ** 27},
            {"customAdjs": [{"label": "Huge", "amount": 1e27}]},
        ],
    )
    def test_amounts_too_large_to_round(self, overrides):
        """Test that totals beyond cent precision are an invalid configuration."""
        with pytest.raises(InvalidConfigurationError) as exc_info:
            compute_quote(_config(**overrides), default_price_table())
        assert exc_info.value.status_code == 422

    def test_infinite_distance_rejected(self):
        """Test that an infinite trench distance is rejected."""
        config = _config(trenchingSections=[{"type": "trench_elec", "distance": float("inf")}])
        with pytest.raises(InvalidConfigurationError) as exc_info:
            compute_quote(config, default_price_table())
        assert exc_info.value.errors[0]["field"] == "trenchingSections.0.distance"


class TestProperties:
    def test_deterministic(self):
        """Test that the same inputs give the same totals."""
        config = _config(tank="3000", tankPad=True, city="Austin", sensor="normal", warranty="warranty5")
        prices = default_price_table()
        assert compute_quote(config, prices) == compute_quote(config, prices)

    @pytest.mark.parametrize(
        "category, key, leaf",
        [
            ("modelPrices", "standard", "system"),
            ("modelPrices", "standard", "ship"),
            ("tankPrices", "3000", None),
            ("tankPads", "3000", None),
            ("cityDelivery", "Austin", None),
            ("sensorPrices", "normal", None),
            ("pumpPrices", "mini", None),
            ("trenchRates", "trench_plumb", None),
        ],
    )
    def test_monotonic_in_component_price(self, category, key, leaf):
        """Raising a component price never lowers the total."""
        config = _config(
            tank="3000", tankPad=True, city="Austin", sensor="normal", pump="mini",
            trenchingSections=[{"type": "trench_plumb", "distance": 12}],
        )
        if leaf is None:
            raised = {category: {key: DEFAULT_PRICING[category][key] + 100}}
        else:
            raised = {category: {key: {leaf: DEFAULT_PRICING[category][key][leaf] + 100}}}

        base = compute_quote(config, default_price_table())
        higher = compute_quote(config, resolve_price_table(raised, edit_allowed=True))
        assert higher.original_total > base.original_total


class TestCheckSelectionEnabled:
    def test_default_features_allow_everything(self):
        """Test that default features allow any catalog selection."""
        check_selection_enabled(_config(model="x", tank="5000", city="Dallas"), DEFAULT_FEATURE_CONFIG)

    def test_rejects_disabled_model_tank_and_city(self):
        """Test that every unoffered selection is reported."""
        features = resolve_feature_config({
            "enabledModels": ["s"],
            "enabledTanks": ["500"],
            "enabledCities": ["Houston"],
        })
        with pytest.raises(ValidationError) as exc_info:
            check_selection_enabled(_config(model="x", tank="5000", city="Dallas"), features)
        assert {e["field"] for e in exc_info.value.errors} == {"model", "tank", "city"}

    @pytest.mark.parametrize(
        "overrides, field",
        [
            ({"model": "zzz"}, "model"),
            ({"tank": "750"}, "tank"),
            ({"city": "El Paso"}, "city"),
        ],
    )
    def test_unknown_catalog_key_is_invalid_configuration(self, overrides, field):
        """Test that keys outside the catalog are not reported as unoffered."""
        features = resolve_feature_config({"enabledModels": ["s"]})
        with pytest.raises(InvalidConfigurationError) as exc_info:
            check_selection_enabled(_config(**overrides), features)
        assert exc_info.value.errors[0]["field"] == field
        assert exc_info.value.code == ErrorCode.INVALID_CONFIGURATION
