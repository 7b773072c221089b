"""Pricing schemas shared by the resolvers, the calculator and the API.

Stored JSON documents (feature configs, price tables, quote configs) use the
calculator's camelCase keys; Python code uses snake_case attributes. Aliases
bridge the two, so ``model_dump(by_alias=True)`` reproduces the stored form.
"""

from decimal import Decimal
from typing import Optional, List

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class FeatureConfig(BaseModel):
    """Fully populated partner feature configuration."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    # Product availability
    enabled_models: List[str]
    enabled_tanks: List[str]
    enabled_cities: List[str]

    # Feature toggles
    enable_warranty_upgrades: bool = True
    enable_demolition: bool = True
    enable_trenching: bool = True
    enable_aboveground_trenching: bool = True
    enable_panel_upgrade: bool = True
    enable_custom_adjustments: bool = True
    enable_pumps: bool = True
    enable_sensors: bool = True
    enable_filters: bool = True

    # Custom text
    custom_disclaimers: Optional[str] = None
    custom_notes: Optional[str] = None

    # Display options
    show_pricing: bool = True
    require_approval: bool = False


class ModelPriceSet(BaseModel):
    """Component prices for one Hydropack model."""

    model_config = ConfigDict(frozen=True)

    system: float
    ship: float
    pad: float
    mobility: float
    warranty5: float
    warranty8: float


class PriceTable(BaseModel):
    """Effective price table: every leaf resolved to a number."""

    model_config = ConfigDict(populate_by_name=True, frozen=True, protected_namespaces=())

    model_prices: dict[str, ModelPriceSet] = Field(alias="modelPrices")
    tank_prices: dict[str, float] = Field(alias="tankPrices")
    tank_pads: dict[str, float] = Field(alias="tankPads")
    city_delivery: dict[str, float] = Field(alias="cityDelivery")
    sensor_prices: dict[str, float] = Field(alias="sensorPrices")
    filter_prices: dict[str, float] = Field(alias="filterPrices")
    pump_prices: dict[str, float] = Field(alias="pumpPrices")
    trench_rates: dict[str, float] = Field(alias="trenchRates")
    ab_trench_rates: dict[str, float] = Field(alias="ab_trenchRates")

    def as_document(self) -> dict:
        """Stored/JSON form, keyed like the partner override documents."""
        return self.model_dump(by_alias=True)


class TrenchSection(BaseModel):
    type: str
    distance: float = 0


class Demolition(BaseModel):
    enabled: bool = False
    distance: float = 0


class CustomAdjustment(BaseModel):
    enabled: bool = True
    label: str = ""
    amount: float = 0
    notes: str = ""


class QuoteConfig(BaseModel):
    """A calculator session's selections; frozen into a quote when saved."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    model: str
    unit_pad: bool = False
    mobility: bool = False
    tank: str = "none"
    tank_pad: bool = False
    city: str = ""
    sensor: str = "none"
    filter: str = "none"
    filter_qty: int = 1
    pump: str = "none"
    connection: str = ""
    trenching_sections: List[TrenchSection] = Field(default_factory=list)
    ab_trenching_sections: List[TrenchSection] = Field(
        default_factory=list, alias="ab_trenchingSections"
    )
    panel_upgrade: str = "none"
    warranty: str = "none"
    demolition: Demolition = Field(default_factory=Demolition)
    custom_adjs: List[CustomAdjustment] = Field(default_factory=list)

    @field_validator("tank", "city", "sensor", "filter", "pump", "panel_upgrade", "warranty", mode="before")
    @classmethod
    def selection_to_str(cls, v):
        """Tank sizes arrive as numbers from some clients."""
        if v is None:
            return "none"
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(int(v)) if float(v).is_integer() else str(v)
        return v

    def as_document(self) -> dict:
        return self.model_dump(by_alias=True)


class LineItem(BaseModel):
    """One priced component of a quote."""

    key: str
    label: str
    amount: Decimal


class QuoteTotals(BaseModel):
    """Calculator output. Totals are rounded to cents; line items are exact."""

    line_items: List[LineItem]
    original_total: Decimal
    discount_amount: Decimal
    final_total: Decimal

    def line_item(self, key: str) -> Optional[LineItem]:
        for item in self.line_items:
            if item.key == key:
                return item
        return None
