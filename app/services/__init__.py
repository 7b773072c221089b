# Services module
from app.services.catalog import default_price_table, offered_catalog
from app.services.feature_config import DEFAULT_FEATURE_CONFIG, resolve_feature_config
from app.services.pricing_overrides import resolve_price_table
from app.services.quote_calculator import compute_quote

__all__ = [
    "default_price_table",
    "offered_catalog",
    "DEFAULT_FEATURE_CONFIG",
    "resolve_feature_config",
    "resolve_price_table",
    "compute_quote",
]
