"""Partner feature configuration resolution.

Stored configs are partial camelCase documents. They are merged key by key
over ``DEFAULT_FEATURE_CONFIG`` so a partner who customised one toggle keeps
the defaults for everything else.
"""

import logging
from typing import Optional

from app.schemas.pricing import FeatureConfig
from app.services.catalog import CITIES, MODELS, TANK_SIZES

logger = logging.getLogger(__name__)

# Everything enabled
DEFAULT_FEATURE_CONFIG = FeatureConfig(
    enabled_models=list(MODELS),
    enabled_tanks=list(TANK_SIZES),
    enabled_cities=list(CITIES),
    enable_warranty_upgrades=True,
    enable_demolition=True,
    enable_trenching=True,
    enable_aboveground_trenching=True,
    enable_panel_upgrade=True,
    enable_custom_adjustments=True,
    enable_pumps=True,
    enable_sensors=True,
    enable_filters=True,
    show_pricing=True,
    require_approval=False,
)

# Stored key -> attribute name, e.g. "enableSensors" -> "enable_sensors"
_STORED_KEYS = {
    field.alias: name for name, field in FeatureConfig.model_fields.items()
}


def _stored_key(key: str) -> Optional[str]:
    """Accept both the stored camelCase key and the attribute name."""
    if key in _STORED_KEYS:
        return key
    for alias, name in _STORED_KEYS.items():
        if key == name:
            return alias
    return None


_LIST_KEYS = {"enabledModels", "enabledTanks", "enabledCities"}
_TEXT_KEYS = {"customDisclaimers", "customNotes"}


def _accepts(stored_key: str, value) -> bool:
    if stored_key in _LIST_KEYS:
        return isinstance(value, (list, tuple))
    if stored_key in _TEXT_KEYS:
        return isinstance(value, str)
    return isinstance(value, bool)


def resolve_feature_config(stored: Optional[dict]) -> FeatureConfig:
    """Merge a partner's stored feature config over the defaults.

    Shallow merge: a key present with a non-null value replaces the default
    value for that key (lists are replaced wholesale, never unioned). Keys
    the schema does not know, and values of the wrong type, are ignored.
    ``None`` yields the defaults.
    """
    if not stored:
        return DEFAULT_FEATURE_CONFIG

    merged = DEFAULT_FEATURE_CONFIG.model_dump(by_alias=True)
    for key, value in stored.items():
        if value is None:
            continue
        stored_key = _stored_key(key)
        if stored_key is None:
            logger.debug(f"Ignoring unknown feature config key {key!r}")
            continue
        if not _accepts(stored_key, value):
            logger.warning(f"Ignoring malformed feature config value for {stored_key}")
            continue
        merged[stored_key] = [str(item) for item in value] if stored_key in _LIST_KEYS else value

    return FeatureConfig.model_validate(merged)


def merge_feature_update(stored: Optional[dict], update: dict) -> dict:
    """Apply a partial update to a stored partial config.

    Returns the new partial document to persist: existing keys the update
    does not mention are kept, keys it sets to ``None`` are dropped (they
    fall back to the default on the next resolve).
    """
    merged = dict(stored or {})
    for key, value in update.items():
        stored_key = _stored_key(key)
        if stored_key is None:
            continue
        if value is None:
            merged.pop(stored_key, None)
        else:
            merged[stored_key] = list(value) if stored_key in _LIST_KEYS else value
    return merged
