"""
Test factories for generating realistic test data.

Uses factory_boy for declarative test data generation.
"""

from .partner import PartnerFactory
from .quote import QuoteConfigFactory, QuoteFactory

__all__ = [
    "PartnerFactory",
    "QuoteConfigFactory",
    "QuoteFactory",
]
