"""
Rate models: per-nucleotide mutation rates and site heterogeneity.
"""

from varevo.models.rates import RateModel, RateTable, NUCLEOTIDES
from varevo.models.site_rates import SiteRateMultipliers

__all__ = ["RateModel", "RateTable", "SiteRateMultipliers", "NUCLEOTIDES"]
