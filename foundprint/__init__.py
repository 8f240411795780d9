# FOUNDprint
# Device fingerprint entropy engine

"""
Core principle: every entropy bit in the total must trace back to a cited
market-share table or study. Unknown values are estimated conservatively,
never overstated.

The engine resolves observed characteristics into entropy contributions,
sums them, and reports an anonymity set capped at the world population.
"""

__version__ = "1.0.2"
