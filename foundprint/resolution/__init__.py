# Resolution package for FOUNDprint
"""
Converts raw observed values into probabilities of commonness.

Looks values up in market-share tables and disambiguates pixel ratios.
Never guesses silently: every result says whether it is a real match or an
estimate.
"""
