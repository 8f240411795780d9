# Scoring package for FOUNDprint
"""
Entropy resolution and aggregation.

Every contribution names the rule that produced it. The running total is
never clamped; only the anonymity set shown to a reader is capped.
"""
