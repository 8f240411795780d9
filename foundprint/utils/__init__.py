# Utilities for FOUNDprint
"""
Small shared helpers with no domain logic.
"""
