# Probes package for FOUNDprint
"""
Boundary to the characteristic detectors.

A probe detects one characteristic and reports a value or unavailability.
The engine consumes probes generically and never reaches into how they
measure anything.
"""
