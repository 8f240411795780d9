# CLI package for FOUNDprint
"""
Command-line interface for running FOUNDprint locally.

Commands:
    foundprint run          Replay a device profile through the engine
    foundprint baselines    List study baselines and their candidates
    foundprint pixel-ratio  Disambiguate a pixel ratio reading
"""
