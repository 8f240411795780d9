"""
FOUNDprint CLI entry point.

Usage:
    python -m foundprint.cli run
    python -m foundprint.cli run --profile device.json --json
    python -m foundprint.cli baselines
    python -m foundprint.cli pixel-ratio 1.1
"""

import sys
from .main import main

if __name__ == "__main__":
    sys.exit(main())
