#!/usr/bin/env python3
"""Servosphere Trial Analysis Pipeline Runner.

Usage:
    python scripts/run_servosphere_pipeline.py scripts/user_config.py
    python scripts/run_servosphere_pipeline.py scripts/user_config.py --window-size 10
    python scripts/run_servosphere_pipeline.py scripts/user_config.py --input-dir data/trials

Requires the package to be installed (pip install -e .).
"""

import sys

from servosphere.cli.run_servosphere import main


if __name__ == "__main__":
    sys.exit(main())
