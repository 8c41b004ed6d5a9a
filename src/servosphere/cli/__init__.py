"""Command-line interface modules for servosphere pipeline execution.

This package contains core execution logic, making scripts/ optional and deletable.
"""

from servosphere.cli.run_servosphere import run_servosphere_pipeline, main

__all__ = ['run_servosphere_pipeline', 'main']
