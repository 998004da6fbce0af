"""Entry point for running opaque_smartid as a module.

This allows the package to be executed as:
    python -m opaque_smartid
"""

from opaque_smartid.cli.main import cli

if __name__ == "__main__":
    cli()
