"""faultline CLI entry point.

This module enables running faultline as:
    python -m faultline <command>
"""

from faultline.cli import cli

if __name__ == "__main__":
    cli()
