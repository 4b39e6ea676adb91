"""
Run the banana backend CLI.

Usage:
    python run_cli.py [COMMAND] [OPTIONS]

Commands:
    seed       Replace the catalog with the ten built-in bananas
    bananas    List the catalog
    serve      Run the REST API

Examples:
    python run_cli.py seed
    python run_cli.py bananas --rarity legendary
"""

import sys
from pathlib import Path

# Ensure src/ is importable
sys.path.insert(0, str(Path(__file__).parent / "src"))

from adapters.cli.main import app

if __name__ == "__main__":
    app()
