#!/usr/bin/env python3
"""
Demo script to run the portfolio ledger with sample data.

This script demonstrates the ledger using the built-in sample portfolio.
"""
import sys
from pathlib import Path

# Ensure src is in path if running directly
src_path = Path(__file__).parent / "src"
if str(src_path) not in sys.path:
    sys.path.append(str(src_path))

from portfolio_ledger.cli_demo import main

if __name__ == "__main__":
    main()
