#!/usr/bin/env python3
"""
Run the portfolio ledger on the files in ./input (or the directory given as
first argument). See `portfolio-ledger --help` for options.
"""
import sys
from pathlib import Path

src_path = Path(__file__).parent / "src"
if str(src_path) not in sys.path:
    sys.path.append(str(src_path))

from portfolio_ledger.cli_main import main

if __name__ == "__main__":
    main()
