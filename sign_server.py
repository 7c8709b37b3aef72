"""
Entry point for the sign-to-text engine.

Usage examples:
    python sign_server.py                          # camera 0, python/config.json
    python sign_server.py --config my.json --log-level DEBUG
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent
PY_DIR = ROOT / "python"
if str(PY_DIR) not in sys.path:
    sys.path.insert(0, str(PY_DIR))


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Sign language to text engine")
    parser.add_argument(
        "--config",
        default=str(PY_DIR / "config.json"),
        help="JSON config file, merged over the built-in defaults and watched for changes.",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        help="Logging verbosity.",
    )
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="[%(name)s] %(message)s",
    )

    from main_loop import main as run_main_loop

    # model paths in the config are relative to the python/ directory
    config_path = os.path.abspath(args.config)
    prev_cwd = os.getcwd()
    os.chdir(str(PY_DIR))
    try:
        return run_main_loop(config_path)
    finally:
        os.chdir(prev_cwd)


if __name__ == "__main__":
    sys.exit(main())
