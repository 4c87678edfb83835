"""
gatecalc File Runner
====================
Execute a file of gatecalc statements, one per line.

Usage:
    python run.py <filename.gc>
    python run.py <filename.gc> --dialect "verilog nand"
    python run.py <filename.gc> --trace
"""
import argparse
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from gatecalc.errors import GateCalcError
from gatecalc.session import Session, SessionConfig


def run_file(filepath: str, config: SessionConfig | None = None,
             output_fn=print) -> int:
    """
    Execute a gatecalc source file.

    Args:
        filepath: Path to the source file
        config: Session settings (defaults come from the environment)
        output_fn: Where rendered results are written

    Returns:
        0 on success, 1 on error
    """
    if not os.path.exists(filepath):
        output_fn(f"Error: File not found: {filepath}")
        return 1

    with open(filepath, "r", encoding="utf-8") as f:
        lines = f.read().splitlines()

    session = Session(config or SessionConfig.from_env(), output_fn=output_fn)

    for number, line in enumerate(lines, start=1):
        statement = line.split("#", 1)[0].strip()
        if not statement:
            continue
        try:
            output_fn(session.run(statement))
        except GateCalcError as e:
            output_fn(f"Error (line {number}): {type(e).__name__}: {e}")
            return 1

    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="Run a gatecalc file")
    parser.add_argument("file", help="Path to the source file")
    parser.add_argument("--dialect", default=None, help="Initial dialect")
    parser.add_argument("--trace", action="store_true", help="Echo resolved trees")
    args = parser.parse_args()

    config = SessionConfig.from_env()
    if args.dialect:
        config.dialect = args.dialect
    if args.trace:
        config.trace = True

    try:
        return run_file(args.file, config)
    except GateCalcError as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
