"""
gatecalc REPL
=============
Interactive Read-Eval-Print Loop for gatecalc.
Type expressions, define functions, and switch dialects to see netlists.
"""
import argparse
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from gatecalc.context import Dialect
from gatecalc.errors import GateCalcError
from gatecalc.session import Session, SessionConfig


BANNER = r"""
╔══════════════════════════════════════════════════════════════╗
║                                                              ║
║     ⊼ ─── GATECALC ─── ⊽                                     ║
║                                                              ║
║     Calculator & gate-level netlist compiler v0.1.0          ║
║                                                              ║
║     Type 'help' for syntax and dialects                      ║
║     Type 'exit' or Ctrl+C to quit                            ║
║                                                              ║
╚══════════════════════════════════════════════════════════════╝
"""

HELP_TEXT = """
╔══════════════════════════════════════════════════════════════╗
║                     GATECALC REFERENCE                       ║
╠══════╦═══════════════════════════════════════════════════════╣
║  ~   ║ not (prefix, binds tightest)                          ║
║  ^   ║ power                                                 ║
║ / *  ║ inverse, multiply                                     ║
║ % -  ║ modulus, negate                                       ║
║  +   ║ add                                                   ║
║ & |  ║ and, or                                               ║
║  =   ║ define:  f(x, y) = x * y   or   k = 3                 ║
╠══════╩═══════════════════════════════════════════════════════╣
║ context calculate | verilog | verilog nand | verilog nor     ║
╚══════════════════════════════════════════════════════════════╝

Examples:
  2 + 11 * 4
  f(x) = x * 2
  f(5)
  context verilog nand
  and(a, b)

Commands: help, env, log, clear, exit
"""


def run_repl(config: SessionConfig | None = None):
    """Run the interactive gatecalc REPL."""
    print(BANNER)

    session = Session(config or SessionConfig.from_env())

    while True:
        try:
            line = input(f"  {session.dialect.value}⟩ ")
        except (EOFError, KeyboardInterrupt):
            print("\n  Goodbye.")
            break

        line = line.strip()
        if not line:
            continue

        # Special commands
        if line.lower() == "exit" or line.lower() == "quit":
            print("  Goodbye.")
            break

        if line.lower() == "help":
            print(HELP_TEXT)
            continue

        if line.lower() == "env":
            for depth, frame in enumerate(session.stack.describe()):
                print(f"  ─── Frame {depth}: {frame['dialect']} ───")
                if not frame["definitions"]:
                    print("    (no definitions)")
                for signature, body in frame["definitions"].items():
                    print(f"    {signature} = {body}")
            continue

        if line.lower() == "log":
            if session.history:
                print("  ─── History ───")
                for entry in session.history:
                    for part in entry.splitlines():
                        print(f"    {part}")
            else:
                print("  (no results yet)")
            continue

        if line.lower() == "clear":
            session.reset()
            print("  ∅ State cleared.")
            continue

        try:
            output = session.run(line)
            for part in output.splitlines() or [""]:
                print(f"  ⟹ {part}")
        except GateCalcError as e:
            print(f"  ⚠ {type(e).__name__}: {e}")
        except Exception as e:
            print(f"  ⚠ Error: {type(e).__name__}: {e}")


def main():
    parser = argparse.ArgumentParser(prog="gatecalc", description="gatecalc interactive REPL")
    parser.add_argument("--dialect", default=None,
                        choices=[d.value for d in Dialect], help="Initial dialect")
    parser.add_argument("--trace", action="store_true", help="Echo resolved trees")
    args = parser.parse_args()

    config = SessionConfig.from_env()
    if args.dialect:
        config.dialect = args.dialect
    if args.trace:
        config.trace = True
    run_repl(config)


if __name__ == "__main__":
    main()
