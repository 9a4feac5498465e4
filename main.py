"""
Entry point for the UK savings tax calculator.

Usage:
    python main.py          # launches the web app at localhost:5000
    python main.py --cli    # runs the terminal interface
"""

import argparse
import logging

import config as cfg


def main() -> None:
    parser = argparse.ArgumentParser(
        description="UK Savings Tax Calculator: Personal Savings Allowance and ISA interest",
    )
    parser.add_argument(
        "--cli",
        action="store_true",
        help="Run in terminal mode instead of launching the web app",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Run the web app with the Flask debugger (loopback hosts only)",
    )
    parser.add_argument(
        "--log-level",
        default=cfg.LOG_LEVEL,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default from SAVINGS_TAX_LOG_LEVEL)",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    if args.cli:
        from cli import run_cli
        run_cli()
    else:
        from app import run_web
        run_web(debug=args.debug)


if __name__ == "__main__":
    main()
