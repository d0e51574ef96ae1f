"""
Entry point for the Helping Hand letter trainer.

Usage examples:
    python sign_trainer.py                  # guided demo -> practice workflow
    python sign_trainer.py --mode free      # robot signs whatever you confirm
    python sign_trainer.py --config my.json --port /dev/ttyACM0

Keys in the camera window:
    a/i/l/v/y  pick a letter      r  retry       x  back to idle
    c          connect/disconnect robot          e  dismiss error
    ESC or q   quit
"""

from __future__ import annotations

import argparse
import logging

from helping_hand.helpers import load_config


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="ASL letter trainer (A, I, L, V, Y)")
    parser.add_argument(
        "--mode",
        choices=("practice", "free"),
        default="practice",
        help="'practice' runs the demo/practice workflow, 'free' sends each confirmed target letter.",
    )
    parser.add_argument("--config", default="config.json", help="JSON config file (hot reloaded).")
    parser.add_argument("--port", default=None, help="Serial port of the robot hand (overrides config).")
    parser.add_argument("--connect", action="store_true", help="Connect to the robot on start.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging.")
    return parser.parse_args(argv)


def main(argv=None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="[%(name)s] %(levelname)s: %(message)s",
    )

    cfg = load_config(args.config)
    serial_cfg = cfg.setdefault("serial", {})
    if args.port:
        serial_cfg["port"] = args.port
    if args.connect:
        serial_cfg["auto_connect"] = True

    from helping_hand.main_loop import main as run_main_loop

    run_main_loop(cfg, mode=args.mode, config_path=args.config)


if __name__ == "__main__":
    main()
