"""Entry point for running the speedtest logger."""

from __future__ import annotations

import argparse

from speedlog import bootstrap
from speedlog.config import ConfigError


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Log Ookla speedtest results to CSV on a schedule")
    parser.add_argument("--config", default=None, help="Path to config.yaml")
    parser.add_argument("--interval", type=int, default=None, help="Minutes between measurements (default 15)")
    parser.add_argument("--timeout", type=int, default=None, help="Seconds to wait for one speedtest (default 100)")
    parser.add_argument("--log-dir", default=None, help="Directory for the CSV log (default: current directory)")
    parser.add_argument("--log-level", default=None, help="Diagnostic log level, e.g. DEBUG")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    overrides = {
        "interval": args.interval,
        "timeout": args.timeout,
        "log_dir": args.log_dir,
        "log_level": args.log_level,
    }
    try:
        context = bootstrap(args.config, overrides)
    except ConfigError as exc:
        raise SystemExit(f"Configuration error: {exc}") from exc
    except FileNotFoundError as exc:
        raise SystemExit(str(exc)) from exc

    context.start()


if __name__ == "__main__":
    main()
