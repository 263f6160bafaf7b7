"""Speedtest execution, report parsing and per-tick orchestration."""
