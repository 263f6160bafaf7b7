from datetime import datetime

import speedlog
from speedlog import ApplicationContext
from speedlog.config import load_config


def test_context_wires_components_and_writes_header(tmp_path, monkeypatch):
    monkeypatch.setattr(speedlog, "configure_logging", lambda config: tmp_path / "speedlog.log")
    binary = tmp_path / "speedtest"
    binary.write_text("", encoding="utf-8")
    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        f"paths:\n  log_dir: out\nookla:\n  binary_path: {binary}\n  extra_args: ['--progress=no']\n",
        encoding="utf-8",
    )

    context = ApplicationContext(load_config(str(config_path)), started_at=datetime(2024, 1, 2, 7, 3))

    log_path = tmp_path.resolve() / "out" / "Ookla_1.2.2024_0703.csv"
    assert context.writer.path == log_path
    assert log_path.read_text(encoding="utf-8").startswith("Date, Time, Server,")
    assert context.runner.command == [str(binary), "--accept-license", "--accept-gdpr", "--progress=no"]
    assert context.runner.timeout_seconds == 100
    assert context.state.interval_minutes == 15
    assert context.state.next_due_time == datetime(2024, 1, 2, 7, 3)
