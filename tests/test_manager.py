import pytest

from speedlog.csv_log import CSVLogWriter
from speedlog.measurements.manager import MeasurementManager
from speedlog.measurements.speedtest_runner import MeasurementLaunchError, RunOutcome, RunState


class FakeRunner:
    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.calls = 0

    def run(self):
        self.calls += 1
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def _completed(text):
    return RunOutcome(state=RunState.COMPLETED, output=text, return_code=0, duration_seconds=20.0)


def _timed_out():
    return RunOutcome(state=RunState.TIMED_OUT, output=None, return_code=None, duration_seconds=100.0)


@pytest.fixture
def writer(tmp_path):
    writer = CSVLogWriter(tmp_path / "Ookla_3.7.2024_0905.csv")
    writer.ensure_header()
    return writer


def test_completed_tick_appends_one_row(writer, sample_report, tick_time):
    manager = MeasurementManager(FakeRunner([_completed(sample_report)]), writer)

    record = manager.run_tick(tick_time)

    assert record is not None
    assert record.server == "Acme Net"
    assert writer.count_rows() == 1


def test_timed_out_tick_appends_nothing(writer, tick_time):
    manager = MeasurementManager(FakeRunner([_timed_out()]), writer)

    assert manager.run_tick(tick_time) is None
    assert writer.count_rows() == 0


def test_rows_follow_tick_order(writer, sample_report, tick_time):
    second_report = sample_report.replace("Acme Net", "Other Net")
    runner = FakeRunner([_completed(sample_report), _timed_out(), _completed(second_report)])
    manager = MeasurementManager(runner, writer)

    for _ in range(3):
        manager.run_tick(tick_time)

    rows = writer.path.read_text(encoding="utf-8").splitlines()[1:]
    assert [row.split(", ")[2] for row in rows] == ["Acme Net", "Other Net"]


def test_launch_error_propagates(writer, tick_time):
    manager = MeasurementManager(FakeRunner([MeasurementLaunchError("gone")]), writer)

    with pytest.raises(MeasurementLaunchError):
        manager.run_tick(tick_time)
