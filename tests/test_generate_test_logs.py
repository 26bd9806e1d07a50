"""Test for the rotation/retention verification script."""

from datetime import datetime, timedelta

from daylog.generate_test_logs import generate_test_logs


def test_generate_test_logs_keeps_retention_window(tmp_path):
    directory = tmp_path / "daily"

    remaining = generate_test_logs(directory, days=6, entries_per_day=4, days_to_keep=2, synchronous=True)

    today = datetime.now().astimezone().date()
    expected = [f"{(today - timedelta(days=offset)).isoformat()}.log" for offset in (1, 0)]
    assert remaining == expected
    lines = (directory / expected[-1]).read_text(encoding="utf-8").splitlines()
    assert len(lines) == 4
    assert lines[0].endswith(f"Test log entry 1/4 for {today}")
