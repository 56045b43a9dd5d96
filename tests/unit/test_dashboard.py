import io
import logging
import math
import threading

import pytest

from gridmlp.core.types import RunStatus
from gridmlp.experiments import build_grid
from gridmlp.reporting.dashboard import AnsiRenderer, Dashboard, LogRenderer, make_renderer


class _Recorder:
    def __init__(self) -> None:
        self.frames = []

    def render(self, lines):
        self.frames.append(list(lines))


def _dashboard(tmp_path=None, **kwargs):
    specs = build_grid([2, 10], [0.1], epochs=1000)
    recorder = _Recorder()
    status = tmp_path / "status.txt" if tmp_path is not None else None
    return Dashboard(specs, status_file=status, renderer=recorder, **kwargs), recorder


def test_initial_view_lists_every_run_as_queued(tmp_path):
    dashboard, recorder = _dashboard(tmp_path)
    dashboard.start()
    frame = recorder.frames[-1]
    assert len(frame) == 4
    assert all("[QUEUED]" in line and "Waiting to start..." in line for line in frame)
    assert frame[0].startswith("  [1 ] [2 -0.100-A]")


def test_running_line_reflects_latest_report():
    dashboard, recorder = _dashboard()
    dashboard.report(0, 1, 0.5)
    dashboard.report(0, 100, 0.25)
    line = recorder.frames[-1][0]
    assert "[RUNNING]" in line
    assert "Epoch: 100 " in line
    assert "( 10%)" in line
    assert "Error: 0.250000000000" in line
    assert "Improvement: +0.250000000000" in line


def test_runs_are_sorted_by_error_with_queued_last():
    dashboard, _ = _dashboard()
    dashboard.report(3, 1, 0.2)
    dashboard.report(1, 1, 0.05)
    dashboard.report(2, 1, float("nan"))
    order = [s.spec.index for s in dashboard.ordered()]
    assert order == [1, 3, 0, 2]
    assert math.isinf(dashboard.snapshot(0).avg_error)


def test_finished_line_and_status(tmp_path):
    dashboard, recorder = _dashboard(tmp_path)
    dashboard.report(0, 1, 0.5)
    dashboard.finish(0, 37, 1e-9, converged=True)
    dashboard.finish(1, 1000, 0.1, converged=False)
    assert dashboard.snapshot(0).status is RunStatus.CONVERGED
    assert dashboard.snapshot(1).status is RunStatus.COMPLETED
    lines = recorder.frames[-1]
    assert "[CONVERGED] | Finished in 37   epochs | Final Error: 0.000000001000" in lines[0]
    assert "[COMPLETED] | Finished in 1000 epochs" in lines[1]
    with pytest.raises(ValueError):
        dashboard.report(0, 38, 0.1)


def test_line_count_is_fixed_across_redraws():
    dashboard, recorder = _dashboard()
    dashboard.start()
    dashboard.report(2, 1, 0.3)
    dashboard.finish(2, 5, 0.3, converged=False)
    assert {len(frame) for frame in recorder.frames} == {4}
    assert dashboard.redraws == 3


def test_status_file_mirrors_latest_frame(tmp_path):
    dashboard, recorder = _dashboard(tmp_path)
    dashboard.start()
    dashboard.report(1, 1, 0.125)
    text = (tmp_path / "status.txt").read_text()
    assert text == "".join(f"{line}\n" for line in recorder.frames[-1])


def test_status_file_errors_are_logged_not_raised(tmp_path, caplog):
    specs = build_grid([2], [0.1], epochs=10)
    bad = tmp_path / "missing-dir" / "status.txt"
    dashboard = Dashboard(specs, status_file=bad, renderer=_Recorder())
    with caplog.at_level(logging.ERROR, logger="gridmlp"):
        dashboard.start()
    assert "Error writing to status file" in caplog.text


def test_concurrent_reports_keep_one_consistent_view():
    specs = build_grid([1, 2, 3, 4], [0.1, 0.2], epochs=50)
    recorder = _Recorder()
    dashboard = Dashboard(specs, renderer=recorder)

    def worker(index):
        for epoch in range(1, 51):
            dashboard.report(index, epoch, 1.0 / (epoch + index))
        dashboard.finish(index, 50, 1.0 / (50 + index), converged=False)

    threads = [threading.Thread(target=worker, args=(s.index,)) for s in specs]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert dashboard.redraws == len(specs) * 51
    assert all(len(frame) == len(specs) for frame in recorder.frames)
    assert all(s.status is RunStatus.COMPLETED for s in dashboard.ordered())


def test_ansi_renderer_redraws_in_place():
    stream = io.StringIO()
    renderer = AnsiRenderer(stream)
    renderer.render(["a", "b"])
    renderer.render(["c", "d"])
    output = stream.getvalue()
    assert output.startswith("\r\x1b[Ka\n\r\x1b[Kb\n")
    assert output.endswith("\x1b[2A\r\x1b[Kc\n\r\x1b[Kd\n")


def test_make_renderer_falls_back_to_logging_for_pipes():
    assert isinstance(make_renderer(io.StringIO()), LogRenderer)
