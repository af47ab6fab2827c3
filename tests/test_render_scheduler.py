"""
Tests for render scheduling.

Verifies:
- At most one frame is pending at a time
- A reprocess burst collapses into one frame after the last request
- cancel() drops pending work
- The Qt scheduler renders on the event loop
"""
import pytest

from services.render_scheduler import ManualRenderScheduler, QtRenderScheduler, RenderScheduler


class Counter:
    def __init__(self):
        self.calls = 0

    def __call__(self):
        self.calls += 1


class TestManualScheduler:

    def test_requests_coalesce(self):
        render = Counter()
        scheduler = ManualRenderScheduler(render)

        assert scheduler.request_render()
        assert not scheduler.request_render()
        assert not scheduler.request_render()

        assert scheduler.flush() == 1
        assert render.calls == 1
        assert not scheduler.frame_pending

    def test_new_frame_after_flush(self):
        render = Counter()
        scheduler = ManualRenderScheduler(render)
        scheduler.request_render()
        scheduler.flush()

        assert scheduler.request_render()
        scheduler.flush()
        assert render.calls == 2
        assert scheduler.frames_rendered == 2

    def test_flush_with_nothing_pending(self):
        render = Counter()
        assert ManualRenderScheduler(render).flush() == 0
        assert render.calls == 0

    def test_reprocess_burst_is_one_frame(self):
        render = Counter()
        scheduler = ManualRenderScheduler(render, debounce_ms=16)

        for _ in range(10):
            scheduler.request_reprocess()
        assert scheduler.reprocess_pending
        assert not scheduler.frame_pending
        assert scheduler.last_reprocess_delay == 16

        assert scheduler.flush() == 1
        assert render.calls == 1
        assert not scheduler.reprocess_pending

    def test_explicit_delay(self):
        scheduler = ManualRenderScheduler(Counter())
        scheduler.request_reprocess(120)
        assert scheduler.last_reprocess_delay == 120

    def test_cancel(self):
        render = Counter()
        scheduler = ManualRenderScheduler(render)
        scheduler.request_render()
        scheduler.request_reprocess()

        scheduler.cancel()

        assert scheduler.flush() == 0
        assert render.calls == 0

    def test_failing_render_does_not_wedge(self):
        calls = []

        def render():
            calls.append(1)
            if len(calls) == 1:
                raise RuntimeError("boom")

        scheduler = ManualRenderScheduler(render)
        scheduler.request_render()
        with pytest.raises(RuntimeError):
            scheduler.flush()
        assert scheduler.request_render()

    def test_from_config(self):
        from utils.config import EditorConfig

        config = EditorConfig(debounce_ms=7, color_debounce_ms=70, frame_interval_ms=30)
        scheduler = ManualRenderScheduler.from_config(Counter(), config)
        assert (scheduler.debounce_ms, scheduler.color_debounce_ms, scheduler.frame_interval_ms) == (7, 70, 30)


class TestQtScheduler:

    def test_frame_renders_on_event_loop(self, qtbot):
        render = Counter()
        scheduler = QtRenderScheduler(render, frame_interval_ms=1)

        scheduler.request_render()
        scheduler.request_render()
        qtbot.waitUntil(lambda: render.calls == 1, timeout=1000)
        qtbot.wait(20)

        assert render.calls == 1
        assert not scheduler.frame_pending

    def test_debounced_reprocess(self, qtbot):
        render = Counter()
        scheduler = QtRenderScheduler(render, debounce_ms=10, frame_interval_ms=1)

        for _ in range(5):
            scheduler.request_reprocess()
        qtbot.waitUntil(lambda: render.calls == 1, timeout=1000)
        qtbot.wait(30)

        assert render.calls == 1
        assert not scheduler.reprocess_pending

    def test_cancel_stops_timers(self, qtbot):
        render = Counter()
        scheduler = QtRenderScheduler(render, frame_interval_ms=5)
        scheduler.request_render()
        scheduler.cancel()
        qtbot.wait(30)
        assert render.calls == 0


class TestBaseScheduler:

    def test_timer_primitives_are_required(self):
        with pytest.raises(TypeError):
            RenderScheduler(Counter())

    def test_partial_subclass_is_abstract(self):
        class FrameOnly(RenderScheduler):
            def _start_frame_timer(self, delay_ms):
                pass

        with pytest.raises(TypeError):
            FrameOnly(Counter())
