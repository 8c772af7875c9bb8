"""Recording lifecycle."""

import pytest

from trackkeeper.recorder import TrackRecorder


class FakeClock:
    def __init__(self, start: int = 1_700_000_000_000) -> None:
        self.value = start

    def __call__(self) -> int:
        return self.value

    def advance(self, ms: int) -> None:
        self.value += ms


def test_records_and_saves(engine, remote_store) -> None:
    clock = FakeClock()
    recorder = TrackRecorder(engine, clock=clock)
    recorder.start()
    for i in range(3):
        clock.advance(5_000)
        assert recorder.add_fix(41.0 + i * 0.001, 2.0, accuracy=4.0)
    assert recorder.elapsed_s() == 15
    track, result = recorder.stop("user-1", name="Evening")
    assert result.saved_cloud
    assert track.name == "Evening"
    assert track.end_time - track.start_time == 10_000
    assert remote_store.get_track("user-1", track.id) is not None
    assert not recorder.is_recording


def test_invalid_fixes_and_idle_recorder_are_ignored(engine) -> None:
    recorder = TrackRecorder(engine)
    assert recorder.add_fix(41.0, 2.0, accuracy=1.0) is False
    recorder.start()
    assert recorder.add_fix(120.0, 2.0, accuracy=1.0) is False
    assert recorder.points == []


def test_short_recording_is_discarded(engine, local_store) -> None:
    recorder = TrackRecorder(engine)
    recorder.start()
    recorder.add_fix(41.0, 2.0, accuracy=1.0)
    assert recorder.stop() is None
    assert local_store.get_all() == []


def test_default_name_and_state_errors(engine) -> None:
    recorder = TrackRecorder(engine, clock=FakeClock())
    with pytest.raises(RuntimeError):
        recorder.stop()
    recorder.start()
    with pytest.raises(RuntimeError):
        recorder.start()
    recorder.add_fix(41.0, 2.0, accuracy=1.0, timestamp=1)
    recorder.add_fix(41.001, 2.0, accuracy=1.0, timestamp=2)
    track, result = recorder.stop()
    assert track.name.startswith("Track ")
    assert result.saved_cloud is False


def test_cancel_drops_fixes_without_saving(engine, local_store) -> None:
    recorder = TrackRecorder(engine)
    recorder.start()
    recorder.add_fix(41.0, 2.0, accuracy=3.0)
    recorder.add_fix(41.001, 2.0, accuracy=3.0)
    recorder.cancel()
    assert not recorder.is_recording
    assert local_store.get_all() == []
    recorder.start()


def test_recorder_is_exported() -> None:
    import trackkeeper

    assert trackkeeper.TrackRecorder is TrackRecorder
