import pytest

from rnapipe.distributed import tracker
from rnapipe.distributed.tracker import CompletionIndex


@pytest.fixture
def markers(tmpdir):
    return [str(tmpdir.join("s%s_Log.final.out" % i)) for i in range(1, 4)]


@pytest.fixture
def index(tmpdir, markers):
    index = CompletionIndex(str(tmpdir.join("index")))
    for marker in markers:
        index.append(marker)
    return index


def _touch(fname):
    with open(fname, "w") as out_handle:
        out_handle.write("done\n")


class FakeClock(object):
    def __init__(self):
        self.now = 0

    def __call__(self):
        return self.now

    def sleep(self, seconds):
        self.now += seconds


class TestCompletionIndex(object):

    def test_one_line_per_marker(self, index, markers):
        assert len(index) == 3
        assert tracker.expected_total(index) == 3
        assert index.markers() == markers
        with open(index.index_file) as in_handle:
            assert in_handle.read().splitlines() == markers

    def test_missing_file_is_empty(self, tmpdir):
        assert len(CompletionIndex(str(tmpdir.join("nothing")))) == 0

    def test_counts_only_existing_markers(self, index, markers):
        _touch(markers[1])
        assert tracker.count_markers(index) == 1
        assert tracker.missing_markers(index) == [markers[0], markers[2]]


class TestWaitForMarkers(object):

    def test_returns_immediately_when_complete(self, index, markers, mocker):
        for marker in markers:
            _touch(marker)
        sleep = mocker.Mock()
        assert tracker.wait_for_markers(index, sleep=sleep) == 3
        assert not sleep.called

    def test_polls_at_interval_until_complete(self, index, markers):
        intervals = []

        def sleep(seconds):
            intervals.append(seconds)
            _touch(markers[len(intervals) - 1])

        assert tracker.wait_for_markers(index, sleep=sleep) == 3
        assert intervals == [300, 300, 300]

    def test_custom_interval(self, index, markers):
        intervals = []

        def sleep(seconds):
            intervals.append(seconds)
            for marker in markers:
                _touch(marker)

        tracker.wait_for_markers(index, interval=10, sleep=sleep)
        assert intervals == [10]

    def test_timeout(self, index, markers):
        _touch(markers[0])
        clock = FakeClock()
        with pytest.raises(tracker.CompletionTimeout):
            tracker.wait_for_markers(index, interval=60, timeout=600, sleep=clock.sleep, clock=clock)
        assert clock.now == 600

    def test_no_active_jobs_with_missing_markers(self, index, markers, mocker):
        _touch(markers[0])
        with pytest.raises(tracker.JobsFailed) as excinfo:
            tracker.wait_for_markers(index, probe=lambda: 0, sleep=mocker.Mock())
        assert excinfo.value.missing == ["s2_Log.final.out", "s3_Log.final.out"]

    def test_jobs_finishing_during_probe(self, index, markers, mocker):
        def probe():
            for marker in markers:
                _touch(marker)
            return 0
        assert tracker.wait_for_markers(index, probe=probe, sleep=mocker.Mock()) == 3

    def test_unknown_queue_state_keeps_polling(self, index, markers):
        intervals = []

        def sleep(seconds):
            intervals.append(seconds)
            if len(intervals) == 2:
                for marker in markers:
                    _touch(marker)

        assert tracker.wait_for_markers(index, probe=lambda: None, sleep=sleep) == 3
        assert len(intervals) == 2
