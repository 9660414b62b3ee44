"""Track completion of queued sample jobs through per-sample marker files.

The completion index is a plain text file with one expected marker path per
line. Jobs on the queue give no success signal back, so a sample only counts
as finished once its marker exists.
"""
import os
import time

from rnapipe.log import logger

POLL_INTERVAL = 300

class JobsFailed(Exception):
    """Queued jobs are no longer running but their markers never appeared.
    """
    def __init__(self, missing):
        self.missing = missing
        super(JobsFailed, self).__init__(
            "Queued jobs finished without writing completion markers: %s" % ", ".join(missing))

class CompletionTimeout(Exception):
    pass

class CompletionIndex(object):
    """Append-only list of expected completion marker paths, backed by a file.
    """
    def __init__(self, index_file):
        self.index_file = index_file

    def append(self, marker):
        with open(self.index_file, "a") as out_handle:
            out_handle.write("%s\n" % marker)
        return marker

    def markers(self):
        if not os.path.exists(self.index_file):
            return []
        with open(self.index_file) as in_handle:
            return [l.strip() for l in in_handle if l.strip()]

    def __len__(self):
        return len(self.markers())

def count_markers(index):
    """Number of expected markers currently present on the filesystem.
    """
    return len([m for m in index.markers() if os.path.exists(m)])

def expected_total(index):
    return len(index)

def missing_markers(index):
    return [m for m in index.markers() if not os.path.exists(m)]

def wait_for_markers(index, interval=POLL_INTERVAL, timeout=None, probe=None,
                     sleep=time.sleep, clock=time.time):
    """Block until every marker in the completion index exists.

    Without a timeout or probe this polls indefinitely, which is the only
    option when the queue can't be asked about job state.

    timeout -- seconds to wait before raising CompletionTimeout.
    probe -- callable returning the number of submitted jobs still active
    on the queue. When nothing is active and markers are still missing
    after a recount, raises JobsFailed.
    """
    expected = expected_total(index)
    start = clock()
    while True:
        done = count_markers(index)
        logger.info("Completion markers: %s/%s samples finished" % (done, expected))
        if done >= expected:
            return done
        if probe is not None and probe() == 0:
            # recount, jobs may have finished between the count and the probe
            missing = missing_markers(index)
            if missing:
                raise JobsFailed([os.path.basename(m) for m in missing])
            return expected
        if timeout is not None and clock() - start >= timeout:
            raise CompletionTimeout("Timed out after %ss waiting for %s of %s samples" %
                                    (timeout, expected - done, expected))
        sleep(interval)
