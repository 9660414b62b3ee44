"""Run planned sample jobs locally or by submission to a batch queue.

Trimming always runs locally first. The remaining steps either run in
process, one sample after another, or are written into a submission script
for the scheduler. A queued submission only means the scheduler accepted the
job; its outcome stays unknown until the completion tracker sees its marker.
"""
import collections
import os
import subprocess
import time

from rnapipe import utils
from rnapipe.distributed import sge, slurm, tracker
from rnapipe.log import logger
from rnapipe.pipeline import config_utils, plan
from rnapipe.provenance import do

SCHEDULERS = {"sge": sge, "slurm": slurm}

Submission = collections.namedtuple("Submission", ["job", "jobid", "status"])

class Backend(object):
    """Shared trimming and dispatch for all execution targets.
    """
    def __init__(self, run_config, dirs, completion_index):
        self.run_config = run_config
        self.dirs = dirs
        self.completion_index = completion_index

    def run(self, job):
        trim_step, rest = job.steps[0], job.steps[1:]
        # markers left by an earlier run in this output directory
        for fname in [job.marker, plan.pending_marker(job.marker)]:
            utils.remove_safe(fname)
        do.run(trim_step.cmd, trim_step.descr, job.sample.id)
        utils.safe_makedir(job.work_dir)
        return self.dispatch(job, rest)

    def dispatch(self, job, steps):
        raise NotImplementedError

    def wait(self):
        """Block until all dispatched jobs are complete.
        """
        raise NotImplementedError

class LocalBackend(Backend):
    """Run steps synchronously in the sample's own directory.
    """
    def dispatch(self, job, steps):
        with utils.chdir(job.work_dir):
            for step in steps:
                do.run(step.cmd, step.descr, job.sample.id)
        return Submission(job, None, "completed")

    def wait(self):
        return tracker.count_markers(self.completion_index)

class QueueBackend(Backend):
    """Submit steps to a batch scheduler as one self-contained script per sample.
    """
    def __init__(self, run_config, dirs, completion_index, scheduler, sleep=time.sleep):
        super(QueueBackend, self).__init__(run_config, dirs, completion_index)
        self.scheduler = scheduler
        self.sleep = sleep
        self.jobids = []

    def script_file(self, job):
        return os.path.join(self.dirs.align, "%s_submit.sh" % job.sample.id)

    def write_script(self, job, steps):
        resources = config_utils.get_resources("queue", self.run_config.config)
        cores = resources.get("cores", config_utils.get_cores("star", self.run_config.config, 8))
        header = self.scheduler.script_header("rnapipe_%s" % job.sample.id, cores,
                                              resources.get("memory"), self.run_config.queue,
                                              os.path.join(self.dirs.logs, "%s_queue.log" % job.sample.id))
        lines = ["#!/bin/bash"] + header + ["set -euo pipefail", "cd %s" % job.work_dir]
        for step in steps:
            lines += ["# %s" % step.descr, step.cmd]
        out_file = self.script_file(job)
        with open(out_file, "w") as out_handle:
            out_handle.write("\n".join(lines) + "\n")
        os.chmod(out_file, 0o755)
        return out_file

    def dispatch(self, job, steps):
        script = self.write_script(job, steps)
        args = [str(x) for x in config_utils.get_resources("queue", self.run_config.config).get("args", [])]
        try:
            jobid = self.scheduler.submit_job(args, script)
        except subprocess.CalledProcessError:
            logger.exception("Submission failed for %s" % job.sample.id)
            raise
        finally:
            utils.remove_safe(script)
        self.jobids.append(jobid)
        logger.info("Submitted %s as job %s" % (job.sample.id, jobid))
        self.sleep(self.run_config.submit_delay)
        return Submission(job, jobid, "unknown")

    def active_jobs(self):
        """Number of submitted jobs still on the queue, None if the queue can't be asked.
        """
        try:
            return self.scheduler.active_jobs(self.jobids)
        except (subprocess.CalledProcessError, OSError) as e:
            logger.warn("Could not query queue status: %s" % e)
            return None

    def wait(self):
        return tracker.wait_for_markers(self.completion_index, self.run_config.poll_interval,
                                        self.run_config.timeout, self.active_jobs, sleep=self.sleep)

def get_backend(run_config, dirs, completion_index):
    if not run_config.cluster:
        return LocalBackend(run_config, dirs, completion_index)
    if run_config.scheduler not in SCHEDULERS:
        raise ValueError("Unsupported scheduler %s: expected one of %s" %
                         (run_config.scheduler, ", ".join(sorted(SCHEDULERS))))
    return QueueBackend(run_config, dirs, completion_index, SCHEDULERS[run_config.scheduler])
