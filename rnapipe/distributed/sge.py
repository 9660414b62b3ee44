"""Commandline interaction with SGE cluster schedulers.
"""
import re
import subprocess

_jobid_pat = re.compile(r'Your job (?P<jobid>\d+) \("')

def script_header(name, cores, memory, queue, log_file):
    """Scheduler directives placed at the top of a submission script.
    """
    lines = ["#$ -N %s" % name, "#$ -cwd", "#$ -j y", "#$ -o %s" % log_file,
             "#$ -pe smp %s" % cores]
    if memory:
        lines.append("#$ -l h_vmem=%s" % memory)
    if queue:
        lines.append("#$ -q %s" % queue)
    return lines

def submit_job(scheduler_args, script):
    """Submit a job to the scheduler, returning the supplied job ID.
    """
    cl = ["qsub"] + scheduler_args + [script]
    status = subprocess.check_output(cl).decode()
    match = _jobid_pat.search(status)
    if not match:
        raise ValueError("Unexpected qsub output submitting %s: %s" % (script, status))
    return match.group("jobid")

def active_jobs(jobids):
    """Count submitted job IDs still known to the queue, in any state.
    """
    run_info = subprocess.check_output(["qstat"]).decode()
    present = set()
    for parts in (l.split() for l in run_info.split("\n") if l.strip()):
        if parts[0].isdigit():
            present.add(parts[0])
    return len(present.intersection(set(jobids)))
