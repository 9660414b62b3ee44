"""Commandline interaction with SLURM schedulers.
"""
import re
import subprocess

_jobid_pat = re.compile(r"Submitted batch job (?P<jobid>\d+)")

def script_header(name, cores, memory, queue, log_file):
    lines = ["#SBATCH --job-name=%s" % name, "#SBATCH --output=%s" % log_file,
             "#SBATCH --cpus-per-task=%s" % cores]
    if memory:
        lines.append("#SBATCH --mem=%s" % memory)
    if queue:
        lines.append("#SBATCH --partition=%s" % queue)
    return lines

def submit_job(scheduler_args, script):
    """Submit a job to the scheduler, returning the supplied job ID.
    """
    cl = ["sbatch"] + scheduler_args + [script]
    status = subprocess.check_output(cl).decode()
    match = _jobid_pat.search(status)
    if not match:
        raise ValueError("Unexpected sbatch output submitting %s: %s" % (script, status))
    return match.group("jobid")

def active_jobs(jobids):
    """Count submitted job IDs still pending or running.
    """
    run_info = subprocess.check_output(["squeue", "-h", "-o", "%i"]).decode()
    present = set(l.strip() for l in run_info.split("\n") if l.strip())
    return len(present.intersection(set(jobids)))
