"""Identify the external programs a run needs, and report their versions.
"""
import contextlib
import subprocess

from rnapipe.bam import trim
from rnapipe.log import logger
from rnapipe.pipeline import config_utils, version
from rnapipe.rnaseq import gtf

_cl_progs = [{"cmd": "STAR", "args": "--version"},
             {"cmd": "salmon", "args": "--version", "stdout_flag": "salmon"},
             {"cmd": "gffread", "args": "--version"},
             {"cmd": "trimmomatic", "args": "-version"},
             {"cmd": "Rscript", "args": "--version", "stdout_flag": "version"}]
_scheduler_progs = {"sge": ["qsub", "qstat"], "slurm": ["sbatch", "squeue"]}

def required_programs(run_config):
    """List the commandline programs a run will call, based on its options.
    """
    progs = ["STAR"]
    if run_config.trimmomatic_version:
        progs.append("java")
    else:
        progs.append("trimmomatic")
    if (gtf.annotation_format(run_config.annotation) != "gtf"
          or config_utils.needs_transcripts(run_config)):
        progs.append("gffread")
    if run_config.quantify:
        progs.append("salmon")
    if run_config.collate:
        progs.append("Rscript")
    if run_config.cluster:
        progs.extend(_scheduler_progs[run_config.scheduler])
    return progs

def check_required(run_config):
    """Confirm every required program is available before running anything.

    Returns a dictionary of program names to resolved commands and raises
    CmdNotFound for the first missing program.
    """
    found = {}
    for name in required_programs(run_config):
        try:
            found[name] = config_utils.get_program(name, run_config.config)
        except config_utils.CmdNotFound:
            logger.error("Required program %s not found on the PATH or in the configuration" % name)
            raise
    if run_config.trimmomatic_version:
        found["trimmomatic"] = trim.trimmomatic_cmd(run_config.config, run_config.trimmomatic_version)
    return found

def _parse_from_stdoutflag(stdout, x):
    for line in stdout:
        if line.find(x) >= 0:
            parts = [p for p in line[line.find(x) + len(x):].split() if p.strip()]
            return parts[0].strip() if parts else ""
    return ""

def _get_cl_version(p, config):
    """Retrieve version of a single commandline program.
    """
    try:
        prog = config_utils.get_program(p["cmd"], config)
    except config_utils.CmdNotFound:
        return ""
    cmd = "{prog} {args}".format(prog=prog, args=p.get("args", ""))
    subp = subprocess.Popen(cmd, stdout=subprocess.PIPE, stderr=subprocess.STDOUT,
                            shell=True)
    with contextlib.closing(subp.stdout) as stdout:
        lines = [l.strip() for l in stdout.read().decode("utf-8", errors="replace").split("\n")
                 if l.strip()]
    subp.wait()
    if not lines:
        return ""
    if p.get("stdout_flag"):
        v = _parse_from_stdoutflag(lines, p["stdout_flag"])
    else:
        v = lines[-1]
    if v.endswith("."):
        v = v[:-1]
    return v

def get_versions(config=None):
    """Retrieve details on rnapipe and the programs available on the system.
    """
    if config is None: config = {"resources": {}}
    out = [{"program": "rnapipe", "version": version.__version__}]
    for p in _cl_progs:
        out.append({"program": p["cmd"], "version": _get_cl_version(p, config)})
    return out

def write_versions(out_handle, config=None):
    for p in get_versions(config):
        out_handle.write("%s\t%s\n" % (p["program"], p["version"] or "not found"))
