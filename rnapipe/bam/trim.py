"""Quality and adapter trimming of input reads with Trimmomatic.
"""
import os

from rnapipe.pipeline import config_utils

DEFAULT_STEPS = ["LEADING:3", "TRAILING:3", "SLIDINGWINDOW:4:15", "MINLEN:36"]

def trimmomatic_cmd(config, version=None):
    """Commandline prefix for running Trimmomatic.

    A pinned version runs the matching jar from the configured trimmomatic
    directory; otherwise the trimmomatic wrapper on the PATH is used.
    """
    if version:
        jar_dir = config_utils.get_program("trimmomatic", config, "dir")
        jar = config_utils.get_jar("trimmomatic-%s" % version, jar_dir)
        java = config_utils.get_program("java", config)
        return "%s -jar %s" % (java, jar)
    return config_utils.get_program("trimmomatic", config)

def trimmed_files(sample_id, mode, ext, trim_dir):
    """Output files for trimming: one file for single-end, paired and unpaired
    (orphaned) reads for each mate when paired.
    """
    if mode == "SE":
        return [os.path.join(trim_dir, "%s_trimmed%s" % (sample_id, ext))]
    return [os.path.join(trim_dir, "%s_%s_%s%s" % (sample_id, mate, kind, ext))
            for mate in ["1", "2"] for kind in ["paired", "unpaired"]]

def aligner_inputs(out_files, mode):
    """Trimmed files passed on to alignment, dropping orphaned reads.
    """
    if mode == "SE":
        return out_files
    return [out_files[0], out_files[2]]

def _trim_steps(config):
    resources = config_utils.get_resources("trimmomatic", config)
    if resources.get("options"):
        return [str(x) for x in resources["options"]]
    steps = []
    if resources.get("adapters"):
        steps.append("ILLUMINACLIP:%s:2:30:10" % resources["adapters"])
    return steps + DEFAULT_STEPS

def trim_cmd(sample, mode, ext, trim_dir, log_dir, config, version=None):
    """Build the trimming commandline for a sample, returning it with the output files.

    mode is the Trimmomatic SE or PE signature; outputs keep the input
    compression through ext.
    """
    out_files = trimmed_files(sample.id, mode, ext, trim_dir)
    log_file = os.path.join(log_dir, "%s_trim.log" % sample.id)
    cores = config_utils.get_cores("trimmomatic", config, 4)
    cmd = ("{trimmomatic} {mode} -threads {cores} -phred33 -trimlog {log_file} "
           "{inputs} {outputs} {steps}").format(
               trimmomatic=trimmomatic_cmd(config, version), mode=mode, cores=cores,
               log_file=log_file, inputs=" ".join(sample.files), outputs=" ".join(out_files),
               steps=" ".join(_trim_steps(config)))
    return cmd, out_files
