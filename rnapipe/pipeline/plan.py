"""Plan the processing steps for each sample without running anything.

Every sample goes through the same sequence: trim, align and count with
STAR, then optionally quantify transcripts with Salmon. The input shape
(single or paired, plain or gzipped) only changes the trimming signature,
the STAR decompression flag and file naming, so it is a table lookup.
"""
import collections
import os

from rnapipe.bam import trim
from rnapipe.ngsalign import star
from rnapipe.pipeline.run_info import SINGLE, PAIRED, PLAIN, GZIP
from rnapipe.rnaseq import salmon

LOCAL, QUEUED = "local", "queued"

InputShape = collections.namedtuple("InputShape", ["trim_mode", "read_files_command", "ext"])
Step = collections.namedtuple("Step", ["name", "cmd", "descr"])
Job = collections.namedtuple("Job", ["sample", "steps", "target", "marker", "work_dir"])

INPUT_SHAPES = {
    (SINGLE, PLAIN): InputShape("SE", None, ".fastq"),
    (SINGLE, GZIP): InputShape("SE", "zcat", ".fastq.gz"),
    (PAIRED, PLAIN): InputShape("PE", None, ".fastq"),
    (PAIRED, GZIP): InputShape("PE", "zcat", ".fastq.gz"),
}

def input_shape(layout, compression):
    try:
        return INPUT_SHAPES[(layout, compression)]
    except KeyError:
        raise ValueError("Unsupported input: %s layout with %s compression" % (layout, compression))

def pending_marker(marker):
    return marker + ".pending"

def plan_job(sample, compression, run_config, reference, dirs, completion_index):
    """Build the Job for a sample and register its completion marker.

    The marker is STAR's final log. With transcript quantification it is
    held back under a pending name until Salmon finishes, so the marker
    always means the whole job is done.
    """
    config = run_config.config
    shape = input_shape(sample.layout, compression)
    work_dir = os.path.join(dirs.align, sample.id)
    marker = star.marker_file(sample.id, work_dir)
    trim_cmd, trimmed = trim.trim_cmd(sample, shape.trim_mode, shape.ext, dirs.trimmed,
                                      dirs.logs, config, run_config.trimmomatic_version)
    align_cmd = star.align_cmd(sample.id, trim.aligner_inputs(trimmed, shape.trim_mode),
                               reference.location, work_dir, shape.read_files_command,
                               run_config.quantify, config)
    steps = [Step("trim", trim_cmd, "Trimming reads with Trimmomatic"),
             Step("align", align_cmd, "Aligning and counting with STAR")]
    if run_config.quantify:
        steps[-1] = steps[-1]._replace(
            cmd="%s && mv %s %s" % (align_cmd, marker, pending_marker(marker)))
        quant_cmd = salmon.quant_bam_cmd(sample.id, work_dir, reference.transcripts, config)
        steps.append(Step("quantify", "%s && mv %s %s" % (quant_cmd, pending_marker(marker), marker),
                          "Quantifying transcripts with Salmon"))
    completion_index.append(marker)
    return Job(sample=sample, steps=tuple(steps), target=QUEUED if run_config.cluster else LOCAL,
               marker=marker, work_dir=work_dir)
