"""
Wrapper for Salmon:
https://github.com/COMBINE-lab/salmon

Quantifies transcripts in alignment mode from STAR's transcriptome BAM.
"""
import os

from rnapipe.ngsalign import star
from rnapipe.pipeline import config_utils

QUANT_FILE = "quant.sf"

def salmon_dir(sample_id, work_dir):
    return os.path.join(work_dir, "%s_salmon" % sample_id)

def quant_file(sample_id, work_dir):
    return os.path.join(salmon_dir(sample_id, work_dir), QUANT_FILE)

def sample_from_quant(quant):
    """Sample name from the salmon output directory holding a quant.sf file.
    """
    dname = os.path.basename(os.path.dirname(quant))
    return dname[:-len("_salmon")] if dname.endswith("_salmon") else dname

def quant_bam_cmd(sample_id, work_dir, transcripts_fa, config):
    salmon = config_utils.get_program("salmon", config)
    num_cores = config_utils.get_cores("salmon", config, 8)
    bam_file = star.transcriptome_bam(sample_id, work_dir)
    out_dir = salmon_dir(sample_id, work_dir)
    cmd = ("{salmon} quant -t {transcripts_fa} -l A -a {bam_file} "
           "-p {num_cores} -o {out_dir}").format(**locals())
    options = config_utils.get_options("salmon", config)
    if options:
        cmd += " " + options
    return cmd
