"""Prepare the reference genome, annotation and STAR index for a run.

Index builds are expensive, so an existing index is reused when it was built
from the same genome, either already in the run's genome directory or next
to the supplied genome fasta.
"""
import collections
import os

from rnapipe import utils
from rnapipe.log import logger
from rnapipe.ngsalign import star
from rnapipe.pipeline import config_utils
from rnapipe.rnaseq import gtf

TRANSCRIPTS_FILE = "transcripts.fa"

ReferenceIndex = collections.namedtuple(
    "ReferenceIndex",
    ["genome_path", "annotation_path", "annotation_format", "built", "location",
     "transcripts", "reused"])

def _resolve(recorded, index_dir):
    if not os.path.isabs(recorded):
        recorded = os.path.join(index_dir, recorded)
    return os.path.realpath(recorded)

def find_reusable_index(ref_file, index_dir):
    """Look for a STAR index built from ref_file, without building anything.

    Returns a tuple of (location, reuse type) where reuse type is "target"
    for an index already in index_dir built from this exact genome file and
    "source" for one in the genome's own directory built from a genome with
    the same file name. Returns (None, None) when there is nothing to reuse.
    """
    recorded = star.indexed_genome(index_dir)
    if (recorded and star.is_complete_index(index_dir) and
          _resolve(recorded, index_dir) == os.path.realpath(ref_file)):
        return index_dir, "target"
    src_dir = os.path.dirname(os.path.abspath(ref_file))
    if os.path.realpath(src_dir) != os.path.realpath(index_dir):
        recorded = star.indexed_genome(src_dir)
        if (recorded and star.is_complete_index(src_dir) and
              os.path.basename(recorded) == os.path.basename(ref_file)):
            return src_dir, "source"
    return None, None

def prepare_annotation(annotation, genome_dir, config):
    """Provide a GTF annotation inside the genome directory, converting GFF inputs.
    """
    fmt = gtf.annotation_format(annotation)
    if fmt == "gtf":
        return utils.symlink_plus(annotation, os.path.join(genome_dir, os.path.basename(annotation))), fmt
    logger.info("Converting %s annotation %s to GTF" % (fmt, annotation))
    return gtf.gff_to_gtf(annotation, genome_dir, config), fmt

def prepare_reference(run_config, dirs):
    """Link, convert and index the reference, returning a ReferenceIndex.

    Runs once per run before any sample processing. Any external tool
    failure here is fatal.
    """
    config = run_config.config
    genome_path = os.path.realpath(run_config.reference)
    # decide on reuse before the genome link in dirs.genome is re-pointed
    location, reused = find_reusable_index(run_config.reference, dirs.genome)
    genome_file = utils.symlink_plus(genome_path,
                                     os.path.join(dirs.genome, os.path.basename(run_config.reference)))
    gtf_file, fmt = prepare_annotation(run_config.annotation, dirs.genome, config)
    transcripts = None
    if config_utils.needs_transcripts(run_config):
        transcripts = gtf.gtf_to_fasta(gtf_file, genome_file,
                                       os.path.join(dirs.genome, TRANSCRIPTS_FILE), config)
    built = False
    if reused == "target":
        logger.info("Reusing STAR index in %s built from %s" % (location, run_config.reference))
    elif reused == "source":
        logger.info("Linking existing STAR index from %s into %s" % (location, dirs.genome))
        star.link_index(location, dirs.genome)
    else:
        logger.info("No existing STAR index found for %s, building" % run_config.reference)
        star.index(genome_path, gtf_file, dirs.genome, config)
        built = True
    return ReferenceIndex(genome_path=genome_path, annotation_path=gtf_file,
                          annotation_format=fmt, built=built, location=dirs.genome,
                          transcripts=transcripts, reused=reused)
