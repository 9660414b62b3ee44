"""Annotation handling with gffread: GFF to GTF conversion and transcript extraction.
"""
import os

from rnapipe import utils
from rnapipe.distributed.transaction import file_transaction
from rnapipe.log import logger
from rnapipe.pipeline import config_utils
from rnapipe.provenance import do

ANNOTATION_FORMATS = {".gtf": "gtf", ".gff": "gff", ".gff3": "gff"}

def annotation_format(fname):
    """Classify an annotation file as gtf or gff from its extension.
    """
    ext = os.path.splitext(fname)[1].lower()
    if ext not in ANNOTATION_FORMATS:
        raise ValueError("Unsupported annotation format for %s: expected one of %s" %
                         (fname, ", ".join(sorted(ANNOTATION_FORMATS))))
    return ANNOTATION_FORMATS[ext]

def gff_to_gtf(gff_file, out_dir, config):
    """Convert a GFF/GFF3 annotation into GTF, as required by STAR.
    """
    out_file = os.path.join(out_dir, "%s.gtf" % os.path.splitext(os.path.basename(gff_file))[0])
    if utils.file_exists(out_file):
        return out_file
    gffread = config_utils.get_program("gffread", config)
    with file_transaction(out_file) as tx_out_file:
        cmd = [gffread, gff_file, "-T", "-o", tx_out_file]
        do.run(cmd, "Converting %s to GTF" % os.path.basename(gff_file))
    return out_file

def gtf_to_fasta(gtf_file, ref_fasta, out_file, config):
    """Extract spliced transcript sequences for each GTF transcript from the genome.
    """
    if utils.file_exists(out_file):
        logger.info("Reusing transcript sequences in %s" % out_file)
        return out_file
    gffread = config_utils.get_program("gffread", config)
    with file_transaction(out_file) as tx_out_file:
        cmd = [gffread, "-w", tx_out_file, "-g", ref_fasta, gtf_file]
        do.run(cmd, "Extracting transcript sequences from %s" % os.path.basename(ref_fasta))
    return out_file
