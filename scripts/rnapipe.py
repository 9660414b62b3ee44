#!/usr/bin/env python -Es
"""Run the RNA-seq pipeline over a directory of fastq files.

Trims reads with Trimmomatic, aligns and counts reads per gene with STAR,
optionally quantifies transcripts with Salmon, and collates per-sample
counts into a single matrix with R.

Usage:
  rnapipe.py -i <fastq dir> -r <genome.fa> -a <annotation.gtf|gff> -l <SE|PE> -o <out dir>
     -c run alignments on a cluster queue (SGE by default)
     -s scheduler for cluster submission (sge, slurm)
     -q queue to submit jobs to
"""
import argparse
import subprocess
import sys

from rnapipe.distributed import clargs, tracker
from rnapipe.log import logger
from rnapipe.pipeline import config_utils
from rnapipe.pipeline.main import run_main
from rnapipe.provenance import programs

def parse_cl_args(in_args):
    description = "Trim, align and count RNA-seq reads for a directory of samples."
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument("-i", "--input", help="Directory of fastq or fastq.gz files to process")
    parser.add_argument("-r", "--reference", help="Reference genome FASTA file")
    parser.add_argument("-a", "--annotation", help="Gene annotation in GTF, GFF or GFF3 format")
    parser.add_argument("-l", "--library-type", dest="library_type",
                        help="Library type: SE (single-end) or PE (paired-end)")
    parser.add_argument("-o", "--output", help="Output directory")
    parser.add_argument("-c", "--cluster", action="store_true", default=False,
                        help="Submit alignment and quantification to a cluster queue")
    parser.add_argument("-s", "--scheduler", choices=["sge", "slurm"],
                        help="Scheduler to use for cluster submission (implies --cluster)")
    parser.add_argument("-q", "--queue", help="Scheduler queue to submit jobs to")
    parser.add_argument("--config", help="YAML configuration with program locations and resources")
    parser.add_argument("--trimmomatic-version", dest="trimmomatic_version",
                        help=("Run a specific Trimmomatic jar version, found in the "
                              "trimmomatic directory from --config"))
    parser.add_argument("--quantify", action="store_true", default=False,
                        help="Quantify transcripts with Salmon from STAR transcriptome alignments")
    parser.add_argument("--transcript-counts", dest="transcript_counts", action="store_true",
                        default=False,
                        help="Collate transcript level counts instead of gene counts (implies --quantify)")
    parser.add_argument("--build-transcriptome", dest="build_transcriptome", action="store_true",
                        default=False,
                        help="Extract transcript sequences from the genome into the genome directory")
    parser.add_argument("--no-collate", dest="no_collate", action="store_true", default=False,
                        help="Skip combining per-sample counts into a single matrix")
    parser.add_argument("--poll-interval", dest="poll_interval", type=int, default=300,
                        help="Seconds between checks for finished cluster jobs. Defaults to 300")
    parser.add_argument("--timeout", type=int,
                        help="Seconds to wait for cluster jobs before failing. Defaults to waiting indefinitely")
    parser.add_argument("--debug", action="store_true", default=False,
                        help="Print debugging output, including command output")
    parser.add_argument("-v", "--version", help="Print versions of rnapipe and external programs",
                        action="store_true")
    args = parser.parse_args(in_args)
    if not args.version:
        missing = [flag for flag, val in [("--input", args.input), ("--reference", args.reference),
                                          ("--annotation", args.annotation),
                                          ("--library-type", args.library_type),
                                          ("--output", args.output)] if not val]
        if missing:
            parser.error("Missing required arguments: %s" % ", ".join(missing))
    return args

def main(in_args):
    args = parse_cl_args(in_args)
    if args.version:
        config = config_utils.load_system_config(args.config)
        programs.write_versions(sys.stdout, config)
        return 0
    try:
        run_main(clargs.to_run_config(args))
    except (ValueError, IOError, config_utils.CmdNotFound, subprocess.CalledProcessError,
            tracker.JobsFailed, tracker.CompletionTimeout) as e:
        logger.error("rnapipe failed: %s" % e)
        return 1
    return 0

if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
