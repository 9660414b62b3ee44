"""Main entry point for running the RNA-seq pipeline over a directory of samples.

Handles the full run: sample discovery, reference preparation, per-sample
trimming and alignment locally or on a cluster queue, waiting on queued
work, and collation of counts.
"""
import os

from rnapipe import log
from rnapipe.distributed import backend, tracker
from rnapipe.log import logger
from rnapipe.pipeline import genome, plan, run_info
from rnapipe.provenance import programs
from rnapipe.rnaseq import count, gtf

def run_main(run_config):
    """Run the pipeline for a RunConfig, returning the sample submissions.

    Configuration and missing program errors are raised before any
    external tool runs. Step failures abort the run.
    """
    dirs = run_info.setup_directories(run_config.out_dir)
    handler = log.setup_local_logging({"log_dir": dirs.logs, "debug": run_config.debug})
    try:
        logger.info("Processing %s into %s" % (run_config.input_dir, dirs.base))
        samples, compression = run_info.discover_samples(run_config.input_dir, run_config.layout)
        gtf.annotation_format(run_config.annotation)
        programs.check_required(run_config)
        return _run_samples(run_config, dirs, samples, compression)
    finally:
        handler.pop_application()
        handler.close()

def _run_samples(run_config, dirs, samples, compression):
    reference = genome.prepare_reference(run_config, dirs)
    logger.info("Aligning against %s with the STAR index in %s" % (reference.genome_path, reference.location))
    completion_index = tracker.CompletionIndex(dirs.index)
    jobs = [plan.plan_job(sample, compression, run_config, reference, dirs, completion_index)
            for sample in samples]
    runner = backend.get_backend(run_config, dirs, completion_index)
    submissions = [runner.run(job) for job in jobs]
    finished = runner.wait()
    logger.info("%s of %s samples finished" % (finished, len(jobs)))
    if run_config.collate:
        out_file = count.collate_counts(run_config, dirs)
        logger.info("Combined count matrix written to %s" % os.path.relpath(out_file, dirs.base))
    return submissions
