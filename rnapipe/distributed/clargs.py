"""Parsing of command line arguments into a run configuration.
"""
from rnapipe.pipeline import config_utils

def to_run_config(args):
    """Convert parsed command line arguments into a RunConfig.
    """
    config = config_utils.load_system_config(getattr(args, "config", None))
    cluster = bool(args.cluster or args.scheduler)
    return config_utils.make_run_config(
        args.input, args.reference, args.annotation, args.library_type, args.output,
        cluster=cluster, scheduler=args.scheduler, queue=args.queue, debug=args.debug,
        trimmomatic_version=args.trimmomatic_version, quantify=args.quantify,
        transcript_counts=args.transcript_counts,
        build_transcriptome=args.build_transcriptome, collate=not args.no_collate,
        poll_interval=args.poll_interval, timeout=args.timeout, config=config)
