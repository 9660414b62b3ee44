"""Retrieve run information describing files to process in a pipeline.

Scans an input directory of fastq files, working out the compression used
for the run and grouping files into single or paired-end samples.
"""
import collections
import os
import re

from rnapipe import utils
from rnapipe.log import logger

SINGLE, PAIRED = "single", "paired"
PLAIN, GZIP = "plain", "gzip"

# longest suffixes first so .fastq.gz is not read as .gz
FASTQ_EXTS = collections.OrderedDict([(".fastq.gz", GZIP), (".fq.gz", GZIP),
                                      (".fastq", PLAIN), (".fq", PLAIN)])
_mate_pat = re.compile(r"^(?P<sample>.+)_(?P<mate>[12])$")

Sample = collections.namedtuple("Sample", ["id", "layout", "files"])
RunDirs = collections.namedtuple("RunDirs", ["base", "logs", "genome", "trimmed",
                                             "align", "index"])

def fastq_ext(fname):
    """Return the recognized fastq extension of a filename, or None.
    """
    for ext in FASTQ_EXTS:
        if fname.endswith(ext):
            return ext
    return None

def detect_compression(fnames):
    """Detect the run's compression from the first file in lexicographic order.
    """
    if not fnames:
        raise ValueError("No input files supplied for compression detection")
    first = sorted(os.path.basename(f) for f in fnames)[0]
    ext = fastq_ext(first)
    if ext is None:
        raise ValueError("Could not detect compression of input file %s: expected one of %s" %
                         (first, ", ".join(FASTQ_EXTS)))
    return FASTQ_EXTS[ext]

def sample_id(fname, layout):
    """Derive a sample name from a fastq filename, stripping suffix and mate indicator.
    """
    base = os.path.basename(fname)
    ext = fastq_ext(base)
    stem = base[:-len(ext)] if ext else base
    if layout == PAIRED:
        match = _mate_pat.match(stem)
        if not match:
            raise ValueError("Paired-end input %s is missing a _1/_2 mate indicator" % base)
        return match.group("sample")
    return stem

def _mate(fname):
    ext = fastq_ext(os.path.basename(fname))
    match = _mate_pat.match(os.path.basename(fname)[:-len(ext)])
    return match.group("mate") if match else None

def discover_samples(input_dir, layout):
    """Scan an input directory, returning samples and the run compression mode.

    Raises ValueError when no inputs are present, compression can't be
    detected or is mixed, or the file names do not fit the declared layout.
    """
    if layout not in (SINGLE, PAIRED):
        raise ValueError("Unexpected library layout: %s" % layout)
    if not os.path.isdir(input_dir):
        raise ValueError("Input directory not found: %s" % input_dir)
    fnames = sorted(f for f in os.listdir(input_dir)
                    if not f.startswith(".") and os.path.isfile(os.path.join(input_dir, f)))
    if not fnames:
        raise ValueError("No input files found in %s" % input_dir)
    compression = detect_compression(fnames)
    fastqs = []
    for f in fnames:
        ext = fastq_ext(f)
        if ext is None:
            logger.info("Skipping non-fastq file in input directory: %s" % f)
        elif FASTQ_EXTS[ext] != compression:
            raise ValueError("Mixed compression in %s: %s is not %s like %s" %
                             (input_dir, f, compression, fnames[0]))
        else:
            fastqs.append(os.path.join(input_dir, f))
    grouped = collections.OrderedDict()
    for f in fastqs:
        grouped.setdefault(sample_id(f, layout), []).append(f)
    if layout == PAIRED:
        for name, files in grouped.items():
            mates = [_mate(f) for f in files]
            if mates != ["1", "2"]:
                raise ValueError("Paired-end sample %s needs exactly one _1 and one _2 file, found: %s" %
                                 (name, ", ".join(os.path.basename(f) for f in files)))
    else:
        _check_single_layout(grouped, fastqs)
    samples = [Sample(name, layout, tuple(files)) for name, files in sorted(grouped.items())]
    logger.info("Found %s %s-end samples with %s input in %s" %
                (len(samples), layout, compression, input_dir))
    return samples, compression

def _check_single_layout(grouped, fastqs):
    for name, files in grouped.items():
        if len(files) > 1:
            raise ValueError("Single-end sample %s has multiple input files: %s" %
                             (name, ", ".join(os.path.basename(f) for f in files)))
    by_pair = collections.defaultdict(set)
    for f in fastqs:
        mate = _mate(f)
        if mate is None:
            return
        by_pair[sample_id(f, PAIRED)].add(mate)
    if all(mates == set(["1", "2"]) for mates in by_pair.values()):
        raise ValueError("Input files are named as paired-end mates (_1/_2) "
                         "but the library type was declared as single-end")

def setup_directories(out_dir):
    """Create the fixed output layout for a run, starting a fresh completion index.
    """
    base = utils.safe_makedir(os.path.abspath(out_dir))
    dirs = RunDirs(base=base,
                   logs=utils.safe_makedir(os.path.join(base, "Logs")),
                   genome=utils.safe_makedir(os.path.join(base, "genome")),
                   trimmed=utils.safe_makedir(os.path.join(base, "trimmed_files")),
                   align=utils.safe_makedir(os.path.join(base, "STAR_aln")),
                   index=os.path.join(base, "STAR_aln", "index"))
    open(dirs.index, "w").close()
    return dirs
