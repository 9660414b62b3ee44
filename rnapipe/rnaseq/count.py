"""
combine per-sample count tables into a single count matrix with R
"""
import os
import subprocess
from string import Template

from rnapipe import utils
from rnapipe.distributed.transaction import file_transaction
from rnapipe.log import logger
from rnapipe.ngsalign import star
from rnapipe.pipeline import config_utils
from rnapipe.provenance import do
from rnapipe.rnaseq import salmon

R_FILE = "collate_counts.R"

def _gene_sample(fname):
    return os.path.basename(fname)[:-len(star.GENE_COUNTS_SUFFIX)]

# column is the R column to extract after the first column becomes row names
COUNT_LEVELS = {
    "gene": {"pattern": "*" + star.GENE_COUNTS_SUFFIX, "header": False, "skip": 4,
             "column": 1, "out_file": "gene_counts.csv", "sample_fn": _gene_sample},
    "transcript": {"pattern": salmon.QUANT_FILE, "header": True, "skip": 0,
                   "column": "NumReads", "out_file": "transcript_counts.csv",
                   "sample_fn": salmon.sample_from_quant},
}

COLLATE_TEMPLATE = Template("""\
files <- c($files)
samples <- c($samples)
read_counts <- function(f) {
    read.table(f, header=$header, sep="\\t", skip=$skip, row.names=1,
               check.names=FALSE, stringsAsFactors=FALSE)
}
tables <- lapply(files, read_counts)
counts <- do.call(cbind, lapply(tables, function(x) x[[$column]]))
rownames(counts) <- rownames(tables[[1]])
colnames(counts) <- samples
write.csv(counts, file=$out_file, quote=FALSE)
""")

def _quotestring(s):
    return '"%s"' % s

def _list2Rlist(xs):
    return ", ".join(_quotestring(x) for x in xs)

def count_level(run_config):
    return "transcript" if run_config.quantify else "gene"

def find_count_files(level, base_dir):
    """Recursively find per-sample count files for a level under the output directory.
    """
    level_info = COUNT_LEVELS[level]
    files = list(utils.locate(level_info["pattern"], base_dir))
    if level == "transcript":
        files = [f for f in files if os.path.basename(os.path.dirname(f)).endswith("_salmon")]
    return sorted(files)

def create_collate_script(level, count_files, out_file):
    """Render the R code combining one column from each count file into a matrix.
    """
    level_info = COUNT_LEVELS[level]
    column = level_info["column"]
    column = _quotestring(column) if isinstance(column, str) else "%sL" % column
    return COLLATE_TEMPLATE.substitute(
        files=_list2Rlist(count_files),
        samples=_list2Rlist(level_info["sample_fn"](f) for f in count_files),
        header="TRUE" if level_info["header"] else "FALSE", skip=level_info["skip"],
        column=column, out_file=_quotestring(out_file))

def collate_counts(run_config, dirs):
    """Build a combined count matrix across all samples with Rscript.

    Failures are reported and re-raised; per-sample outputs are left as is.
    """
    level = count_level(run_config)
    count_files = find_count_files(level, dirs.base)
    if not count_files:
        raise ValueError("No %s level count files found in %s" % (level, dirs.base))
    out_file = os.path.join(dirs.base, COUNT_LEVELS[level]["out_file"])
    r_file = os.path.join(dirs.base, R_FILE)
    with file_transaction(r_file) as tx_r_file:
        with open(tx_r_file, "w") as out_handle:
            out_handle.write(create_collate_script(level, count_files, out_file))
    rscript = config_utils.get_program("Rscript", run_config.config)
    logger.info("Collating %s counts from %s samples into %s" % (level, len(count_files), out_file))
    try:
        do.run([rscript, "--vanilla", r_file], "Collating %s counts" % level)
    except subprocess.CalledProcessError:
        logger.error("Count collation failed, per-sample outputs in %s are unchanged" % dirs.align)
        raise
    return out_file
