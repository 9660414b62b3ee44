import os
import shutil

from rnapipe import utils
from rnapipe.distributed.transaction import tx_tmpdir
from rnapipe.log import logger
from rnapipe.pipeline import config_utils
from rnapipe.provenance import do

MARKER_SUFFIX = "_Log.final.out"
GENE_COUNTS_SUFFIX = "_ReadsPerGene.out.tab"
TRANSCRIPTOME_BAM_SUFFIX = "_Aligned.toTranscriptome.out.bam"
PARAMETERS_FILE = "genomeParameters.txt"
INDEX_FILES = ["Genome", "SA", "SAindex", "chrLength.txt", "chrName.txt",
               "chrNameLength.txt", "chrStart.txt", "exonGeTrInfo.tab", "exonInfo.tab",
               "geneInfo.tab", "sjdbInfo.txt", "sjdbList.fromGTF.out.tab",
               "sjdbList.out.tab", "transcriptInfo.tab", PARAMETERS_FILE]
DEFAULT_INDEX_MEMORY = 64 * 1000 ** 3
DEFAULT_INDEX_CORES = 8

def out_prefix(sample_id, work_dir):
    return os.path.join(work_dir, "%s_" % sample_id)

def marker_file(sample_id, work_dir):
    """STAR's final log, written once alignment finishes.
    """
    return out_prefix(sample_id, work_dir) + MARKER_SUFFIX[1:]

def sample_from_marker(marker):
    base = os.path.basename(marker)
    if not base.endswith(MARKER_SUFFIX):
        raise ValueError("Not a STAR completion marker: %s" % marker)
    return base[:-len(MARKER_SUFFIX)]

def transcriptome_bam(sample_id, work_dir):
    return out_prefix(sample_id, work_dir) + TRANSCRIPTOME_BAM_SUFFIX[1:]

def align_cmd(sample_id, fastq_files, ref_dir, work_dir, read_files_command, quantify, config):
    """Commandline for aligning trimmed reads and counting reads per gene.

    read_files_command decompresses gzipped inputs and is None for plain fastq.
    quantify adds transcriptome alignments for downstream transcript quantification.
    """
    star = config_utils.get_program("STAR", config)
    cores = config_utils.get_cores("star", config, DEFAULT_INDEX_CORES)
    quant_mode = "GeneCounts TranscriptomeSAM" if quantify else "GeneCounts"
    cmd = ("{star} --runThreadN {cores} --genomeDir {ref_dir} "
           "--readFilesIn {fastq_files} ").format(star=star, cores=cores, ref_dir=ref_dir,
                                                  fastq_files=" ".join(fastq_files))
    if read_files_command:
        cmd += "--readFilesCommand %s " % read_files_command
    cmd += ("--outFileNamePrefix {prefix} --outSAMtype BAM SortedByCoordinate "
            "--quantMode {quant_mode}").format(prefix=out_prefix(sample_id, work_dir),
                                               quant_mode=quant_mode)
    options = config_utils.get_options("star", config)
    if options:
        cmd += " " + options
    return cmd

# ## Genome indexes

def indexed_genome(index_dir):
    """Return the genome fasta a STAR index was built from, or None without an index.
    """
    param_file = os.path.join(index_dir, PARAMETERS_FILE)
    if not os.path.exists(param_file):
        return None
    with open(param_file) as in_handle:
        for line in in_handle:
            parts = line.split()
            if len(parts) >= 2 and parts[0] == "genomeFastaFiles":
                return parts[1]
    return None

def is_complete_index(index_dir):
    return all(os.path.exists(os.path.join(index_dir, f))
               for f in ["Genome", "SA", "SAindex", PARAMETERS_FILE])

def link_index(src_dir, out_dir):
    """Symlink the index files from a previous build into out_dir.
    """
    linked = []
    for fname in INDEX_FILES:
        src = os.path.join(src_dir, fname)
        if os.path.exists(src):
            linked.append(utils.symlink_plus(src, os.path.join(out_dir, fname)))
    return linked

def index(ref_file, gtf_file, out_dir, config):
    """Create a STAR index in the defined reference directory.
    """
    if not utils.file_exists(gtf_file):
        raise ValueError("%s not found, could not create a star index." % (gtf_file))
    star = config_utils.get_program("STAR", config)
    resources = config_utils.get_resources("star", config)
    num_cores = int(resources.get("cores", DEFAULT_INDEX_CORES))
    memory = int(resources.get("index_memory", DEFAULT_INDEX_MEMORY))
    with tx_tmpdir(out_dir) as tx_out_dir:
        cmd = ("{star} --runMode genomeGenerate --genomeDir {tx_out_dir} "
               "--genomeFastaFiles {ref_file} --sjdbGTFfile {gtf_file} --sjdbOverhang 100 "
               "--runThreadN {num_cores} --limitGenomeGenerateRAM {memory} "
               "--outFileNamePrefix {tx_out_dir}/")
        do.run(cmd.format(**locals()), "Index STAR")
        for fname in os.listdir(tx_out_dir):
            dest = os.path.join(out_dir, fname)
            utils.remove_safe(dest)
            shutil.move(os.path.join(tx_out_dir, fname), dest)
    logger.info("Built STAR index in %s" % out_dir)
    return out_dir
