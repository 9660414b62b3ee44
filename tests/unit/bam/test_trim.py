import pytest

from rnapipe.bam import trim
from rnapipe.pipeline.run_info import Sample, SINGLE, PAIRED


def test_single_end_outputs():
    assert trim.trimmed_files("s1", "SE", ".fastq", "/t") == ["/t/s1_trimmed.fastq"]


def test_paired_end_outputs_keep_orphans():
    out_files = trim.trimmed_files("s1", "PE", ".fastq.gz", "/t")
    assert out_files == ["/t/s1_1_paired.fastq.gz", "/t/s1_1_unpaired.fastq.gz",
                         "/t/s1_2_paired.fastq.gz", "/t/s1_2_unpaired.fastq.gz"]
    assert trim.aligner_inputs(out_files, "PE") == ["/t/s1_1_paired.fastq.gz", "/t/s1_2_paired.fastq.gz"]


def test_single_end_cmd(programs):
    sample = Sample("s1", SINGLE, ("/in/s1.fastq",))
    cmd, out_files = trim.trim_cmd(sample, "SE", ".fastq", "/t", "/logs", {"resources": {}})
    assert cmd == ("/opt/bin/trimmomatic SE -threads 4 -phred33 -trimlog /logs/s1_trim.log "
                   "/in/s1.fastq /t/s1_trimmed.fastq "
                   "LEADING:3 TRAILING:3 SLIDINGWINDOW:4:15 MINLEN:36")
    assert out_files == ["/t/s1_trimmed.fastq"]


def test_paired_end_cmd_with_adapters(programs):
    sample = Sample("s1", PAIRED, ("/in/s1_1.fastq.gz", "/in/s1_2.fastq.gz"))
    config = {"resources": {"trimmomatic": {"cores": 2, "adapters": "/adapters/TruSeq3-PE.fa"}}}
    cmd, out_files = trim.trim_cmd(sample, "PE", ".fastq.gz", "/t", "/logs", config)
    assert cmd.startswith("/opt/bin/trimmomatic PE -threads 2 ")
    assert "/in/s1_1.fastq.gz /in/s1_2.fastq.gz %s " % " ".join(out_files) in cmd
    assert "ILLUMINACLIP:/adapters/TruSeq3-PE.fa:2:30:10 LEADING:3" in cmd


def test_configured_steps_replace_defaults(programs):
    sample = Sample("s1", SINGLE, ("/in/s1.fastq",))
    config = {"resources": {"trimmomatic": {"options": ["MINLEN:50"]}}}
    cmd, _ = trim.trim_cmd(sample, "SE", ".fastq", "/t", "/logs", config)
    assert cmd.endswith("/t/s1_trimmed.fastq MINLEN:50")


def test_pinned_version_runs_jar(tmpdir, programs):
    tmpdir.join("trimmomatic-0.39.jar").write("")
    programs.side_effect = lambda name, config, ptype="cmd", default=None: (
        str(tmpdir) if ptype == "dir" else "/opt/bin/%s" % name)
    assert trim.trimmomatic_cmd({"resources": {}}, "0.39") == \
        "/opt/bin/java -jar %s" % tmpdir.join("trimmomatic-0.39.jar")


def test_pinned_version_missing_jar(tmpdir, programs):
    programs.side_effect = lambda name, config, ptype="cmd", default=None: (
        str(tmpdir) if ptype == "dir" else "/opt/bin/%s" % name)
    with pytest.raises(ValueError):
        trim.trimmomatic_cmd({"resources": {}}, "0.36")
