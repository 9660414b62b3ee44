import os

import pytest

from rnapipe.distributed import tracker
from rnapipe.pipeline import config_utils
from rnapipe.pipeline.main import run_main


def _write(fname, content="x\n"):
    with open(fname, "w") as out_handle:
        out_handle.write(content)


def fake_tools(cmd, descr=None, sample=None, **kwargs):
    """Produce the STAR and Salmon outputs the pipeline looks for."""
    if isinstance(cmd, str) and "--outFileNamePrefix" in cmd:
        prefix = cmd.split("--outFileNamePrefix ")[1].split()[0]
        _write(prefix + "ReadsPerGene.out.tab")
        _write(prefix + "Log.final.out")
        if "&& mv" in cmd:
            os.rename(prefix + "Log.final.out", prefix + "Log.final.out.pending")
    elif isinstance(cmd, str) and " quant " in cmd:
        out_dir = cmd.split(" -o ")[1].split()[0]
        os.makedirs(out_dir)
        _write(os.path.join(out_dir, "quant.sf"), "Name\tNumReads\n")
        pending = cmd.split("&& mv ")[1].split()
        os.rename(pending[0], pending[1])


@pytest.fixture
def tools(run_cmd, programs, mocker):
    run_cmd.side_effect = fake_tools
    mocker.patch("rnapipe.ngsalign.star.index", side_effect=lambda ref, gtf, out_dir, config: out_dir)
    yield run_cmd


def _commands(run_cmd, name):
    prog = "/opt/bin/%s" % name
    cmds = [c[0][0] for c in run_cmd.call_args_list]
    return [c for c in cmds if (c[0] == prog if isinstance(c, list) else c.startswith(prog + " "))]


def test_local_run_collates_gene_counts(make_run_config, inputs, tools):
    run_config = make_run_config("PE", fastqs=["a_1.fastq.gz", "a_2.fastq.gz",
                                                "b_1.fastq.gz", "b_2.fastq.gz"])
    submissions = run_main(run_config)
    assert [s.job.sample.id for s in submissions] == ["a", "b"]
    assert all(s.status == "completed" for s in submissions)
    out_dir = inputs["out_dir"]
    with open(os.path.join(out_dir, "STAR_aln", "index")) as in_handle:
        assert len(in_handle.read().splitlines()) == 2
    assert len(_commands(tools, "trimmomatic")) == 2
    assert len(_commands(tools, "STAR")) == 2
    rscript = tools.call_args_list[-1][0][0]
    assert rscript == ["/opt/bin/Rscript", "--vanilla", os.path.join(out_dir, "collate_counts.R")]
    assert os.path.exists(os.path.join(out_dir, "Logs", "rnapipe.log"))


def test_quantified_run_collates_transcripts(make_run_config, inputs, tools):
    run_config = make_run_config("SE", fastqs=["a.fastq"], quantify=True)
    run_main(run_config)
    marker = os.path.join(inputs["out_dir"], "STAR_aln", "a", "a_Log.final.out")
    assert os.path.exists(marker)
    assert not os.path.exists(marker + ".pending")
    with open(os.path.join(inputs["out_dir"], "collate_counts.R")) as in_handle:
        assert "quant.sf" in in_handle.read()


def test_no_collation(make_run_config, tools):
    run_main(make_run_config("SE", fastqs=["a.fastq"], collate=False))
    assert not _commands(tools, "Rscript")


def test_missing_program_before_any_tool(make_run_config, run_cmd, mocker):
    def get_program(name, config, ptype="cmd", default=None):
        if name == "STAR":
            raise config_utils.CmdNotFound(name)
        return "/opt/bin/%s" % name
    mocker.patch("rnapipe.pipeline.config_utils.get_program", side_effect=get_program)
    with pytest.raises(config_utils.CmdNotFound):
        run_main(make_run_config("SE", fastqs=["a.fastq"]))
    assert not run_cmd.called


def test_no_samples_before_any_tool(make_run_config, tools):
    with pytest.raises(ValueError):
        run_main(make_run_config("SE"))
    assert not tools.called


def test_queued_jobs_that_never_finish(make_run_config, programs, run_cmd, mocker):
    mocker.patch("rnapipe.ngsalign.star.index", side_effect=lambda ref, gtf, out_dir, config: out_dir)
    mocker.patch("rnapipe.distributed.sge.submit_job", side_effect=["11", "12"])
    mocker.patch("rnapipe.distributed.sge.active_jobs", return_value=0)
    run_config = make_run_config("SE", fastqs=["a.fastq", "b.fastq"], cluster=True,
                                 submit_delay=0)
    with pytest.raises(tracker.JobsFailed) as excinfo:
        run_main(run_config)
    assert excinfo.value.missing == ["a_Log.final.out", "b_Log.final.out"]
