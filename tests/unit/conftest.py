import os

import pytest

from rnapipe.pipeline import config_utils, run_info


def touch(fname, content="x\n"):
    if not os.path.exists(os.path.dirname(fname)):
        os.makedirs(os.path.dirname(fname))
    with open(fname, "w") as out_handle:
        out_handle.write(content)
    return fname


def fake_program(name, config, ptype="cmd", default=None):
    return "/opt/bin/%s" % name


@pytest.fixture
def programs(mocker):
    """Resolve every external program to a fixed path without looking at the PATH.
    """
    yield mocker.patch("rnapipe.pipeline.config_utils.get_program", side_effect=fake_program)


@pytest.fixture
def run_cmd(mocker):
    yield mocker.patch("rnapipe.provenance.do.run")


@pytest.fixture
def inputs(tmpdir):
    """Reference genome, annotation and an empty fastq directory."""
    base = str(tmpdir)
    fastq_dir = os.path.join(base, "fastq")
    os.makedirs(fastq_dir)
    return {"fastq_dir": fastq_dir,
            "reference": touch(os.path.join(base, "ref", "genome.fa"), ">chr1\nACGT\n"),
            "gtf": touch(os.path.join(base, "ref", "genes.gtf")),
            "gff": touch(os.path.join(base, "ref", "genes.gff3")),
            "out_dir": os.path.join(base, "out")}


@pytest.fixture
def make_run_config(inputs):
    def _make(library_type="PE", annotation=None, fastqs=(), **kwargs):
        for fname in fastqs:
            touch(os.path.join(inputs["fastq_dir"], fname))
        return config_utils.make_run_config(inputs["fastq_dir"], inputs["reference"],
                                            annotation or inputs["gtf"], library_type,
                                            inputs["out_dir"], **kwargs)
    return _make


@pytest.fixture
def dirs(inputs):
    return run_info.setup_directories(inputs["out_dir"])
