import os

import pytest

from rnapipe import utils


def test_symlink_plus_relative_link(tmpdir):
    orig = tmpdir.join("ref", "genome.fa")
    orig.write(">chr1\n", ensure=True)
    new = str(tmpdir.join("out", "genome.fa"))
    os.makedirs(os.path.dirname(new))
    assert utils.symlink_plus(str(orig), new) == new
    assert os.path.islink(new)
    assert os.readlink(new) == os.path.join(os.pardir, "ref", "genome.fa")
    # relinking the same file leaves the link alone
    assert utils.symlink_plus(str(orig), new) == new


def test_symlink_plus_missing_source(tmpdir):
    with pytest.raises(RuntimeError):
        utils.symlink_plus(str(tmpdir.join("missing.fa")), str(tmpdir.join("link.fa")))


def test_locate_is_sorted_and_recursive(tmpdir):
    for fname in ["b/s2_ReadsPerGene.out.tab", "a/s1_ReadsPerGene.out.tab", "a/s1_Log.out"]:
        tmpdir.join(fname).write("", ensure=True)
    found = list(utils.locate("*_ReadsPerGene.out.tab", str(tmpdir)))
    assert found == [str(tmpdir.join("a", "s1_ReadsPerGene.out.tab")),
                     str(tmpdir.join("b", "s2_ReadsPerGene.out.tab"))]


def test_file_exists_needs_content(tmpdir):
    empty = tmpdir.join("empty.txt")
    empty.write("")
    assert not utils.file_exists(str(empty))
    empty.write("x")
    assert utils.file_exists(str(empty))
    assert not utils.file_exists(None)


def test_chdir_restores_directory(tmpdir):
    start = os.getcwd()
    with utils.chdir(str(tmpdir.join("work"))):
        assert os.getcwd() == os.path.realpath(str(tmpdir.join("work")))
    assert os.getcwd() == start
