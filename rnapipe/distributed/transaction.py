"""Handle file based transactions allowing safe restarts at any point.

To handle interrupts,this defines output files written to temporary
locations during processing and copied to the final location when finished.
This ensures output files will be complete independent of method of
interruption.
"""
import contextlib
import os
import shutil
import tempfile

from rnapipe import utils

DEFAULT_TMP = 'rnapipetx'


@contextlib.contextmanager
def tx_tmpdir(base_dir=None, remove=True):
    """Context manager to create and remove a transactional temporary directory.

    Creates the temporary directory inside base_dir, or the current directory,
    so final moves stay on the same filesystem.
    """
    base_dir = base_dir or os.getcwd()
    tmpdir_base = utils.safe_makedir(os.path.join(os.path.abspath(base_dir), DEFAULT_TMP))
    tmp_dir = tempfile.mkdtemp(dir=tmpdir_base)
    try:
        yield tmp_dir
    finally:
        if remove:
            utils.remove_safe(tmp_dir)
            if os.path.isdir(tmpdir_base) and not os.listdir(tmpdir_base):
                utils.remove_safe(tmpdir_base)


@contextlib.contextmanager
def file_transaction(*rollback_files):
    """Wrap file generation in a transaction, moving to output if finishes.
    """
    rollback_files = [f for f in _flatten(rollback_files) if f]
    base_dir = os.path.dirname(os.path.abspath(rollback_files[0]))
    with tx_tmpdir(base_dir) as tmpdir:
        safe_names = [os.path.join(tmpdir, os.path.basename(f)) for f in rollback_files]
        if len(safe_names) == 1:
            yield safe_names[0]
        else:
            yield tuple(safe_names)
        for safe, orig in zip(safe_names, rollback_files):
            if os.path.exists(safe):
                _move_tmp_files(safe, orig)


def _move_tmp_files(safe, orig):
    utils.safe_makedir(os.path.dirname(orig))
    # If we are rolling back a directory and it already exists
    # this will avoid making a nested set of directories
    if os.path.isdir(orig) and os.path.isdir(safe):
        utils.remove_safe(orig)
    shutil.move(safe, orig)


def _flatten(iterable):
    for elem in iterable:
        if isinstance(elem, (tuple, list)):
            for i in elem:
                yield i
        else:
            yield elem
