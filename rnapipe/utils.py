"""Helpful utilities for building analysis pipelines.
"""
import contextlib
import fnmatch
import os
import shutil
import time


def safe_makedir(dname):
    """Make a directory if it doesn't exist, handling concurrent race conditions.
    """
    if not dname:
        return dname
    num_tries = 0
    max_tries = 5
    while not os.path.exists(dname):
        # we could get an error here if multiple processes are creating
        # the directory at the same time. Grr, concurrency.
        try:
            os.makedirs(dname)
        except OSError:
            if num_tries > max_tries:
                raise
            num_tries += 1
            time.sleep(2)
    return dname

@contextlib.contextmanager
def chdir(new_dir):
    """Context manager to temporarily change to a new directory.
    """
    cur_dir = os.getcwd()
    safe_makedir(new_dir)
    os.chdir(new_dir)
    try:
        yield
    finally:
        os.chdir(cur_dir)

def file_exists(fname):
    """Check if a file exists and is non-empty.
    """
    try:
        return bool(fname) and os.path.exists(fname) and os.path.getsize(fname) > 0
    except OSError:
        return False

def remove_safe(f):
    try:
        if os.path.isdir(f) and not os.path.islink(f):
            shutil.rmtree(f)
        else:
            os.remove(f)
    except OSError:
        pass

def symlink_plus(orig, new):
    """Create a relative symlink to orig at new, replacing stale links.

    Falls back to copying on filesystems which refuse symlinks.
    """
    orig = os.path.abspath(orig)
    if not os.path.exists(orig):
        raise RuntimeError("File not found: %s" % orig)
    if os.path.lexists(new) and os.path.exists(new) and os.path.samefile(orig, new):
        return new
    with chdir(os.path.dirname(os.path.abspath(new))):
        remove_safe(os.path.basename(new))
        try:
            os.symlink(os.path.relpath(orig), os.path.basename(new))
        except OSError:
            if not os.path.exists(new) or not os.path.lexists(new):
                remove_safe(os.path.basename(new))
                shutil.copyfile(orig, os.path.basename(new))
    return new

def locate(pattern, root=os.curdir):
    """Locate all files matching supplied filename pattern in and below
    supplied root directory.
    """
    for path, dirs, files in os.walk(os.path.abspath(root)):
        dirs.sort()
        for filename in sorted(fnmatch.filter(files, pattern)):
            yield os.path.join(path, filename)
