#!/usr/bin/env python

"""Setup file and install script for the rnapipe RNA-seq pipeline"""

import os
import subprocess

import setuptools

VERSION = '1.0.0'

# add version number and git commit hash of the current revision to version.py
try:
    git_run = subprocess.run(['git', 'rev-parse', '--short', 'HEAD'], stdout=subprocess.PIPE,
                             stderr=subprocess.DEVNULL)
    git_run.check_returncode()
except (subprocess.SubprocessError, OSError):
    commit_hash = ''
else:
    commit_hash = git_run.stdout.strip().decode()

here = os.path.dirname(os.path.abspath(__file__))
with open(os.path.join(here, 'rnapipe', 'pipeline', 'version.py'), 'w') as version_file:
    version_file.writelines([f'__version__ = "{VERSION}"\n',
                             f'__git_revision__ = "{commit_hash}"\n'])

# external programs (STAR, Trimmomatic, Salmon, gffread, R) are installed via Conda
setuptools.setup(name="rnapipe",
                 version=VERSION,
                 description="Trim, align and count RNA-seq samples locally or on a cluster queue",
                 packages=setuptools.find_packages(exclude=["tests", "tests.*"]),
                 scripts=["scripts/rnapipe.py"],
                 python_requires=">=3.7",
                 install_requires=["Logbook", "PyYAML", "toolz"],
                 extras_require={"test": ["pytest", "pytest-mock", "mock"]})
