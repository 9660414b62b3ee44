"""High level code for driving the RNA-seq pipeline.

This structures processing steps into the following modules:

  - run_info.py: Find samples in an input directory and set up outputs.
  - genome.py: Prepare the annotation and reuse or build the STAR index.
  - plan.py: Turn each sample into an ordered list of steps.
  - main.py: Run everything, handing jobs to a local or queued backend.
"""
