__version__ = "1.0.0"
__git_revision__ = ""
