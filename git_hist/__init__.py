"""
git-hist: browse the git history of a file, one diff at a time.
"""
__version__ = "1.0.0"
