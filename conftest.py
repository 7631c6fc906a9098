"""
Repository-root pytest hook file.

Its presence puts the repository root on ``sys.path`` so test modules can
import the package as ``src.myras`` (the same way ``python -m unittest``
resolves it from the root).
"""
