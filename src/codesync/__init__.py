"""codesync - keep related code in sync across a codebase.

Finds ``CODESYNC(label[, count])`` annotations, validates their syntax and
checks that every label group is consistent.
"""

__version__ = "0.1.0"
