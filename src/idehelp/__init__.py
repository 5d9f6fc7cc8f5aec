"""idehelp: IDE doc block generator for PHP models and classes.

Keeps ``/** ... */`` blocks on class and method declarations in sync with
what the code resolves dynamically (database columns, query-builder mixins,
method signatures) while preserving everything a human wrote in them.
"""

__version__ = "0.1.0"
