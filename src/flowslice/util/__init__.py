"""
Utility modules for flowslice.

This package provides the small pieces of infrastructure shared by the
program model, the slicer and the command line tools:
- Canonical object management (canonical.py)
- Lazily populated dictionaries (xcollections.py)
- Hierarchical console output with phase timing (application/)
- Human-readable formatting (io/)
"""
