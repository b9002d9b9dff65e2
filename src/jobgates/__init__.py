"""Gate rule screening for job board questionnaires."""

__version__ = "0.1.0"
