"""docdrift - documentation drift, API diff and documentation health analysis."""

__version__ = "0.1.0"
