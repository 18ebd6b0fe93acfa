"""nulsweep - remove files named after reserved Windows device names."""

__version__ = "0.3.0"
