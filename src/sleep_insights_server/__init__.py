"""Sleep metrics and insight engine for nightly sleep exports."""

__version__ = "0.1.0"
