"""Convert streamed analyzer findings into SARIF logs."""

__version__ = "0.1.0"
