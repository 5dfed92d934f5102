"""Upload build artifacts to the Appaloosa store."""

__version__ = "0.1.0"
