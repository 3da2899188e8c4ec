"""MediaVault: multimedia upload, storage and ranked search service."""

__version__ = "1.0.0"
