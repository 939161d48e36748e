"""samplectl — typed request building, paging, and operation polling for Cloud APIs."""

__version__ = "0.1.0"
