"""testplane - test discovery and run orchestration for IDE test explorers."""

__version__ = "0.1.0"
