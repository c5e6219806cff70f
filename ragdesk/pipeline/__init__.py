"""Streaming and progress plumbing shared by the services and the API."""

from ragdesk.pipeline.progress_tracker import ProgressTracker
from ragdesk.pipeline.stream_normalizer import StreamNormalizer

__all__ = ["ProgressTracker", "StreamNormalizer"]
