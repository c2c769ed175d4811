"""Streaming-service provider modules."""
