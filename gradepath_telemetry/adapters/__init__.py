"""Adapters implementing the core protocols (storage, platform, ingest)."""
