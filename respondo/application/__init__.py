"""
Application layer: ingestion pipeline, retrieval, streamed chat and the
services the API calls into.
"""
