"""
Respondo: support knowledge base back end.

Ingests uploaded documents into overlapping word windows with embeddings and
answers chat turns with retrieval-augmented, streamed completions.
"""

__version__ = "0.1.0"
