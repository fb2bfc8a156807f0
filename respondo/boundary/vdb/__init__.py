"""Vector search boundary."""

from respondo.boundary.vdb.similarity_search import SimilaritySearch

__all__ = ["SimilaritySearch"]
