"""
Similarity search result schema.

Dependencies: pydantic
System role: Retrieval result contract
"""

from pydantic import BaseModel, Field


class SearchMatch(BaseModel):
    """One chunk returned by similarity search."""

    content: str = Field(description="Chunk text")
    similarity: float = Field(description="Similarity to the query (higher is closer)")
    document_id: str = Field(description="Parent document identifier")
