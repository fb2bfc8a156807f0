"""
Core domain logic: exception hierarchy, word-window chunking, text extraction.

Dependencies: langchain_community (PDF loading only)
System role: Pure domain layer shared by ingestion and chat
"""
