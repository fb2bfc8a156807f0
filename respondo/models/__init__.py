"""Pydantic schemas shared by services and the HTTP API."""
