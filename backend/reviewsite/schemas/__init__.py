"""Pydantic schemas for request payloads and responses."""
