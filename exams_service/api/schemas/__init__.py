"""Pydantic models for request bodies, response payloads and the envelope."""
