"""Pydantic models for API request validation and the response envelope."""
