"""Pydantic models for analysis requests and results."""
