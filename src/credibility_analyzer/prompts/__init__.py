"""Prompt templates for the analysis variants."""
