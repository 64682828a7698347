"""Resilient credibility analysis over generative-AI providers."""

__version__ = "0.1.0"
