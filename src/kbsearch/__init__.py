"""Similarity search over the chatbot knowledge base."""

__version__ = "0.1.0"
