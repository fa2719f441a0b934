"""Polly: a polling service built on FastAPI."""
