"""Infinite Wiki: a generative encyclopedia front end over the Gemini API."""

__version__ = "0.1.0"
