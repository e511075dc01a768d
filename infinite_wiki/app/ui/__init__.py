"""Gradio presentation for Infinite Wiki."""
