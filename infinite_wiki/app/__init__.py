"""Application layer: gateway, view state and the Gradio interface."""
