"""FastAPI surface for the Toolforge-AI capability runtime."""
