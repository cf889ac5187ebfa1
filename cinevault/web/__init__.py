"""API JSON FastAPI de CineVault."""
