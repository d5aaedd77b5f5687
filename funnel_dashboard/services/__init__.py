"""Application services used by the API routers and CLI scripts."""
