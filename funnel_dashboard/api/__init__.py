"""HTTP API for the funnel dashboard service."""
