"""Operational scripts for the funnel dashboard service."""
