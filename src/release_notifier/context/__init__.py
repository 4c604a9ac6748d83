"""Clients for fetching release data from external sources."""
