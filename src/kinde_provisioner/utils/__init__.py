"""Utilities: token exchange and the Management API client."""
