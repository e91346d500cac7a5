"""Bundled resources distributed with landing_status."""
