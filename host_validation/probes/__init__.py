"""Probes that inspect host state."""
