"""Data models for checks, outcomes and reports."""
