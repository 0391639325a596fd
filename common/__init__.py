"""Shared infrastructure for fsplit tools."""
