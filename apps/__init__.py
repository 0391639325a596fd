"""Console entry points for fsplit tools."""
