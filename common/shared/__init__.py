"""Configuration loading and progress helpers shared by fsplit entry points."""
