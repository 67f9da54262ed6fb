"""Domain model and storage protocols."""
