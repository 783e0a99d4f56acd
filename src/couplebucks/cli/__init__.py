"""Command line interface for couplebucks."""
