"""GitHub REST API access for ghicli."""
