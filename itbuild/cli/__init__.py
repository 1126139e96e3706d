"""Command line interface for the ItBuild Auth SDK."""
