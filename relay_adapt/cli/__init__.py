"""Command line interface for the relay adapter."""
