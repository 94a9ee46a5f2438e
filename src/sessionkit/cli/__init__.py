"""Command line interface for sessionkit."""
