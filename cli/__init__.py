"""Command line interface for the PostgreSQL Spaces backup tool."""
