"""Database package for Listly."""
