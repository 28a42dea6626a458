"""Configuration package for Listly."""
