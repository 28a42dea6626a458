"""Utilities for Listly."""
