"""Listly: shared shopping lists and meal planning."""
