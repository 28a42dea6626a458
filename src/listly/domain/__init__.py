"""Domain types, roles and permissions for Listly."""
