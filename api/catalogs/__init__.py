"""
Generic CRUD over the lookup (catalog) tables.
"""
