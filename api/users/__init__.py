"""
User records: CRUD over the `usuarios` table.
"""
