"""Boundary adapters: relational database and vector stores."""
