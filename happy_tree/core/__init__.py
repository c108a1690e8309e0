"""Core tree model, traversal engine, settings and exceptions."""
