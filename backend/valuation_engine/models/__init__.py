"""
Pydantic records exchanged with the engine's callers.
"""
