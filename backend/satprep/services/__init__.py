"""
Service layer: upstream clients, question bank, and progress persistence.
"""
