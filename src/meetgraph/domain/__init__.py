"""Domain layer — attendance rows, result rows, and graph descriptions.

This layer depends only on the standard library.
It must never import from services, infrastructure, commands, or config.
"""
