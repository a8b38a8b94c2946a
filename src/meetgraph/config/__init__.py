"""Configuration layer — settings models, file lookup, and logging setup."""
