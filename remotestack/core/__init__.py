"""Core domain models and contracts/ports."""
