"""Domain layer — requests, schemas, operations, and errors.

This layer depends only on stdlib and pydantic.
It must never import from services, transport, commands, or config.
"""
