"""Service layer — builder, executor, formatter, and the ServiceResult façade.

Services may import from domain and transport layers.
They must never import from commands or output.
"""
