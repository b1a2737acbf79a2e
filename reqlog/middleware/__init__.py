"""ASGI middleware: access logging and response status capture."""
