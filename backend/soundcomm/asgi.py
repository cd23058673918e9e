"""
ASGI entry point for serverless and managed hosts.

It exposes the ASGI callable as a module-level variable named ``app``.
The long-running listener (``soundcomm.main.run``) serves this same object.
"""

from soundcomm.main import create_app

app = create_app()
