"""
Web application package for the chess engine.

Provides a FastAPI-based REST API for playing against the engine from a
browser or any HTTP client. The server keeps no game state between requests.
"""
