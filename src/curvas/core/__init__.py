"""Core infrastructure for the curvas ticketing engine.

Configuration, logging, async database, errors and dependency helpers used by
the services and the FastAPI application entrypoint.
"""
