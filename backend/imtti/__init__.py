"""IMTTI institute management backend.

This package exposes the service, repository and model modules used by
the FastAPI application. Individual modules contain the concrete
implementations and documentation.
"""
