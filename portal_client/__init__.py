"""
Client core package for the parent portal mobile app.

It exposes subpackages for core utilities (configuration, logging, storage,
HTTP), internationalization, payload schemas and the session tracking
services.
"""
