"""
Integrations with external frameworks.

This module provides ready-to-use adapters around the core:
- aiohttp web middleware rendering errors as JSON responses
"""

from .web import error_middleware, error_response, async_handler, setup_error_handling

__all__ = ['error_middleware', 'error_response', 'async_handler', 'setup_error_handling']
