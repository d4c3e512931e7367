"""Client package for the AxM MCP server.

Provides the authenticated request pipeline for the Apple School/Business Manager API:
- ``assertion``: ES256 JWT client assertions
- ``token_manager``: Bearer token lifecycle management with caching and refresh
- ``dispatcher``: Authenticated requests with retry, backoff and decoding
- ``paginator``: Cursor pagination with optional total limits
- ``axm_client``: Async context manager factory for configured dispatchers
"""
