"""AxM MCP package.

This package contains an authenticated client for the Apple School Manager
and Apple Business Manager device management API, plus the FastMCP server and
command-line interface built on top of it.
"""

# Intentionally do not re-export symbols from submodules to avoid importing
# heavy dependencies and reading configuration at package import time.
# Individual modules (e.g., ``server``, ``cli``) should be imported directly by
# consumers as needed.

__all__: list[str] = []
