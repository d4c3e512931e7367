"""MCP tool registrations.

Each module exposes ``register(app, deps=...)``:
- ``devices``: list_devices, get_devices_info
- ``mdm_servers``: list_mdm_servers, get_assigned_mdm
- ``activities``: assign_devices, unassign_devices, activity_status
- ``applecare``: get_applecare
"""
