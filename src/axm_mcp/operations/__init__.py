"""Resource operations for the AxM API.

Contains the endpoint-specific calls built on the request dispatcher:
- ``common``: Request building and serialization helpers
- ``devices``: Device listing and per-device lookups with enrichment
- ``mdm_servers``: MDM server listing, name resolution and device assignment lookups
- ``activities``: Device assign/unassign activities and their status
- ``applecare``: AppleCare coverage lookups
"""
