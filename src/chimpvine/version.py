"""Client version tracking.

CLIENT_VERSION tracks the wire behavior of the client: endpoints,
payload fields, and header names. Bump this when what is sent to the
backend changes, NOT for logging or tooling changes.

Bump rules:
- Patch (0.1.x): bug fixes, config tweaks
- Minor (0.x.0): new optional payload fields, new settings
- Major (x.0.0): endpoint or payload contract changes
"""

CLIENT_VERSION = "0.1.0"
