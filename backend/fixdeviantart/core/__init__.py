"""
Core infrastructure for the FixDeviantArt embed proxy.

- errors: request-terminating error taxonomy with HTTP status and public message
- http_client: shared httpx.AsyncClient lifecycle (init, get, close)
"""
