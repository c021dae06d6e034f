"""
Hypercontacts — Middleware Package
===================================

Middleware Chain (outermost first):
    Request → [Request ID] → [Logging] → [Session] → [GZip] → Route Handler

    - Request ID first, so every log line of the request carries it
    - Logging sees the final status code and total duration
    - Session decodes the signed cookie holding flash messages before the
      handler runs, and re-signs it on the way out
"""
