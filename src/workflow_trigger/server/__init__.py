"""FastAPI adapter exposing run-all over HTTP.

Design intent:
- Keep decision logic in `workflow_trigger.trigger.*`
- Keep HTTP concerns (routing, acknowledgement) here
"""

from __future__ import annotations

__all__ = ["create_app"]

from workflow_trigger.server.app import create_app
