"""Console script shim.

The CLI is implemented in `workflow_trigger.trigger.main`.
"""

from __future__ import annotations

from workflow_trigger.trigger.main import main

__all__ = ["main"]


if __name__ == "__main__":
    raise SystemExit(main())
