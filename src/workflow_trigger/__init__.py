"""GitHub Workflow Trigger.

Periodically probes endpoints and dispatches GitHub Actions workflows:
- conditional tasks trigger when a probe returns a configured status code
- scheduled tasks trigger on every run
- a per-key cooldown throttles repeated triggers
- outcomes are logged as structured events and optionally sent to Telegram
"""

__version__ = "0.1.0"

from workflow_trigger.trigger.config import TriggerSettings

__all__ = ["__version__", "TriggerSettings"]
