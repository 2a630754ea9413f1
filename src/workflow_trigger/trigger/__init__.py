"""Task execution core.

- Settings loaded from `.env` and the environment
- Structured JSON logging
- Bounded executor, decision engine and cooldown store
- GitHub workflow dispatch and Telegram notifications
"""
