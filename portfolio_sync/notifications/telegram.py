"""Telegram notifier for sync failures and portfolio reports."""
from __future__ import annotations

import logging

from ..clients.http import request_json
from ..config import TelegramConfig

logger = logging.getLogger(__name__)

TELEGRAM_API_BASE = "https://api.telegram.org"
# sendMessage rejects texts longer than this
MAX_MESSAGE_LENGTH = 4096


def split_message(message: str, limit: int = MAX_MESSAGE_LENGTH) -> list[str]:
    """Split on line boundaries so each chunk fits in one Telegram message."""
    chunks: list[str] = []
    current = ""
    for line in message.splitlines():
        while len(line) > limit:
            if current:
                chunks.append(current)
                current = ""
            chunks.append(line[:limit])
            line = line[limit:]
        candidate = f"{current}\n{line}" if current else line
        if len(candidate) > limit:
            chunks.append(current)
            current = line
        else:
            current = candidate
    if current:
        chunks.append(current)
    return chunks


class TelegramNotifier:
    """Alerts go to the alert bot (audible), reports to the log bot."""

    def __init__(self, config: TelegramConfig, timeout: float = 10) -> None:
        self.alert_bot_token = config.alert_bot_token
        self.log_bot_token = config.log_bot_token or config.alert_bot_token
        self.chat_id = config.chat_id
        self.timeout = timeout

    async def _send(self, message: str, bot_token: str, silent: bool) -> bool:
        if not bot_token or not self.chat_id:
            logger.warning("Telegram credentials not configured")
            return False

        url = f"{TELEGRAM_API_BASE}/bot{bot_token}/sendMessage"
        try:
            for chunk in split_message(message):
                await request_json(
                    "POST",
                    url,
                    json={
                        "chat_id": self.chat_id,
                        "text": chunk,
                        "disable_notification": silent,
                    },
                    timeout=self.timeout,
                    label="Telegram",
                )
        except Exception as e:
            logger.error("Failed to send Telegram message: %s", e)
            return False
        return True

    async def send_alert(self, message: str, subject: str = "") -> bool:
        text = f"{subject}\n\n{message}" if subject else message
        if await self._send(text, self.alert_bot_token, silent=False):
            logger.info("Telegram alert sent")
            return True
        return False

    async def send_log(self, message: str, silent: bool = True) -> bool:
        if await self._send(message, self.log_bot_token, silent=silent):
            logger.info("Telegram report sent")
            return True
        return False
