from __future__ import annotations

from typing import Any, Optional

import httpx
import structlog

from welth.core.config import settings

logger = structlog.get_logger(__name__)


class EmailSender:
    """Send transactional email through the Resend HTTP API.

    Delivery is best effort: failures are logged and reported in the result,
    never raised to the caller.
    """

    def __init__(
        self,
        *,
        api_key: Optional[str] = None,
        sender: Optional[str] = None,
        api_url: Optional[str] = None,
        client: Optional[httpx.Client] = None,
        timeout: float = 10.0,
    ) -> None:
        self.api_key = api_key if api_key is not None else settings.RESEND_API_KEY
        self.sender = sender or settings.EMAIL_FROM
        self.api_url = api_url or settings.RESEND_API_URL
        self._client = client
        self.timeout = timeout

    def send(self, to: str | list[str], subject: str, html: str) -> dict[str, Any]:
        if not self.api_key:
            logger.warning("email.not_configured", subject=subject)
            return {"success": False, "error": "Email delivery is not configured"}

        payload = {
            "from": self.sender,
            "to": [to] if isinstance(to, str) else list(to),
            "subject": subject,
            "html": html,
        }
        headers = {"Authorization": f"Bearer {self.api_key}"}
        try:
            if self._client is not None:
                response = self._client.post(self.api_url, json=payload, headers=headers, timeout=self.timeout)
            else:
                with httpx.Client(timeout=self.timeout) as client:
                    response = client.post(self.api_url, json=payload, headers=headers)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.error("email.send_failed", subject=subject, error=str(exc))
            return {"success": False, "error": str(exc)}

        data = response.json() if response.content else {}
        logger.info("email.sent", subject=subject, id=data.get("id"))
        return {"success": True, "data": data}
