"""RFV (recency, frequency, value) segment lookups.

The lookup is independent of the tick loop: it is keyed by the user id and
account id and answers with the user's segment, or nothing.
"""

from __future__ import annotations

import json
from typing import Optional, Tuple
from urllib.parse import urljoin

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..config.settings import SenderConfig
from ..sender.form_encoding import encode_form
from ..sender.http_sender import post_form


class RFVResponse(BaseModel):
    """Body returned by the RFV endpoint."""

    model_config = ConfigDict(extra="ignore")

    rfv: Optional[str] = Field(None, description="User segment")


class RFVClient:
    """Fetches the RFV segment for a user."""

    def __init__(self, config: SenderConfig = SenderConfig()):
        self.config = config

    @property
    def rfv_url(self) -> str:
        return urljoin(self.config.api_base_url, self.config.rfv_endpoint)

    def fetch(self, user_id: str, account_id: int) -> Tuple[Optional[str], Optional[str]]:
        """Look up the RFV segment.

        Args:
            user_id: Identified user
            account_id: Account the user belongs to

        Returns:
            Tuple of (rfv, error_message)
        """
        body = encode_form({"u": user_id, "ac": account_id})
        success, error_msg, raw = post_form(self.rfv_url, body, self.config)
        if not success:
            logger.warning(f"RFV lookup failed: {error_msg}")
            return None, error_msg

        return self._parse(raw)

    def _parse(self, raw: bytes) -> Tuple[Optional[str], Optional[str]]:
        text = raw.decode("utf-8").strip()
        if not text:
            return None, None

        try:
            data = json.loads(text)
        except json.JSONDecodeError:
            # Plain-text responses carry the segment as-is
            return text, None

        if not isinstance(data, dict):
            return str(data), None

        try:
            return RFVResponse.model_validate(data).rfv, None
        except ValidationError as e:
            logger.warning(f"Unexpected RFV response: {e}")
            return None, f"Invalid RFV response: {e}"
