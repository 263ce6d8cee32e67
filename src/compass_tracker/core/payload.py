"""Tick payload model and the builder that assembles it.

A payload flattens a session snapshot together with the values sampled at
tick time into one record whose field names match the ingest API keys.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..sender.form_encoding import decode_form, encode_form
from .state import SessionState, to_timestamp


class TickPayload(BaseModel):
    """Point-in-time heartbeat sent to the ingest API."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    tik: int = Field(0, alias="a", ge=0, description="Tick index for the current page")
    visit_duration: Optional[int] = Field(None, alias="l", description="Seconds since the page view started")
    scroll_percent: Optional[float] = Field(None, alias="sc", ge=0, le=100, description="Scroll depth")
    conversions: Optional[str] = Field(None, alias="conv", description="Comma-joined conversions since the last tick")

    page_url: Optional[str] = Field(None, alias="url")
    account_id: Optional[int] = Field(None, alias="ac")
    user_id: Optional[str] = Field(None, alias="u")
    user_type: Optional[str] = Field(None, alias="ut")
    start_page_timestamp: Optional[int] = Field(None, alias="ps")
    first_visit_timestamp: Optional[int] = Field(None, alias="fv")
    current_timestamp: Optional[int] = Field(None, alias="n")
    current_visit_timestamp: Optional[int] = Field(None, alias="t")
    page_id: Optional[str] = Field(None, alias="p")
    compass_version: Optional[str] = Field(None, alias="v")
    session_id: Optional[str] = Field(None, alias="s")

    def to_form_fields(self) -> Dict[str, Any]:
        """Non-null fields keyed by their wire names."""
        return self.model_dump(by_alias=True, exclude_none=True)

    def to_form(self) -> str:
        """Encode as an ingest request body."""
        return encode_form(self.to_form_fields())

    @classmethod
    def from_form(cls, body: str) -> TickPayload:
        """Decode an ingest request body."""
        return cls.model_validate(decode_form(body))


def build_payload(snapshot: SessionState, scroll_percent: Optional[float], conversions: list[str]) -> TickPayload:
    """Assemble the payload for one tick.

    Args:
        snapshot: Session state captured at tick time
        scroll_percent: Sampled scroll depth, None without a scroll surface
        conversions: Conversions drained for this tick

    Returns:
        Payload ready for transport
    """
    return TickPayload(
        tik=snapshot.tik,
        visit_duration=snapshot.visit_duration,
        scroll_percent=scroll_percent,
        conversions=",".join(conversions) if conversions else None,
        page_url=snapshot.page_url,
        account_id=snapshot.account_id,
        user_id=snapshot.user_id,
        user_type=snapshot.user_type,
        start_page_timestamp=to_timestamp(snapshot.start_page_date),
        first_visit_timestamp=to_timestamp(snapshot.first_visit_date),
        current_timestamp=to_timestamp(snapshot.current_date),
        current_visit_timestamp=to_timestamp(snapshot.current_visit_date),
        page_id=snapshot.page_id,
        compass_version=snapshot.compass_version,
        session_id=snapshot.session_id,
    )
