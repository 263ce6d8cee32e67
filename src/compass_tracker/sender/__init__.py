"""HTTP transport module for sending tick payloads to the ingest API."""

from .form_encoding import decode_form, encode_form, percent_escape
from .http_sender import IngestSender, Transport, post_form

__all__ = ["IngestSender", "Transport", "post_form", "encode_form", "decode_form", "percent_escape"]
