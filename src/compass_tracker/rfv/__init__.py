"""RFV segment lookup."""

from .client import RFVClient, RFVResponse

__all__ = ["RFVClient", "RFVResponse"]
