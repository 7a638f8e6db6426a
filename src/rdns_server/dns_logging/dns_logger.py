"""
DNS Request/Response Logging

One structured event per reply sent, carrying the request id, client,
question, result code and readable answer data.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from dns import rcode, rdatatype

from .logger import get_logger


def query_type_name(qtype: int) -> str:
    """Mnemonic for a record type, ``TYPE<n>`` when unknown."""
    return rdatatype.to_text(qtype)


def response_code_name(code: int) -> str:
    """Mnemonic for a response code, the number when unknown."""
    return rcode.to_text(code)


class DNSRequestLogger:
    """DNS request/response logger with structured output."""

    def __init__(self, enabled: bool = True):
        """Initialize DNS logger.

        Args:
            enabled: Emit events; the entry is still built when disabled
        """
        self.enabled = enabled
        self.logger = get_logger("dns_requests")

    def log_dns_request(
        self,
        request_id: str,
        client_ip: str,
        query_type: int,
        domain: str,
        response_code: int,
        response_time_ms: float,
        authoritative: bool = False,
        response_data: Optional[List[str]] = None,
        error: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Log one DNS request and its reply.

        Returns:
            The logged entry
        """
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "request_id": request_id,
            "client_ip": client_ip,
            "query_type": query_type_name(query_type),
            "domain": domain,
            "response_code": response_code_name(response_code),
            "response_time_ms": round(response_time_ms, 2),
            "authoritative": authoritative,
            "response_data": response_data or [],
        }

        if error:
            log_entry["error"] = error

        if self.enabled:
            if error:
                self.logger.error("DNS request failed", **log_entry)
            else:
                self.logger.info("DNS request processed", **log_entry)

        return log_entry
