"""
rdns Server Core

This module implements the network side of the server:
- Async UDP server using asyncio.DatagramProtocol
- Request decoding, dispatch and response encoding
- Malformed packet rejection and per-request logging
"""

import asyncio
import logging
import struct
import time
import uuid
from typing import Any, Dict, Optional, Tuple

from ..dns_logging import DNSRequestLogger, get_logger, log_exception
from .dispatcher import QueryDispatcher
from .matchers import NameMatchers
from .message import DNSHeader, DNSMessage, DNSResponseCode
from .synthesizer import RecordSynthesizer

logger = logging.getLogger(__name__)


class DNSUDPProtocol(asyncio.DatagramProtocol):
    """Async UDP protocol handler for DNS queries"""

    def __init__(self, server: "RDNSServer"):
        self.server = server
        self.transport = None

    def connection_made(self, transport):
        """Called when UDP socket is ready"""
        self.transport = transport
        logger.info(
            f"DNS UDP server listening on {transport.get_extra_info('sockname')}"
        )

    def datagram_received(self, data: bytes, addr: Tuple[str, int]):
        """Handle incoming UDP DNS queries"""
        task = asyncio.create_task(self._handle_request(data, addr))

        # Store task reference to prevent garbage collection
        self.server._background_tasks.add(task)
        task.add_done_callback(self.server._background_tasks.discard)

    async def _handle_request(self, data: bytes, addr: Tuple[str, int]):
        """Process DNS query and send response"""
        client_ip = addr[0]
        try:
            response_data = await self.server.handle_dns_request(data, client_ip)
            if response_data:
                self.transport.sendto(response_data, addr)
        except Exception as e:
            logger.error(f"Error handling UDP request from {client_ip}: {e}")

    def error_received(self, exc):
        """Handle UDP errors"""
        logger.error(f"DNS UDP protocol error: {exc}")


class RDNSServer:
    """Synthetic reverse/forward DNS authority for one IPv6 subnet"""

    def __init__(self, config):
        self.config = config
        self.zone = config.zone
        self.matchers = NameMatchers(self.zone)
        self.synthesizer = RecordSynthesizer(self.zone, self.matchers)
        self.dispatcher = QueryDispatcher(self.zone, self.synthesizer)
        self.request_logger = DNSRequestLogger(
            enabled=config.logging.enable_request_logging
        )
        self.logger = get_logger("rdns_server")

        self._transport = None
        self._background_tasks = set()
        self._is_running = False

        self._stats = {
            "total_queries": 0,
            "answered": 0,
            "nxdomain": 0,
            "dropped": 0,
            "errors": 0,
            "start_time": 0,
        }

    async def start(self) -> None:
        """Start the UDP listener"""
        if self._is_running:
            logger.warning("Server is already running")
            return

        self._stats["start_time"] = time.time()

        bind_address = self.config.server.bind_address
        dns_port = self.config.server.dns_port

        loop = asyncio.get_running_loop()
        try:
            transport, _ = await loop.create_datagram_endpoint(
                lambda: DNSUDPProtocol(self), local_addr=(bind_address, dns_port)
            )
        except OSError as e:
            logger.error(f"Failed to start DNS server: {e}")
            raise

        self._transport = transport
        self._is_running = True
        self.logger.info(
            "rdns server started",
            bind_address=bind_address,
            dns_port=dns_port,
            network=self.zone.network,
            prefix=self.zone.prefix,
        )

    async def stop(self) -> None:
        """Stop the UDP listener"""
        if not self._is_running:
            return

        logger.info("Stopping DNS server...")

        if self._transport:
            self._transport.close()
            self._transport = None

        if self._background_tasks:
            await asyncio.gather(*self._background_tasks, return_exceptions=True)

        self._is_running = False
        logger.info("DNS server stopped")

    @property
    def sockname(self) -> Optional[Tuple]:
        """Bound socket address, once started"""
        if self._transport is None:
            return None
        return self._transport.get_extra_info("sockname")

    async def handle_dns_request(self, data: bytes, client_ip: str) -> Optional[bytes]:
        """Decode, answer and encode one request.

        Returns the encoded reply, or None if nothing should be sent.
        """
        start_time = time.time()
        request_id = str(uuid.uuid4())

        try:
            query = DNSMessage.from_bytes(data)
        except (ValueError, struct.error) as e:
            logger.warning(f"Malformed DNS packet from {client_ip}: {e}")
            self._stats["errors"] += 1
            return self._create_format_error_response(data)

        if not query.is_query():
            logger.warning(f"Ignoring DNS response packet from {client_ip}")
            self._stats["dropped"] += 1
            return None

        self._stats["total_queries"] += 1

        question = query.questions[0] if len(query.questions) == 1 else None
        try:
            reply = self.dispatcher.dispatch(query)
            if reply is None:
                self._stats["dropped"] += 1
                return None
            response_data = reply.to_bytes()
        except Exception as e:
            log_exception(self.logger, "Error answering DNS request", e)
            self._stats["errors"] += 1
            reply = query.create_response(DNSResponseCode.SERVFAIL)
            response_data = reply.to_bytes()
            self._log_request(request_id, client_ip, question, reply, start_time, str(e))
            return response_data

        if reply.header.rcode == DNSResponseCode.NOERROR:
            self._stats["answered"] += 1
        else:
            self._stats["nxdomain"] += 1

        self._log_request(request_id, client_ip, question, reply, start_time)
        return response_data

    def _log_request(
        self,
        request_id: str,
        client_ip: str,
        question,
        reply: DNSMessage,
        start_time: float,
        error: Optional[str] = None,
    ) -> None:
        records = reply.answers + reply.authority
        self.request_logger.log_dns_request(
            request_id=request_id,
            client_ip=client_ip,
            query_type=question.qtype,
            domain=question.name,
            response_code=reply.header.rcode,
            response_time_ms=(time.time() - start_time) * 1000,
            authoritative=reply.header.aa,
            response_data=[record.get_readable_rdata() for record in records],
            error=error,
        )

    def _create_format_error_response(self, original_data: bytes) -> Optional[bytes]:
        """Create a format error response, or None if there is no header to echo"""
        if len(original_data) < 2:
            return None

        transaction_id = struct.unpack("!H", original_data[:2])[0]
        header = DNSHeader(
            transaction_id=transaction_id,
            qr=True,
            rcode=DNSResponseCode.FORMERR,
        )
        response = DNSMessage(
            header=header, questions=[], answers=[], authority=[], additional=[]
        )
        return response.to_bytes()

    def get_stats(self) -> Dict[str, Any]:
        """Get server statistics"""
        uptime = (
            time.time() - self._stats["start_time"] if self._stats["start_time"] else 0
        )

        return {
            "uptime_seconds": round(uptime, 2),
            "total_queries": self._stats["total_queries"],
            "answered": self._stats["answered"],
            "nxdomain": self._stats["nxdomain"],
            "dropped": self._stats["dropped"],
            "errors": self._stats["errors"],
            "qps": (self._stats["total_queries"] / uptime if uptime > 0 else 0),
            "is_running": self._is_running,
        }

    async def health_check(self) -> Dict[str, Any]:
        """Health check"""
        return {
            "status": "healthy" if self._is_running else "unhealthy",
            "server": self.get_stats(),
            "zone": {
                "network": self.zone.network,
                "prefix": self.zone.prefix,
                "ns_name": self.zone.ns_name,
                "ttl": self.zone.ttl,
            },
        }
