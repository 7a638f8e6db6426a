"""
Query Dispatcher

Maps a parsed question to the synthesizer and wraps the result in a reply.
One query is one transition: either an authoritative answer or NXDOMAIN.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from ..config.schema import ZoneConfig
from .message import DNSMessage, DNSRecordType, DNSResourceRecord, DNSResponseCode
from .synthesizer import Answer, RecordSynthesizer

logger = logging.getLogger(__name__)


@dataclass
class DispatchResult:
    """Outcome of resolving one question"""

    rcode: int = DNSResponseCode.NXDOMAIN
    authoritative: bool = False
    answers: List[DNSResourceRecord] = field(default_factory=list)
    authority: List[DNSResourceRecord] = field(default_factory=list)


class QueryDispatcher:
    """Routes NS, PTR and AAAA questions to the record synthesizer."""

    def __init__(self, zone: ZoneConfig, synthesizer: Optional[RecordSynthesizer] = None):
        self.zone = zone
        self.synthesizer = synthesizer or RecordSynthesizer(zone)

    def synthesize(self, qtype: int, qname: str) -> Optional[Answer]:
        """Pick the synthesizer for ``qtype``; None for unsupported types."""
        if qtype == DNSRecordType.NS:
            return self.synthesizer.synthesize_ns(qname)
        elif qtype == DNSRecordType.PTR:
            return self.synthesizer.synthesize_ptr(qname)
        elif qtype == DNSRecordType.AAAA:
            return self.synthesizer.synthesize_aaaa(qname)
        return None

    def resolve(self, qtype: int, qname: str) -> DispatchResult:
        """Resolve one question.

        The record carries the query name as its owner, class IN and the
        zone TTL. NS records go to the authority section.
        """
        answer = self.synthesize(qtype, qname)
        if answer is None:
            return DispatchResult(rcode=DNSResponseCode.NXDOMAIN)

        record = answer.to_record(qname, self.zone.ttl)
        result = DispatchResult(rcode=DNSResponseCode.NOERROR, authoritative=True)
        if answer.rtype == DNSRecordType.NS:
            result.authority.append(record)
        else:
            result.answers.append(record)
        return result

    def dispatch(self, query: DNSMessage) -> Optional[DNSMessage]:
        """Build the reply to ``query``.

        Returns None, and no reply should be sent, unless the query carries
        exactly one question.
        """
        if len(query.questions) != 1:
            logger.warning(f"len(question) = {len(query.questions)}")
            return None

        question = query.questions[0]
        result = self.resolve(question.qtype, question.name)

        reply = query.create_response(result.rcode)
        reply.header.aa = result.authoritative
        reply.answers = result.answers
        reply.authority = result.authority
        return reply
