"""
rdns Server

Synthesizes PTR, AAAA and NS answers for one IPv6 subnet from the structure
of the addresses themselves.
"""

__version__ = "0.1.0"
