"""
Designate-DNS: an external-dns webhook provider for OpenStack Designate.
"""

__version__ = "0.1.0"
