"""Encode and decode nftables rule expressions as netlink attributes."""

__version__ = "0.1.0"