"""panscan — wildcard DNS detection for subdomain brute-forcing."""

__version__ = "0.1.0"
