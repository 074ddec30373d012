"""On-chain payment verification for freelancer invoices."""

__version__ = "0.1.0"
