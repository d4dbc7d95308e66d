"""HardenGuard — rule-based compliance check and remediation for Linux hosts."""

__version__ = "1.0.0"
