"""Contact and message synchronization engine for chat front-ends."""

__version__ = "1.0.0"
