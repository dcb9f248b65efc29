"""MapChat: chat-driven map lookup tools served over MCP."""

__version__ = "0.1.0"
