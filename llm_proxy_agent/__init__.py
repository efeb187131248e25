"""A2A agent that proxies conversations to a LangChain chat model."""

__version__ = "0.1.0"
