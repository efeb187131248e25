"""Pydantic models for the A2A protocol, the JSON-RPC envelope and tool definitions."""
