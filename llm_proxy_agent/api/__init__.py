"""HTTP API: agent card, JSON-RPC and health endpoints."""
