"""Agent execution, chat model, history and request handling."""
