"""Environment-backed configuration for the agent."""

import os
from dataclasses import dataclass


@dataclass
class LLMConfig:
    """Configuration for the streaming chat model."""

    model: str = "claude-3-5-sonnet-20241022"
    temperature: float = 0.7
    max_tokens: int = 2000
    api_key: str | None = None

    @classmethod
    def from_env(cls) -> "LLMConfig":
        """Build the configuration from LLM_* and ANTHROPIC_API_KEY variables."""
        defaults = cls()
        return cls(
            model=os.getenv("LLM_MODEL", defaults.model),
            temperature=float(os.getenv("LLM_TEMPERATURE", defaults.temperature)),
            max_tokens=int(os.getenv("LLM_MAX_TOKENS", defaults.max_tokens)),
            api_key=os.getenv("ANTHROPIC_API_KEY"),
        )


@dataclass
class ServerConfig:
    """Configuration for the HTTP server and the advertised agent card."""

    host: str = "0.0.0.0"
    port: int = 41242
    public_url: str | None = None

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """Build the configuration from HOST, PORT and PUBLIC_URL variables."""
        defaults = cls()
        return cls(
            host=os.getenv("HOST", defaults.host),
            port=int(os.getenv("PORT", defaults.port)),
            public_url=os.getenv("PUBLIC_URL"),
        )

    @property
    def url(self) -> str:
        """URL peers should use to reach the agent."""
        return self.public_url or f"http://localhost:{self.port}/"
