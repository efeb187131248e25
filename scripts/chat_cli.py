#!/usr/bin/env python3
"""Interactive chat CLI for talking to the LLM proxy agent over A2A."""

import sys
from typing import Any

import httpx
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.prompt import Prompt

from llm_proxy_agent.converters import parse_a2a_message_for_langchain
from llm_proxy_agent.models.a2a import DataPart, Message, Task, TextPart
from llm_proxy_agent.utils.ids import cuid

WEATHER_TOOL = {
    "type": "function",
    "function": {
        "name": "get_weather",
        "description": "Get the current weather information for a given location",
        "parameters": {
            "type": "object",
            "properties": {
                "location": {"type": "string", "description": "The city and state, e.g. San Francisco, CA"},
                "unit": {"type": "string", "enum": ["celsius", "fahrenheit"]},
            },
            "required": ["location"],
        },
    },
}


class ChatCLI:
    """Interactive chat interface for an A2A agent."""

    def __init__(self, base_url: str = "http://localhost:41242"):
        """Initialize chat CLI."""
        self.base_url = base_url.rstrip("/")
        self.context_id: str | None = None
        self.send_tools = False
        self.console = Console()
        self.client = httpx.Client(timeout=60.0)

    def start(self) -> None:
        """Start the interactive chat session."""
        self.console.print(
            Panel.fit(
                "[bold blue]LLM Proxy Agent - Interactive Chat[/bold blue]\n"
                "Type your messages to chat with the agent.\n"
                "Commands: /help, /tools, /clear, /quit",
                border_style="blue",
            )
        )

        card = self._fetch_agent_card()
        if card is None:
            self.console.print(f"[red]Cannot reach an agent at {self.base_url}. Make sure it's running.[/red]")
            return

        self.console.print(f"[green]Connected to {card.get('name', 'agent')} {card.get('version', '')}[/green]\n")

        try:
            while True:
                user_input = Prompt.ask("\n[bold cyan]You[/bold cyan]")

                if user_input.lower() in ["/quit", "/exit", "quit", "exit"]:
                    break
                elif user_input.lower() == "/help":
                    self._show_help()
                    continue
                elif user_input.lower() == "/tools":
                    self.send_tools = not self.send_tools
                    state = "on" if self.send_tools else "off"
                    self.console.print(f"[yellow]Sending get_weather tool definition: {state}[/yellow]")
                    continue
                elif user_input.lower() == "/clear":
                    self.context_id = None
                    self.console.print("[yellow]Context cleared[/yellow]")
                    continue
                elif user_input.strip() == "":
                    continue

                task = self._send_message(user_input)
                if task:
                    self._display_task(task)

        except KeyboardInterrupt:
            pass
        finally:
            self.console.print("\n[yellow]Goodbye![/yellow]")
            self.client.close()

    def _fetch_agent_card(self) -> dict[str, Any] | None:
        """Fetch the agent card, None if the agent is unreachable."""
        try:
            response = self.client.get(f"{self.base_url}/.well-known/agent-card.json")
        except httpx.HTTPError:
            return None
        return response.json() if response.status_code == 200 else None

    def _build_message(self, text: str) -> Message:
        parts: list[TextPart | DataPart] = [TextPart(text=text)]
        if self.send_tools:
            parts.append(
                DataPart(
                    data={"tools": [WEATHER_TOOL]},
                    metadata={"type": "tool-definitions", "format": "langchain", "count": 1},
                )
            )
        return Message(message_id=cuid(), role="user", parts=parts, context_id=self.context_id)

    def _send_message(self, text: str) -> Task | None:
        """Send a message/send request and return the resulting task."""
        payload = {
            "jsonrpc": "2.0",
            "id": cuid(),
            "method": "message/send",
            "params": {"message": self._build_message(text).to_wire()},
        }

        try:
            self.console.print("[dim]Thinking...[/dim]", end="")
            response = self.client.post(self.base_url + "/", json=payload)
            self.console.print("\r" + " " * 20 + "\r", end="\n")
        except httpx.HTTPError as e:
            self.console.print(f"[red]Connection error: {e}[/red]")
            return None

        body = response.json()
        if "error" in body:
            self.console.print(f"[red]Agent error {body['error']['code']}: {body['error']['message']}[/red]")
            return None

        task = Task.model_validate(body["result"])
        self.context_id = task.context_id
        return task

    def _display_task(self, task: Task) -> None:
        """Display the agent's reply and any requested tool calls."""
        message = task.status.message
        if message is None:
            self.console.print(f"[yellow]Task {task.id} ended in state {task.status.state}[/yellow]")
            return

        text = "\n".join(p.text for p in message.parts if isinstance(p, TextPart)) or "(no text)"
        border = "green" if task.status.state == "completed" else "red"
        self.console.print(
            Panel(Markdown(text), title=f"[bold {border}]Agent ({task.status.state})[/bold {border}]", border_style=border)
        )

        parsed = parse_a2a_message_for_langchain(message)
        if parsed and parsed.tool_calls:
            calls = "\n".join(f"• {tc['name']}({tc['args']}) id={tc.get('id')}" for tc in parsed.tool_calls)
            self.console.print(Panel(calls, title="[magenta]Requested tool calls[/magenta]", border_style="magenta"))

    def _show_help(self) -> None:
        """Show help information."""
        help_text = """
[bold]Available Commands:[/bold]
• /help - Show this help message
• /tools - Toggle sending a sample get_weather tool definition
• /clear - Start a new conversation context
• /quit or /exit - Exit the chat

[bold]Tips:[/bold]
• With /tools on, ask "What's the weather in Paris?" to see a tool call request
        """

        self.console.print(Panel(help_text.strip(), title="[cyan]Help[/cyan]", border_style="cyan"))


def main():
    """Main entry point for the chat CLI."""
    base_url = sys.argv[1] if len(sys.argv) > 1 else "http://localhost:41242"

    chat = ChatCLI(base_url)
    chat.start()


if __name__ == "__main__":
    main()
