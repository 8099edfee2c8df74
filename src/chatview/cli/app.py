"""Terminal chat demo using Typer."""
import asyncio

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.live import Live
from rich.markdown import Markdown
from rich.table import Table
from rich.text import Text

from ..chat import ChatEvent, ChatOrchestrator, MessagesChanged, configure_logging
from ..config import ChatConfig, ChatTemperature
from ..llm.models import Message, MessageRole
from ..tools import CurrentDateTimeTool, ToolExecutor
from .providers import get_provider

# Load environment variables
load_dotenv()

# Create Typer app
app = typer.Typer(
    name="chatview",
    help="Chat with hosted LLMs from the terminal",
    no_args_is_help=True,
    add_completion=True,
)

# Console for rich output
console = Console()

DEMO_SYSTEM_PROMPT = (
    "Imagine that you are Isaac Asimov. Start by introducing yourself and asking "
    'the user if they would like to do a short "choose your own" space adventure.'
)


class TurnView:
    """Renders the pending assistant message while a turn is in flight."""

    def __init__(self, console: Console):
        self._console = console
        self._live: Live | None = None

    def on_event(self, event: ChatEvent) -> None:
        if self._live is None or not isinstance(event, MessagesChanged):
            return
        receiving = next((m for m in event.messages if m.is_receiving), None)
        if receiving is not None:
            self._live.update(Markdown(receiving.text) if receiving.text else Text("...", style="dim"))

    async def follow(self, chat: ChatOrchestrator) -> None:
        """Show progress until the current turn finishes, then print its outcome."""
        before = len(chat.messages)
        with Live(Text("...", style="dim"), console=self._console, transient=True) as live:
            self._live = live
            try:
                await chat.wait()
            except (KeyboardInterrupt, asyncio.CancelledError):
                # Under asyncio.run, Ctrl-C arrives as cancellation of the main task
                chat.cancel()
                asyncio.current_task().uncancel()
                self._console.print("[dim]Cancelled.[/dim]\n")
                return
            finally:
                self._live = None

        if chat.error_message:
            self._console.print(f"[red]{chat.error_message}[/red]")
            self._console.print("[dim]Type /retry to try again[/dim]\n")
            return

        for message in chat.messages[max(before - 1, 0):]:
            if message.is_hidden or message.is_error:
                continue
            if message.role == MessageRole.TOOL:
                name = message.tool_call.name if message.tool_call else "tool"
                self._console.print(f"[dim]Tool result ({name}):[/dim]")
                self._console.print(Text(message.text, style="dim"))
            elif message.role == MessageRole.ASSISTANT:
                self._console.print("[bold green]Assistant:[/bold green]")
                self._console.print(Markdown(message.text))
                self._console.print()


@app.command()
def chat(
    system: str | None = typer.Option(
        None,
        "--system",
        "-s",
        help="System prompt (the chat opens with a reply when set)"
    ),
    demo: bool = typer.Option(
        False,
        "--demo",
        help="Use the space adventure system prompt and the date/time tool"
    ),
    stream: bool = typer.Option(
        True,
        "--stream/--no-stream",
        envvar="CHATVIEW_STREAM",
        help="Stream responses as they are generated"
    ),
    provider: str | None = typer.Option(
        None,
        "--provider",
        "-p",
        help="LLM provider: openai, deepseek or anthropic (default: $LLM_PROVIDER)"
    ),
    model: str | None = typer.Option(
        None,
        "--model",
        "-m",
        help="Model name (default: $CHATVIEW_MODEL or the provider default)"
    ),
    temperature: ChatTemperature = typer.Option(
        ChatTemperature.CHATBOT_RESPONSES,
        "--temperature",
        "-t",
        help="Sampling preset"
    ),
    with_time_tool: bool = typer.Option(
        False,
        "--with-time-tool",
        help="Let the model look up the current date and time"
    ),
    show_tool_results: bool = typer.Option(
        False,
        "--show-tool-results",
        envvar="CHATVIEW_SHOW_TOOL_RESULTS",
        help="Print tool results alongside assistant replies"
    ),
    max_tool_iterations: int = typer.Option(
        10,
        "--max-tool-iterations",
        envvar="CHATVIEW_MAX_TOOL_ITERATIONS",
        help="Tool rounds allowed per turn"
    ),
    log_format: str = typer.Option(
        "console",
        "--log-format",
        envvar="CHATVIEW_LOG_FORMAT",
        help="Log output format: console or json"
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show turn and tool logs"
    )
):
    """Interactive chat session."""
    try:
        configure_logging(log_format, level=20 if verbose else 30)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)

    if demo:
        system = system or DEMO_SYSTEM_PROMPT
        with_time_tool = True

    async def _chat():
        executor = ToolExecutor(
            [CurrentDateTimeTool()] if with_time_tool else [],
            hide_results=not show_tool_results
        )
        llm = get_provider(
            provider=provider,
            model=model,
            temperature=temperature,
            tools=executor.specs(),
            console=console
        )
        session = ChatOrchestrator(
            llm,
            messages=[Message.system(system)] if system else [],
            tools=executor,
            config=ChatConfig(
                stream=stream,
                max_tool_iterations=max_tool_iterations,
                hide_tool_results=not show_tool_results
            ),
        )
        view = TurnView(console)
        unsubscribe = session.subscribe(view.on_event)

        console.print("[bold cyan]chatview[/bold cyan]")
        console.print("[dim]Commands: /retry, /reset, /quit[/dim]\n")

        try:
            if system:
                session.start()
                await view.follow(session)

            while True:
                try:
                    user_input = console.input("[bold yellow]You:[/bold yellow] ")
                except (KeyboardInterrupt, EOFError):
                    console.print("\n[dim]Goodbye![/dim]")
                    break

                command = user_input.strip().lower()
                if command in ("/quit", "/exit", "/q"):
                    console.print("[dim]Goodbye![/dim]")
                    break
                if command == "/reset":
                    session.reset()
                    console.print("[dim]Conversation cleared.[/dim]\n")
                    continue
                if command == "/retry":
                    if session.retry() is None:
                        console.print("[dim]Nothing to retry.[/dim]\n")
                        continue
                elif session.send(user_input) is None:
                    continue

                await view.follow(session)
        finally:
            unsubscribe()
            await llm.close()

    asyncio.run(_chat())


@app.command()
def presets():
    """List the sampling presets."""
    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Preset", style="cyan")
    table.add_column("Temperature", style="green", width=11)
    table.add_column("Top P", style="green", width=6)
    table.add_column("Description")

    for preset in ChatTemperature:
        table.add_row(
            preset.value,
            f"{preset.temperature:.1f}",
            f"{preset.top_p:.1f}",
            preset.description
        )

    console.print(table)


def main():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
