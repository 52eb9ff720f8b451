"""Command line entry point: stream shared matches of two players to stdout."""

import json
from typing import Annotated

import requests
import typer

from .adapters.pubg_api import PubgApiClient
from .config import load_settings
from .errors import ConfigurationError
from .log import setup_logger
from .protocol import progress_message
from .ratelimit import RateGate
from .service import CorrelationService
from .streaming import ListSink

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Stream the shared matches of two players.",
)


@app.command()
def main(
    player: Annotated[str, typer.Argument(help="Primary player name.")],
    opponent: Annotated[str, typer.Argument(help="Opponent player name.")],
) -> None:
    """Print one NDJSON record per line as each match is processed."""
    try:
        settings = load_settings()
        api_key = settings.require_api_key()
    except ConfigurationError as exn:
        typer.echo(json.dumps({"error": str(exn)}), err=True)
        raise typer.Exit(code=1)

    setup_logger("sharedmatch", settings.log_level)
    sink = ListSink(on_emit=lambda message: typer.echo(json.dumps(message)))
    client = PubgApiClient(
        api_key,
        gate=RateGate(quota=settings.rate_limit, window=settings.rate_window),
        shard=settings.shard,
        session=requests.Session(),
        on_wait=lambda seconds: sink.emit(
            progress_message(f"Rate limit reached. Waiting {seconds:.0f}s...")
        ),
    )
    CorrelationService(client, display_zone=settings.display_zone).run(player, opponent, sink)

    if any("error" in message for message in sink.messages):
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
