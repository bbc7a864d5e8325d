"""
Main CLI entry point for the annotations mapper.

Single Responsibility: CLI commands for running the service and for mapping
messages by hand.
"""

import asyncio
import json
import sys
from typing import List, Optional

import click

from .. import __version__
from ..config.settings import APP_SYSTEM_CODE, MapperSettings, compile_whitelist
from ..core.mapper import (
    CONTENT_TYPE_HEADER,
    ORIGIN_SYSTEM_HEADER,
    TRANSACTION_ID_HEADER,
    AnnotationMapperService,
    MappingOutcome,
)
from ..core.ports import MessageProducerPort
from ..core.predicates import PREDICATES
from ..schemas.models import RawMessage
from ..shared_lib.utils.logging import configure_logging


class CollectingProducer(MessageProducerPort):
    """Producer that keeps outbound messages in memory instead of publishing."""

    def __init__(self):
        self.messages: List[RawMessage] = []

    async def connect(self) -> None:
        return None

    async def send_message(self, message: RawMessage) -> None:
        self.messages.append(message)

    async def connectivity_check(self) -> None:
        return None

    async def close(self) -> None:
        return None


@click.group()
@click.version_option(version=__version__, prog_name="annotations-mapper")
def cli():
    """PAC Annotations Mapper - maps PAC annotations onto concept annotations."""
    pass


@cli.command()
@click.option("--port", "-p", type=int, default=None, help="Port to listen on (default: APP_PORT)")
@click.option("--host", "-h", default="0.0.0.0", help="Host to bind the service to")
def serve(port: Optional[int], host: str):
    """Run the mapper: consume, map, publish and serve the health endpoints.

    Examples:
        annotations-mapper serve
        annotations-mapper serve -p 8081
    """
    import uvicorn

    from ..main import create_app

    settings = MapperSettings()
    if port is not None:
        settings.app_port = port

    configure_logging(APP_SYSTEM_CODE, settings.log_level)
    app = create_app(settings)
    uvicorn.run(
        app,
        host=host,
        port=settings.app_port,
        log_level=settings.log_level.lower(),
    )


@cli.command("map")
@click.argument("input_file", type=click.File("r"), default="-")
@click.option(
    "--origin-system-id",
    "-s",
    required=True,
    help="Origin-System-Id header of the inbound message",
)
@click.option("--transaction-id", "-t", default=None, help="X-Request-Id header")
@click.option("--content-type", default="application/json", help="Content-Type header")
@click.option(
    "--whitelist",
    "-w",
    default=None,
    help="Whitelist regex (default: WHITELIST_REGEX)",
)
def map_message(
    input_file,
    origin_system_id: str,
    transaction_id: Optional[str],
    content_type: str,
    whitelist: Optional[str],
):
    """Map one metadata publish event and print the outbound message.

    Nothing is published; the message that would be sent is written to
    stdout as JSON. Exits non-zero when no message would be sent.

    Examples:
        annotations-mapper map -s http://cmdb.ft.com/systems/pac event.json
        cat event.json | annotations-mapper map -s http://cmdb.ft.com/systems/pac -t tid_1
    """
    settings = MapperSettings()
    configure_logging(APP_SYSTEM_CODE, settings.log_level)

    pattern, whitelist_error = compile_whitelist(
        whitelist if whitelist is not None else settings.whitelist_regex
    )
    if whitelist_error is not None:
        click.echo(f"Error: {whitelist_error.message}", err=True)
        sys.exit(2)

    headers = {ORIGIN_SYSTEM_HEADER: origin_system_id, CONTENT_TYPE_HEADER: content_type}
    if transaction_id:
        headers[TRANSACTION_ID_HEADER] = transaction_id

    producer = CollectingProducer()
    mapper = AnnotationMapperService(pattern, producer)
    outcome = asyncio.run(
        mapper.handle_message(RawMessage(headers=headers, body=input_file.read()))
    )

    if outcome is not MappingOutcome.DELIVERED:
        click.echo(f"No message produced: {outcome.value}", err=True)
        sys.exit(1)

    outbound = producer.messages[0]
    click.echo(
        json.dumps(
            {"headers": outbound.headers, "body": json.loads(outbound.body)},
            indent=2,
        )
    )


@cli.command()
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["json", "table"]),
    default="table",
    help="Output format",
)
def predicates(output_format: str):
    """List the supported predicates and their short names."""
    if output_format == "json":
        click.echo(json.dumps(dict(PREDICATES), indent=2))
        return

    width = max(len(uri) for uri in PREDICATES)
    for uri, short_name in PREDICATES.items():
        click.echo(f"{uri.ljust(width)}  {short_name}")


if __name__ == "__main__":
    cli()
