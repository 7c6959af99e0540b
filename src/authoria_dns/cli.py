"""
Command-line interface for the AuthoriaDNS client.

Usage:
    authoria-dns --instance dns.example.com new example.com
    authoria-dns --instance dns.example.com status <id>
    authoria-dns --instance dns.example.com bulk <id> <id> ...
"""

from __future__ import annotations

import logging
import sys
from typing import Any, NoReturn

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from authoria_dns.client import (
    DEFAULT_TTL,
    AuthoriaDNS,
    ServerError,
    VerificationRequest,
    VerificationState,
)
from authoria_dns.transport import AuthoriaDNSError


console = Console()

STATE_STYLES = {
    VerificationState.VERIFIED: "[bold green]VERIFIED[/]",
    VerificationState.PENDING: "[bold yellow]PENDING[/]",
    VerificationState.EXPIRED: "[bold red]EXPIRED[/]",
    VerificationState.NOT_FOUND: "[bold red]NOT_FOUND[/]",
    VerificationState.UNKNOWN: "[dim]UNKNOWN[/]",
}


def format_state(value: Any) -> str:
    """Render a raw status value with its color."""
    return STATE_STYLES[VerificationState.parse(value)]


def format_request(request: VerificationRequest) -> None:
    """Print a new verification request."""
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Field", style="dim")
    table.add_column("Value")

    table.add_row("ID", request.id)
    table.add_row("TXT record", f"[bold]{escape(request.token)}[/]")

    console.print(Panel(table, title="Verification Request", border_style="blue"))
    console.print(f"\n{escape(request.instructions)}")


def format_status(record: dict[str, Any]) -> None:
    """Print the status of a single verification request."""
    verified = bool(record.get("verified"))

    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Field", style="dim")
    table.add_column("Value")

    table.add_row("ID", str(record.get("id", "")))
    table.add_row("Domain", str(record.get("domain", "")))
    table.add_row("Status", format_state(record.get("status")))
    table.add_row("Verified", "[green]Yes[/]" if verified else "[red]No[/]")

    console.print(
        Panel(
            table,
            title="Verification Status",
            border_style="green" if verified else "yellow",
        )
    )


def format_bulk(records: list[dict[str, Any]]) -> None:
    """Print the status of several verification requests."""
    table = Table(title="Verification Status")
    table.add_column("ID")
    table.add_column("Domain")
    table.add_column("Status")
    table.add_column("Verified")

    for record in records:
        table.add_row(
            str(record.get("id", "")),
            str(record.get("domain", "")),
            format_state(record.get("status")),
            "[green]Yes[/]" if record.get("verified") else "[red]No[/]",
        )

    console.print(table)


def fail(error: Exception, json_output: bool) -> NoReturn:
    """Print an error and exit with code 2."""
    if json_output:
        console.print_json(data={"error": str(error)})
    else:
        console.print(f"[red]Error:[/] {escape(str(error))}")
    sys.exit(2)


def check_reply(reply: Any, expected: type, json_output: bool) -> None:
    """Fail on error replies and replies of an unexpected shape."""
    if isinstance(reply, dict) and reply.get("error"):
        fail(ServerError(str(reply["error"])), json_output)
    if not isinstance(reply, expected):
        fail(ServerError(f"Unexpected response from instance: {reply!r}"), json_output)


def configure_logging(verbose: bool) -> None:
    """Send the client's log records to stderr through rich."""
    logger = logging.getLogger("authoria_dns")
    logger.handlers = [RichHandler(console=Console(stderr=True), show_path=False)]
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


def get_client(obj: dict[str, Any]) -> AuthoriaDNS:
    """Connect to the instance on first use.

    Connecting performs the instance handshake, so it is deferred until a
    command actually runs.
    """
    if "client" not in obj:
        try:
            obj["client"] = AuthoriaDNS(obj["instance"], verify_ssl=obj["verify_ssl"])
        except AuthoriaDNSError as e:
            fail(e, obj["json_output"])
    return obj["client"]


@click.group()
@click.option(
    "--instance",
    required=True,
    help="URL of the AuthoriaDNS instance",
)
@click.option(
    "--no-ssl-verify",
    is_flag=True,
    help="Disable SSL certificate verification",
)
@click.option(
    "--json-output",
    is_flag=True,
    help="Output result as JSON",
)
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    help="Log HTTP requests",
)
@click.version_option(package_name="authoria-dns")
@click.pass_context
def main(
    ctx: click.Context,
    instance: str,
    no_ssl_verify: bool,
    json_output: bool,
    verbose: bool,
) -> None:
    """Request and check DNS TXT domain verifications on an AuthoriaDNS instance."""
    configure_logging(verbose)

    ctx.ensure_object(dict)
    ctx.obj["instance"] = instance
    ctx.obj["verify_ssl"] = not no_ssl_verify
    ctx.obj["json_output"] = json_output


@main.command()
@click.argument("domain")
@click.option(
    "--ttl",
    type=int,
    default=DEFAULT_TTL,
    show_default=True,
    help="Lifetime of the verification request in seconds",
)
@click.pass_obj
def new(obj: dict[str, Any], domain: str, ttl: int) -> None:
    """Create a verification request for DOMAIN."""
    client = get_client(obj)
    try:
        request = client.create_verification(domain, ttl=ttl)
    except AuthoriaDNSError as e:
        fail(e, obj["json_output"])

    if obj["json_output"]:
        console.print_json(data=request.to_dict())
    else:
        format_request(request)


@main.command()
@click.argument("request_id")
@click.pass_obj
def status(obj: dict[str, Any], request_id: str) -> None:
    """Show the status of verification request REQUEST_ID.

    Exits with 0 when the domain is verified, 1 otherwise.
    """
    client = get_client(obj)
    try:
        record = client.get_verification_status(request_id)
    except AuthoriaDNSError as e:
        fail(e, obj["json_output"])

    check_reply(record, dict, obj["json_output"])

    if obj["json_output"]:
        console.print_json(data=record)
    else:
        format_status(record)

    sys.exit(0 if record.get("verified") else 1)


@main.command()
@click.argument("request_ids", nargs=-1, required=True)
@click.pass_obj
def bulk(obj: dict[str, Any], request_ids: tuple[str, ...]) -> None:
    """Show the status of several verification requests.

    Exits with 0 when every domain is verified, 1 otherwise.
    """
    client = get_client(obj)
    try:
        records = client.bulk_get_verification_status(request_ids)
    except AuthoriaDNSError as e:
        fail(e, obj["json_output"])

    check_reply(records, list, obj["json_output"])
    for record in records:
        check_reply(record, dict, obj["json_output"])

    if obj["json_output"]:
        console.print_json(data=records)
    else:
        format_bulk(records)

    sys.exit(0 if records and all(r.get("verified") for r in records) else 1)


if __name__ == "__main__":
    main()
