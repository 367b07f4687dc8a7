"""Typer CLI commands."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from boomerang.cli.output import (
    print_error,
    print_info,
    print_intent,
    print_reminders,
    print_reply,
)
from boomerang.exceptions import BoomerangError

console = Console()
app = typer.Typer(name="boomerang", help="WhatsApp reminder assistant.")


def _get_settings():
    from boomerang.config.settings import Settings
    from boomerang.logger import setup_logging

    settings = Settings()  # type: ignore[call-arg]
    setup_logging(settings.log_level, settings.log_file)
    return settings


def _get_parser():
    from boomerang.main import build_parser
    return build_parser(_get_settings())


def _get_services():
    from boomerang.main import build_services
    return build_services(_get_settings())


@app.command()
def parse(
    text: str = typer.Argument(..., help="Message text to classify"),
) -> None:
    """Show how a message would be understood."""
    parser = _get_parser()
    intent = asyncio.run(parser.parse(text))
    print_intent(intent)


@app.command()
def message(
    phone: str = typer.Argument(..., help="Sender phone number (E.164)"),
    text: str = typer.Argument(..., help="Message text"),
    thread: Optional[str] = typer.Option(None, "--thread", help="Thread id"),
) -> None:
    """Handle an inbound message as if it arrived from the chat transport."""
    async def _run():
        services = _get_services()
        await services.initialize()
        try:
            reply = await services.handler.handle(phone, text, thread_id=thread)
            if reply:
                print_reply(reply)
            else:
                print_info("No reply.")
        except BoomerangError as exc:
            print_error(str(exc))
            raise typer.Exit(1)
        finally:
            await services.close()

    asyncio.run(_run())


@app.command()
def webhook(
    payload_file: Path = typer.Argument(
        ..., exists=True, dir_okay=False, help="Raw webhook request body"
    ),
    signature: str = typer.Option(
        ..., "--signature", help="X-Hub-Signature-256 or X-Twilio-Signature header"
    ),
    url: str = typer.Option("", "--url", help="Public webhook URL (Twilio signs it)"),
) -> None:
    """Process a webhook delivery from the configured transport."""
    raw = payload_file.read_bytes()

    async def _run():
        services = _get_services()
        await services.initialize()
        try:
            reply = await services.webhooks.receive(raw, signature, url=url)
            if reply:
                print_reply(reply)
            else:
                print_info("No text message in payload.")
        except BoomerangError as exc:
            print_error(str(exc))
            raise typer.Exit(1)
        finally:
            await services.close()

    asyncio.run(_run())


@app.command(name="verify-webhook")
def verify_webhook(
    mode: str = typer.Argument(..., help="hub.mode"),
    token: str = typer.Argument(..., help="hub.verify_token"),
    challenge: str = typer.Argument(..., help="hub.challenge"),
) -> None:
    """Answer the Meta webhook subscription handshake."""
    from boomerang.transport.webhook import verify_subscription

    settings = _get_settings()
    echoed = verify_subscription(mode, token, challenge, settings.meta_verify_token)
    if echoed is None:
        print_error("Verification failed.")
        raise typer.Exit(1)
    console.print(echoed)


@app.command()
def reminders(
    phone: str = typer.Argument(..., help="User phone number"),
    limit: int = typer.Option(50, "--limit", "-n", help="Number of reminders"),
) -> None:
    """List a user's reminders."""
    async def _run():
        services = _get_services()
        await services.initialize()
        try:
            user = await services.store.get_user_by_phone(phone)
            if user is None:
                print_error(f"User not found: {phone}")
                raise typer.Exit(1)
            rows = await services.store.list_reminders(user.id, limit=limit)
            if not rows:
                print_info("No reminders found.")
            else:
                print_reminders(rows)
        finally:
            await services.close()

    asyncio.run(_run())


@app.command()
def cancel(
    reminder_id: str = typer.Argument(..., help="Reminder ID to cancel"),
    phone: str = typer.Option(..., "--phone", help="Owner phone number"),
) -> None:
    """Cancel a pending reminder."""
    async def _run():
        services = _get_services()
        await services.initialize()
        try:
            user = await services.store.get_user_by_phone(phone)
            if user is None:
                print_error(f"User not found: {phone}")
                raise typer.Exit(1)
            if await services.lifecycle.cancel(reminder_id, user.id):
                print_info(f"Reminder {reminder_id} cancelled.")
            else:
                print_error("Reminder not found or already cancelled.")
                raise typer.Exit(1)
        finally:
            await services.close()

    asyncio.run(_run())


@app.command(name="delete-data")
def delete_data(
    phone: str = typer.Argument(..., help="User phone number"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Delete a user with all of their reminders and messages."""
    if not yes and not typer.confirm(f"Delete all data for {phone}?"):
        raise typer.Exit(0)

    async def _run():
        services = _get_services()
        await services.initialize()
        try:
            user = await services.store.get_user_by_phone(phone)
            if user is None:
                print_error(f"User not found: {phone}")
                raise typer.Exit(1)
            for reminder in await services.store.find_pending_reminders(user_id=user.id):
                await services.lifecycle.cancel(reminder.id, user.id)
            await services.store.delete_user(user.id)
            print_info("All user data deleted.")
        finally:
            await services.close()

    asyncio.run(_run())


@app.command()
def worker() -> None:
    """Deliver due reminders until interrupted."""
    async def _run():
        services = _get_services()
        await services.initialize()
        try:
            loaded = await services.start_worker()
            print_info(f"Worker started, {loaded} pending reminder(s) scheduled.")
            await asyncio.Event().wait()
        finally:
            await services.close()

    try:
        asyncio.run(_run())
    except KeyboardInterrupt:
        print_info("Worker stopped.")


@app.command(name="config")
def show_config() -> None:
    """Show current configuration."""
    from boomerang.config.settings import Settings

    try:
        settings = Settings()  # type: ignore[call-arg]
    except Exception as exc:
        print_error(f"Failed to load settings: {exc}")
        raise typer.Exit(1)

    table_data = {
        "Model": settings.openai_model,
        "DB Path": str(settings.db_path),
        "Log Level": settings.log_level,
        "Transport": settings.transport_provider,
        "Confidence Threshold": f"{settings.confidence_threshold:.2f}",
        "Worker Concurrency": str(settings.worker_concurrency),
        "Job Attempts": str(settings.job_max_attempts),
        "Message Retention": f"{settings.message_retention_days} days",
    }

    table = Table(title="Configuration", show_header=False)
    table.add_column("Setting", style="bold cyan")
    table.add_column("Value")
    for k, v in table_data.items():
        table.add_row(k, v)
    console.print(table)
