"""
CLI for the VDL → BZE claim.

Secrets are always read from a hidden prompt, never from arguments, so they
do not end up in shell history or process listings.
"""

import asyncio
import base64
import binascii
import logging
import sys
from typing import Optional

import structlog
import typer
from dotenv import load_dotenv

from . import __version__
from .api import ClaimApiClient, ClaimApiConfig
from .config import Settings, get_settings
from .credentials import Credential, MnemonicCredential, PrivateKeyCredential
from .errors import ClaimError
from .flow import ClaimSession, ClaimStep
from .status import StatusView
from .verify import verify_adr36_signature

app = typer.Typer(
    name="vdl-claim",
    help="Claim BZE for a Vidulum (VDL) address",
    add_completion=False,
)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=settings.log_level.upper())
    renderer = structlog.processors.JSONRenderer() if settings.log_json else structlog.dev.ConsoleRenderer()
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
    )


def _api_client(settings: Settings) -> ClaimApiClient:
    return ClaimApiClient(ClaimApiConfig(base_url=settings.api_url, timeout=settings.api_timeout))


def _read_credential(use_mnemonic: bool) -> Credential:
    if use_mnemonic:
        phrase = typer.prompt("Mnemonic (12 or 24 words)", hide_input=True)
        return MnemonicCredential.from_phrase(phrase)
    key_hex = typer.prompt("Private key (64-character hex)", hide_input=True)
    return PrivateKeyCredential(key_hex=key_hex)


def _run(coro) -> None:
    try:
        asyncio.run(coro)
    except ClaimError as e:
        typer.echo(f"Error: {e.user_message}", err=True)
        raise typer.Exit(1)


@app.command()
def address(
    mnemonic: bool = typer.Option(False, "--mnemonic", "-m", help="Read a mnemonic instead of a private key"),
) -> None:
    """
    Derive the VDL address for a credential and show its claim amount.
    """
    settings = get_settings()
    credential = _read_credential(mnemonic)

    async def _address() -> None:
        async with _api_client(settings) as api:
            session = ClaimSession(api, settings)
            key_material = await session.connect(credential)
            typer.echo(f"Vidulum Address: {key_material.address}")
            typer.echo(f"Public Key: {key_material.public_key_b64}")
            display = await session.confirm_address()
            typer.echo(f"Claim Amount: {display}")

    _run(_address())


@app.command()
def claim(
    bze_address: str = typer.Option(..., "--bze-address", "-b", help="BeeZee address to receive the claim"),
    mnemonic: bool = typer.Option(False, "--mnemonic", "-m", help="Read a mnemonic instead of a private key"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Sign and verify locally without submitting"),
) -> None:
    """
    Sign a claim binding your VDL address to a BZE address and submit it.

    Example:
        vdl-claim claim --bze-address bze1...
    """
    settings = get_settings()
    credential = _read_credential(mnemonic)

    async def _claim() -> None:
        async with _api_client(settings) as api:
            session = ClaimSession(api, settings)
            key_material = await session.connect(credential)
            typer.echo(f"Vidulum Address: {key_material.address}")

            display = await session.confirm_address()
            typer.echo(f"Claim Amount: {display}")
            if session.step is ClaimStep.NO_FUNDS:
                raise typer.Exit(1)

            session.set_destination(bze_address)
            signed = await session.sign()
            typer.echo("Signature verified locally.")

            if dry_run:
                typer.echo("\nDry run: claim not submitted.")
                typer.echo(f"  Public Key: {key_material.public_key_b64}")
                typer.echo(f"  Signature: {signed.signature}")
                return

            receipt = await session.submit()
            typer.echo("\nGood Claim! Your claim has been submitted. Save this:")
            typer.echo(f"  Vidulum Address (VDL): {receipt.source_address}")
            typer.echo(f"  BeeZee Address (BZE): {receipt.dest_address}")
            typer.echo(f"  Signature (Proof of ownership): {receipt.signature}")
            typer.echo("\nImportant: Save this information securely. It cannot be recovered later.")

    _run(_claim())


@app.command()
def verify(
    vdl_address: str = typer.Argument(..., help="Signer VDL address"),
    bze_address: str = typer.Argument(..., help="BZE address that was signed"),
    public_key: str = typer.Argument(..., help="Signer public key (base64)"),
    signature: str = typer.Argument(..., help="Signature (base64)"),
) -> None:
    """
    Verify a claim signature locally (no network).
    """
    settings = get_settings()
    try:
        pubkey_bytes = base64.b64decode(public_key, validate=True)
    except (binascii.Error, ValueError):
        typer.echo("✗ Public key is not valid base64", err=True)
        raise typer.Exit(1)

    if verify_adr36_signature(settings.source_prefix, vdl_address, bze_address, pubkey_bytes, signature):
        typer.echo("✓ Signature is valid")
    else:
        typer.echo("✗ Signature is NOT valid", err=True)
        raise typer.Exit(1)


@app.command()
def status(
    vdl_address: str = typer.Argument(..., help="VDL address to check"),
) -> None:
    """
    Show the claim status of a VDL address.
    """
    settings = get_settings()

    async def _status() -> None:
        async with _api_client(settings) as api:
            session = ClaimSession(api, settings)
            view = StatusView.from_status(await session.fetch_status(vdl_address))

        typer.echo(f"VDL Address: {view.source_address}")
        typer.echo(f"BZE Address: {view.dest_address or '-'}")
        typer.echo(f"VDL Amount: {view.amount if view.amount is not None else '-'}")
        typer.echo(f"State: {view.state.value}")
        for step in view.steps:
            mark = "✓" if step.done else "…"
            line = f"  {mark} {step.label}"
            if step.detail:
                line += f": {step.detail}"
            typer.echo(line)

    _run(_status())


@app.command()
def version() -> None:
    """Show the version."""
    typer.echo(f"vdl-claim v{__version__}")


def main(argv: Optional[list[str]] = None) -> None:
    """Entry point."""
    load_dotenv()
    configure_logging(get_settings())
    app(args=argv)


if __name__ == "__main__":
    main()
