"""Command line front end for the Salesforce OAuth2 helper.

Connected App credentials are read from the environment (or a ``.env`` file)
and can be overridden with the global options:

    salesforce-oauth2 --client-id XXX authorize-url --scope "api refresh_token"
    salesforce-oauth2 authenticate --code aPrx...
    salesforce-oauth2 refresh --refresh-token 5Aep...
    salesforce-oauth2 introspect --token 00D... --hint refresh_token
"""

from __future__ import annotations

import asyncio
import enum
from typing import Annotated, Any

import msgspec
import typer
from dotenv import load_dotenv

from .client import SalesforceOAuth2
from .config import OAuth2Settings
from .errors import APIError, SalesforceOAuth2Error
from .logging_config import get_logger, setup_logging

load_dotenv()

logger = get_logger("cli")

app = typer.Typer(
    name="salesforce-oauth2",
    help="Salesforce OAuth2 Web Server Flow helper.",
    add_completion=False,
    no_args_is_help=True,
)


class TokenTypeHint(str, enum.Enum):
    ACCESS_TOKEN = "access_token"
    REFRESH_TOKEN = "refresh_token"


def _build_client(settings: OAuth2Settings) -> SalesforceOAuth2:
    return SalesforceOAuth2(settings)


def _dump(payload: dict[str, Any]) -> str:
    return msgspec.json.format(msgspec.json.encode(payload), indent=2).decode()


async def _call(settings: OAuth2Settings, operation: str, params: dict[str, Any]) -> dict[str, Any]:
    async with _build_client(settings) as sf:
        return await getattr(sf, operation)(**params)


def _execute(ctx: typer.Context, operation: str, **params: Any) -> None:
    """Run one client operation and print its payload as JSON."""
    settings: OAuth2Settings = ctx.obj
    try:
        payload = asyncio.run(_call(settings, operation, params))
    except SalesforceOAuth2Error as e:
        logger.debug("%s failed: %r", operation, e)
        typer.echo(f"Error: {e}", err=True)
        if isinstance(e, APIError):
            typer.echo(_dump(e.payload), err=True)
        raise typer.Exit(code=1) from e
    typer.echo(_dump(payload))


@app.callback()
def main(
    ctx: typer.Context,
    login_url: Annotated[
        str | None,
        typer.Option("--login-url", help="Login, community or sandbox URL"),
    ] = None,
    client_id: Annotated[
        str | None,
        typer.Option("--client-id", help="Connected App consumer key"),
    ] = None,
    client_secret: Annotated[
        str | None,
        typer.Option("--client-secret", help="Connected App consumer secret"),
    ] = None,
    redirect_uri: Annotated[
        str | None,
        typer.Option("--redirect-uri", help="Connected App callback URL"),
    ] = None,
    log_level: Annotated[
        str,
        typer.Option("--log-level", envvar="LOG_LEVEL", help="Logging level"),
    ] = "WARNING",
) -> None:
    """Salesforce OAuth2 helper."""
    setup_logging(log_level)

    settings = OAuth2Settings.from_env()
    overrides = {
        "login_url": login_url.rstrip("/") if login_url else None,
        "client_id": client_id,
        "client_secret": client_secret,
        "redirect_uri": redirect_uri,
    }
    ctx.obj = msgspec.structs.replace(
        settings, **{key: value for key, value in overrides.items() if value}
    )


@app.command("authorize-url")
def authorize_url(
    ctx: typer.Context,
    scope: Annotated[
        str | None,
        typer.Option("--scope", "-s", help="Space separated scopes, e.g. 'api refresh_token'"),
    ] = None,
    state: Annotated[
        str | None,
        typer.Option("--state", help="Opaque value echoed back to the callback"),
    ] = None,
) -> None:
    """Print the URL the user must visit to approve the app."""
    sf = _build_client(ctx.obj)
    typer.echo(sf.get_authorization_url(scope=scope, state=state))


@app.command()
def authenticate(
    ctx: typer.Context,
    code: Annotated[str, typer.Option("--code", "-c", help="Authorization code")],
) -> None:
    """Exchange an authorization code for tokens."""
    _execute(ctx, "authenticate", code=code)


@app.command()
def password(
    ctx: typer.Context,
    username: Annotated[str, typer.Option("--username", "-u", help="Salesforce username")],
    password: Annotated[
        str,
        typer.Option(
            "--password",
            prompt=True,
            hide_input=True,
            help="Password, with the security token appended if required",
        ),
    ],
) -> None:
    """Exchange a username and password for tokens."""
    _execute(ctx, "password", username=username, password=password)


@app.command()
def refresh(
    ctx: typer.Context,
    refresh_token: Annotated[
        str, typer.Option("--refresh-token", "-r", help="Refresh token")
    ],
) -> None:
    """Renew an access token."""
    _execute(ctx, "refresh", refresh_token=refresh_token)


@app.command()
def introspect(
    ctx: typer.Context,
    token: Annotated[str, typer.Option("--token", "-t", help="Token to check")],
    hint: Annotated[
        TokenTypeHint,
        typer.Option("--hint", help="Kind of token being checked"),
    ] = TokenTypeHint.ACCESS_TOKEN,
) -> None:
    """Check whether an access or refresh token is still valid."""
    if hint is TokenTypeHint.REFRESH_TOKEN:
        _execute(ctx, "is_refresh_token_valid", token=token)
    else:
        _execute(ctx, "is_access_token_valid", token=token)


if __name__ == "__main__":
    app()
