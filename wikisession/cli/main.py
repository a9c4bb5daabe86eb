"""wikisession CLI - login, logout and session status."""
import asyncio
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

app = typer.Typer(
    name="wikisession",
    help="MediaWiki login session manager",
    add_completion=False
)
console = Console()


# State dir: ~/.config/wikisession/
def get_state_dir() -> Path:
    state_dir = Path.home() / ".config" / "wikisession"
    state_dir.mkdir(parents=True, exist_ok=True)
    return state_dir


def get_cookie_path() -> Path:
    return get_state_dir() / "cookies.pickle"


def run_async(coro):
    """Run async function."""
    return asyncio.run(coro)


def build_coordinator(language: Optional[str] = None):
    from wikisession import APIConfig, SessionCoordinator, SQLiteCredentialStore
    
    config = APIConfig.for_language(language) if language else APIConfig.default()
    store = SQLiteCredentialStore("session", get_state_dir())
    return SessionCoordinator(config, credential_store=store)


@app.command()
def login(
    username: str = typer.Option(None, "--username", "-u", help="Account username"),
    password: str = typer.Option(None, "--password", "-p", help="Account password"),
    second_factor: str = typer.Option(None, "--otp", help="Two-factor code"),
    language: str = typer.Option(None, "--language", "-l", help="Language edition (default: en)"),
):
    """Login and save credentials."""
    from wikisession import AccountLoginError, WikiSessionError
    
    if not username:
        username = typer.prompt("Username")
    if not password:
        password = typer.prompt("Password", hide_input=True)
    
    async def do_login():
        async with build_coordinator(language) as session:
            session.cookie_store.load(get_cookie_path())
            captcha_id = captcha_answer = None
            otp = second_factor
            
            while True:
                try:
                    result = await session.login(
                        username,
                        password,
                        second_factor_token=otp,
                        captcha_id=captcha_id,
                        captcha_answer=captcha_answer
                    )
                    break
                except AccountLoginError as e:
                    if e.needs_second_factor and not otp:
                        otp = typer.prompt("Two-factor code")
                        continue
                    if e.needs_captcha and e.captcha is not None:
                        console.print(f"Captcha: {e.captcha.url}")
                        captcha_id = e.captcha.captcha_id
                        captcha_answer = typer.prompt("Captcha answer")
                        continue
                    console.print(f"[red]Login failed ({e.reason.value}): {e}[/red]")
                    raise typer.Exit(1)
                except WikiSessionError as e:
                    console.print(f"[red]Login failed: {e}[/red]")
                    raise typer.Exit(1)
            
            session.cookie_store.save(get_cookie_path())
            console.print(f"[green]Logged in as {result.username}[/green]")
    
    run_async(do_login())


@app.command()
def logout():
    """Logout and forget saved credentials."""
    async def do_logout():
        async with build_coordinator() as session:
            session.cookie_store.load(get_cookie_path())
            await session.logout()
            session.cookie_store.save(get_cookie_path())
    
    run_async(do_logout())
    console.print("[green]Logged out successfully[/green]")


@app.command()
def whoami():
    """Check the saved session, logging in again if it expired."""
    from wikisession import AlreadyLoggedIn, MissingCredentialsError, WikiSessionError
    
    async def do_whoami():
        async with build_coordinator() as session:
            session.cookie_store.load(get_cookie_path())
            try:
                result = await session.login_with_saved_credentials()
            except MissingCredentialsError:
                console.print("[yellow]Not logged in[/yellow]")
                raise typer.Exit(1)
            except WikiSessionError as e:
                console.print(f"[red]Session check failed: {e}[/red]")
                raise typer.Exit(1)
            
            session.cookie_store.save(get_cookie_path())
            how = "existing session" if isinstance(result, AlreadyLoggedIn) else "logged in again"
            console.print(f"[green]{result.username}[/green] ({how}) on {session.login_site()}")
    
    run_async(do_whoami())


@app.command()
def status():
    """Show saved credential status without contacting the server."""
    from wikisession import SQLiteCredentialStore
    
    with SQLiteCredentialStore("session", get_state_dir()) as store:
        credentials = store.load()
    
    table = Table(title="Saved session")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Credentials", "yes" if credentials.is_present else "no")
    table.add_row("Username", getattr(credentials, 'username', None) or "-")
    table.add_row("Host", credentials.host or "-")
    table.add_row("Cookies file", str(get_cookie_path()) if get_cookie_path().exists() else "-")
    console.print(table)


def main():
    app()


if __name__ == "__main__":
    main()
