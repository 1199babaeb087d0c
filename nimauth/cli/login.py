#!/usr/bin/env python3
"""
nimauth command-line login.

Usage:
    nimauth login [provider]     # Prompt for credentials and store them
    nimauth models [provider]    # List models for stored (or configured) credentials
    nimauth logout [provider]    # Forget stored credentials
"""

import asyncio
import sys
from pathlib import Path
from typing import List, Optional

from tabulate import tabulate

from ..core.config import Config, load_config, load_credentials, save_credentials
from ..oauth import create_oauth_provider, get_oauth_provider, list_oauth_providers
from ..oauth.base import AbortSignal, Credentials, LoginCallbacks, PromptRequest
from ..oauth.errors import OAuthError

DEFAULT_PROVIDER = "nvidia-nim"


class Colors:
    """ANSI color codes for terminal output."""
    CYAN = '\033[96m'
    GREEN = '\033[92m'
    YELLOW = '\033[93m'
    RED = '\033[91m'
    DIM = '\033[2m'
    END = '\033[0m'


def make_terminal_callbacks(signal: AbortSignal) -> LoginCallbacks:
    """Prompt/progress hooks backed by input() and print().

    Ctrl-C or EOF at a prompt sets the abort signal instead of unwinding, so
    the provider reports the cancellation itself.
    """

    async def on_prompt(prompt: PromptRequest) -> str:
        hint = f" {Colors.DIM}[{prompt.placeholder}]{Colors.END}" if prompt.placeholder else ""
        while True:
            try:
                answer = input(f"{Colors.CYAN}{prompt.message}{Colors.END}{hint} ")
            except (KeyboardInterrupt, EOFError):
                print()
                signal.abort()
                return ""
            if answer.strip() or prompt.allow_empty:
                return answer
            print(f"{Colors.YELLOW}A value is required.{Colors.END}")

    def on_progress(message: str) -> None:
        print(f"{Colors.DIM}{message}{Colors.END}")

    return LoginCallbacks(on_prompt=on_prompt, on_progress=on_progress, signal=signal)


async def login_command(provider_id: str, config: Config, callbacks: Optional[LoginCallbacks] = None) -> Credentials:
    """Run the provider login and persist the result."""
    provider = get_oauth_provider(provider_id)
    callbacks = callbacks or make_terminal_callbacks(AbortSignal())
    credentials = await provider.login(callbacks)

    store = load_credentials(config.credentials_file)
    store[provider_id] = credentials
    save_credentials(store, config.credentials_file)
    print(f"{Colors.GREEN}✓{Colors.END} Logged in to {provider.name}")
    return credentials


def resolve_credentials(provider_id: str, config: Config) -> Optional[Credentials]:
    """Stored login first, then an api_key from the config file."""
    stored = load_credentials(config.credentials_file).get(provider_id)
    if stored is not None:
        return stored
    if provider_id in config.providers:
        return config.providers[provider_id].to_credentials()
    return None


async def models_command(provider_id: str, config: Config) -> int:
    """Print the provider's models as a table. Returns the model count."""
    credentials = resolve_credentials(provider_id, config)
    if credentials is None:
        raise OAuthError(f"No credentials for '{provider_id}'. Run `nimauth login {provider_id}` first.")

    provider = create_oauth_provider(provider_id, timeout=config.request_timeout)
    credentials = await provider.refresh_token(credentials)
    models = await provider.scan_models(credentials)

    rows = [(m.id, m.context_window, m.max_tokens, m.base_url) for m in models]
    print(tabulate(rows, headers=["Model", "Context", "Max tokens", "Base URL"], tablefmt="simple"))
    print(f"\n{len(models)} models")
    return len(models)


def logout_command(provider_id: str, config: Config) -> bool:
    """Drop stored credentials. Returns False if none were stored."""
    store = load_credentials(config.credentials_file)
    if store.pop(provider_id, None) is None:
        return False
    save_credentials(store, config.credentials_file)
    return True


def run(argv: Optional[List[str]] = None, config: Optional[Config] = None) -> int:
    """Parse arguments and dispatch. Returns a process exit code."""
    import argparse

    parser = argparse.ArgumentParser(prog="nimauth", description="nimauth - provider credentials")
    parser.add_argument("-c", "--config", help="Path to nimauth.yaml config file")
    sub = parser.add_subparsers(dest="command", required=True)
    for name, help_text in (
        ("login", "Enter and store credentials"),
        ("models", "List available models"),
        ("logout", "Remove stored credentials"),
    ):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument("provider", nargs="?", default=DEFAULT_PROVIDER, choices=list_oauth_providers())

    args = parser.parse_args(argv)

    if config is None:
        config = load_config(Path(args.config)) if args.config else load_config()

    try:
        if args.command == "login":
            asyncio.run(login_command(args.provider, config))
        elif args.command == "models":
            asyncio.run(models_command(args.provider, config))
        elif args.command == "logout":
            if logout_command(args.provider, config):
                print(f"Logged out of {args.provider}")
            else:
                print(f"{Colors.YELLOW}No stored credentials for {args.provider}{Colors.END}")
    except OAuthError as e:
        print(f"{Colors.RED}Error: {e}{Colors.END}", file=sys.stderr)
        return 1
    return 0


def main():
    """Main entry point."""
    sys.exit(run())


if __name__ == "__main__":
    main()
