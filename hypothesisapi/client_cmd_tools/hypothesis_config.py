"""``hypothesis-config``: save the credentials used by ``hypothesis`` and :meth:`Api.from_env`."""
import argparse
import logging
import os
import sys
from typing import Sequence
from rich.console import Console
from rich.markup import escape
from rich.prompt import Confirm, Prompt
from rich.table import Table
from hypothesisapi import configs
from hypothesisapi.entities.account import format_account_id
from hypothesisapi.utils.logging_utils import load_cmdline_logging_config

console = Console(highlight=False)
_LOGGER = logging.getLogger(__name__)

DEVELOPER_PAGE = 'https://hypothes.is/account/developer'


def _mask(api_key: str) -> str:
    if len(api_key) <= 6:
        return '*' * len(api_key)
    return f"{api_key[:3]}...{api_key[-3:]}"


def save_credentials(username: str | None, api_key: str | None) -> None:
    """Save the username and/or the API key. None values are left untouched."""
    if username is not None:
        configs.set_value(configs.USERNAME_KEY, username)
        console.print(f"[green]Username saved, account {format_account_id(username)}[/green]")
    if api_key is not None:
        configs.set_value(configs.APIKEY_KEY, api_key)
        console.print(f"[green]API key {_mask(api_key)} saved[/green]")


def save_default_url(url: str) -> bool:
    if not url.startswith(('http://', 'https://')):
        console.print(f"[red]{escape(url)} is not a URL: it must start with http:// or https://[/red]")
        return False
    configs.set_value(configs.APIURL_KEY, url.rstrip('/'))
    console.print(f"[green]Default API URL set to {escape(url)}[/green]")
    return True


def ask_credentials() -> None:
    """Ask for the username and API key together, since one is useless without the other."""
    console.print(f"Generate a personal API key at {DEVELOPER_PAGE}")
    current = configs.get_value(configs.USERNAME_KEY)
    if current is None:
        username = Prompt.ask('Hypothesis username') or ''
    else:
        username = Prompt.ask('Hypothesis username', default=current) or ''
    api_key = Prompt.ask('API key', password=True) or ''
    if username.strip() == '' or api_key.strip() == '':
        console.print("[yellow]Username and API key are both required. Nothing saved.[/yellow]")
        return
    save_credentials(username.strip(), api_key.strip())


def ask_default_url() -> None:
    url = Prompt.ask('Default API URL (empty to keep the current one)',
                     default='', show_default=False).strip()
    if url:
        save_default_url(url)


def show_configuration() -> None:
    """Print every setting with where it comes from. Environment variables take precedence."""
    saved = configs.read_config()
    table = Table('Setting', 'Value', 'Source')
    for key, variable in configs.ENV_VARS.items():
        value = os.getenv(variable)
        source = f'${variable}'
        if value is None:
            value, source = saved.get(key), 'config file'
        if value is None:
            continue
        if key == configs.APIKEY_KEY:
            value = _mask(value)
        table.add_row(key, escape(value), source)

    if table.row_count == 0:
        console.print("No configuration found.")
        return
    console.print(table)
    username = configs.get_value(configs.USERNAME_KEY)
    if username is not None:
        console.print(f"Account: {format_account_id(username)}")


def clear_configuration() -> None:
    if Confirm.ask(f'Remove {configs.CONFIG_FILE}?', default=False):
        configs.clear_all_configurations()
        console.print("[green]Configuration cleared[/green]")


def check_connection() -> bool:
    """Fetch the profile and check that the API key belongs to the configured username."""
    from hypothesisapi.api.client import Api
    from hypothesisapi.exceptions import HypothesisException

    try:
        with Api.from_env() as api:
            profile = api.profile.get_user()
    except HypothesisException as e:
        console.print(f"[red]Connection failed: {escape(str(e))}[/red]")
        return False

    if profile.userid is None:
        console.print("[yellow]Connected, but the API key was not accepted.[/yellow]")
        return False
    if profile.userid != api.user:
        console.print(f"[yellow]The API key belongs to {profile.userid}, not to {api.user}.[/yellow]")
        return False
    console.print(f"[green]Authenticated as {profile.userid}[/green]")
    return True


_ACTIONS = {
    '1': ('Set username and API key', ask_credentials),
    '2': ('Set the default API URL', ask_default_url),
    '3': ('Show the configuration', show_configuration),
    '4': ('Check the connection', check_connection),
    '5': ('Clear the configuration', clear_configuration),
}


def interactive_mode() -> None:
    if configs.get_value(configs.USERNAME_KEY) is None or configs.get_value(configs.APIKEY_KEY) is None:
        ask_credentials()

    while True:
        console.print()
        for choice, (label, _) in _ACTIONS.items():
            console.print(f" [cyan]({choice})[/cyan] {label}")
        console.print(" [cyan](q)[/cyan] Quit")
        choice = Prompt.ask('Action', choices=[*_ACTIONS, 'q'], show_choices=False)
        if choice == 'q':
            break
        _ACTIONS[choice][1]()


def main(argv: Sequence[str] | None = None):
    load_cmdline_logging_config()
    parser = argparse.ArgumentParser(
        prog='hypothesis-config',
        description='Save the credentials used by the hypothesis command',
        epilog="""
Environment variables ($HYPOTHESIS_NAME, $HYPOTHESIS_KEY, $HYPOTHESIS_API_URL)
take precedence over the saved values.
Without arguments, starts the interactive mode.
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument('--username', type=str, help='Hypothesis username')
    parser.add_argument('--api-key', type=str, help=f'Personal API key, from {DEVELOPER_PAGE}')
    parser.add_argument('--default-url', '--url', type=str, help='Base URL of the API')
    parser.add_argument('--show', action='store_true', help='Show the configuration')
    parser.add_argument('--check', action='store_true',
                        help='Check that the API key belongs to the username')
    parser.add_argument('-i', '--interactive', action='store_true', help='Interactive mode')
    args = parser.parse_args(argv)

    if args.default_url is not None and not save_default_url(args.default_url):
        sys.exit(1)
    save_credentials(args.username, args.api_key)
    if args.show:
        show_configuration()
    if args.check and not check_connection():
        sys.exit(1)

    no_action = (args.username is None and args.api_key is None and args.default_url is None
                 and not args.show and not args.check)
    if no_action or args.interactive:
        interactive_mode()


if __name__ == "__main__":
    main()
