"""CLI entrypoint for pointledger."""

import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler

from . import __version__
from .config import HOME_ENVVAR, default_home
from .locking import home_lock

CALLER_ENVVAR = "POINTLEDGER_CALLER"


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _home(ctx: click.Context) -> Path:
    return ctx.obj["home"]


def _caller(ctx: click.Context) -> str:
    caller = ctx.obj.get("caller")
    if not caller:
        raise click.UsageError(f"No caller identity. Pass --as ACCOUNT or set {CALLER_ENVVAR}.")
    return caller


@click.group()
@click.version_option(__version__, prog_name="pointledger")
@click.option(
    "--home",
    "-H",
    type=click.Path(file_okay=False, dir_okay=True, path_type=Path),
    envvar=HOME_ENVVAR,
    default=None,
    help=f"Ledger home directory (defaults to ${HOME_ENVVAR} or ./.pointledger)",
)
@click.option(
    "--as",
    "caller",
    type=str,
    envvar=CALLER_ENVVAR,
    default=None,
    metavar="ACCOUNT",
    help=f"Account making the call (defaults to ${CALLER_ENVVAR})",
)
@click.option("--verbose", is_flag=True, help="Log every committed record")
@click.pass_context
def cli(ctx: click.Context, home: Path | None, caller: str | None, verbose: bool) -> None:
    """pointledger - non-transferable point ledger.

    Contributors add and remove points; the administrator manages contributors.
    Points can never be transferred between accounts.
    """
    ctx.ensure_object(dict)
    _configure_logging(verbose)
    ctx.obj["home"] = (home or default_home()).resolve()
    ctx.obj["caller"] = caller
    # Commands against an existing home run one at a time.
    if ctx.obj["home"].is_dir():
        ctx.with_resource(home_lock(ctx.obj["home"]))


@cli.command()
@click.option("--admin", "administrator", required=True, metavar="ACCOUNT", help="Initial administrator")
@click.option("--name", default="Points", show_default=True, help="Display name")
@click.option("--symbol", default="PTS", show_default=True, help="Ticker symbol")
@click.pass_context
def init(ctx: click.Context, administrator: str, name: str, symbol: str) -> None:
    """Create a new ledger home.

    Examples:

        pointledger --home ./ledger init --admin alice

        pointledger init --admin alice --name "Karma" --symbol KRM
    """
    from .commands.query_cmd import run_init

    sys.exit(run_init(_home(ctx), administrator, name=name, symbol=symbol))


# -----------------------------------------------------------------------------
# Contributors
# -----------------------------------------------------------------------------


@cli.group()
def contributor() -> None:
    """Manage the contributor set (administrator only)."""


@contributor.command("add")
@click.argument("target")
@click.pass_context
def contributor_add(ctx: click.Context, target: str) -> None:
    """Grant TARGET the right to add and remove points."""
    from .commands.access_cmd import run_contributor_add

    sys.exit(run_contributor_add(_home(ctx), _caller(ctx), target))


@contributor.command("remove")
@click.argument("target")
@click.pass_context
def contributor_remove(ctx: click.Context, target: str) -> None:
    """Revoke TARGET's contributor right."""
    from .commands.access_cmd import run_contributor_remove

    sys.exit(run_contributor_remove(_home(ctx), _caller(ctx), target))


@contributor.command("list")
@click.pass_context
def contributor_list(ctx: click.Context) -> None:
    """List current contributors."""
    from .commands.access_cmd import run_contributor_list

    sys.exit(run_contributor_list(_home(ctx)))


# -----------------------------------------------------------------------------
# Administrator
# -----------------------------------------------------------------------------


@cli.group()
def admin() -> None:
    """Show or hand off the administrator role."""


@admin.command("show")
@click.pass_context
def admin_show(ctx: click.Context) -> None:
    """Show the administrator and any pending successor."""
    from .commands.access_cmd import run_admin_show

    sys.exit(run_admin_show(_home(ctx)))


@admin.command("transfer")
@click.argument("successor")
@click.pass_context
def admin_transfer(ctx: click.Context, successor: str) -> None:
    """Propose SUCCESSOR. The role moves only when SUCCESSOR runs `admin accept`."""
    from .commands.access_cmd import run_admin_transfer

    sys.exit(run_admin_transfer(_home(ctx), _caller(ctx), successor))


@admin.command("accept")
@click.pass_context
def admin_accept(ctx: click.Context) -> None:
    """Accept a pending administrator handoff."""
    from .commands.access_cmd import run_admin_accept

    sys.exit(run_admin_accept(_home(ctx), _caller(ctx)))


@admin.command("renounce")
@click.option("--yes", is_flag=True, help="Confirm; renouncing cannot be undone")
@click.pass_context
def admin_renounce(ctx: click.Context, yes: bool) -> None:
    """Give up the administrator role permanently."""
    from .commands.access_cmd import run_admin_renounce

    if not yes:
        raise click.UsageError("Renouncing freezes the contributor set forever. Re-run with --yes.")
    sys.exit(run_admin_renounce(_home(ctx), _caller(ctx)))


# -----------------------------------------------------------------------------
# Points
# -----------------------------------------------------------------------------


@cli.group()
def points() -> None:
    """Add or remove points (contributors only)."""


@points.command("add", context_settings={"ignore_unknown_options": True})
@click.argument("account")
@click.argument("amount", type=click.IntRange(min=0))
@click.pass_context
def points_add(ctx: click.Context, account: str, amount: int) -> None:
    """Issue AMOUNT points to ACCOUNT."""
    from .commands.points_cmd import run_points_add

    sys.exit(run_points_add(_home(ctx), _caller(ctx), account, amount))


@points.command("remove", context_settings={"ignore_unknown_options": True})
@click.argument("account")
@click.argument("amount", type=click.IntRange(min=0))
@click.pass_context
def points_remove(ctx: click.Context, account: str, amount: int) -> None:
    """Burn AMOUNT points from ACCOUNT. Fails if the balance is too small."""
    from .commands.points_cmd import run_points_remove

    sys.exit(run_points_remove(_home(ctx), _caller(ctx), account, amount))


_bulk_options = [
    click.option("--account", "-a", "accounts", multiple=True, metavar="ACCOUNT", help="Account (repeatable)"),
    click.option(
        "--amount", "-n", "amounts", multiple=True, type=click.IntRange(min=0), metavar="N", help="Amount (repeatable)"
    ),
    click.option(
        "--file",
        "batch_file",
        type=click.Path(exists=True, dir_okay=False, path_type=Path),
        default=None,
        help="YAML/JSON file with 'accounts' and 'amounts' lists",
    ),
]


def _with_bulk_options(func):
    for option in reversed(_bulk_options):
        func = option(func)
    return func


@points.command("bulk-add")
@_with_bulk_options
@click.pass_context
def points_bulk_add(
    ctx: click.Context,
    accounts: tuple[str, ...],
    amounts: tuple[int, ...],
    batch_file: Path | None,
) -> None:
    """Issue points to many accounts at once; all entries or none.

    Examples:

        pointledger --as carol points bulk-add -a u1 -n 10 -a u2 -n 20

        pointledger --as carol points bulk-add --file weekly.yaml
    """
    from .commands.points_cmd import run_points_bulk

    sys.exit(run_points_bulk(_home(ctx), _caller(ctx), list(accounts), list(amounts), batch_file=batch_file))


@points.command("bulk-remove")
@_with_bulk_options
@click.pass_context
def points_bulk_remove(
    ctx: click.Context,
    accounts: tuple[str, ...],
    amounts: tuple[int, ...],
    batch_file: Path | None,
) -> None:
    """Burn points from many accounts at once; any shortfall aborts the batch."""
    from .commands.points_cmd import run_points_bulk

    sys.exit(
        run_points_bulk(_home(ctx), _caller(ctx), list(accounts), list(amounts), remove=True, batch_file=batch_file)
    )


@points.command("transfer")
@click.argument("to")
@click.argument("amount", type=int)
@click.pass_context
def points_transfer(ctx: click.Context, to: str, amount: int) -> None:
    """Always fails: points are non-transferable."""
    from .commands.points_cmd import run_points_transfer

    sys.exit(run_points_transfer(_home(ctx), ctx.obj.get("caller"), to, amount))


# -----------------------------------------------------------------------------
# Queries
# -----------------------------------------------------------------------------


@cli.command()
@click.argument("accounts", nargs=-1, required=True)
@click.option("--json", "output_json", is_flag=True, help="Output results as JSON")
@click.pass_context
def balance(ctx: click.Context, accounts: tuple[str, ...], output_json: bool) -> None:
    """Show balances for one or more ACCOUNTS."""
    from .commands.query_cmd import run_balance

    sys.exit(run_balance(_home(ctx), list(accounts), output_json=output_json))


@cli.command()
@click.pass_context
def supply(ctx: click.Context) -> None:
    """Show total supply."""
    from .commands.query_cmd import run_supply

    sys.exit(run_supply(_home(ctx)))


@cli.command()
@click.option("--json", "output_json", is_flag=True, help="Output results as JSON")
@click.pass_context
def info(ctx: click.Context, output_json: bool) -> None:
    """Summarize the ledger: metadata, supply, administrator, contributors."""
    from .commands.query_cmd import run_info

    sys.exit(run_info(_home(ctx), output_json=output_json))


@cli.command()
@click.option("--since", type=int, default=0, show_default=True, help="Only records after this sequence")
@click.option("--limit", type=int, default=None, help="Only the last N records")
@click.option("--json", "output_json", is_flag=True, help="Output results as JSON")
@click.pass_context
def history(ctx: click.Context, since: int, limit: int | None, output_json: bool) -> None:
    """Show committed records, oldest first."""
    from .commands.query_cmd import run_history

    sys.exit(run_history(_home(ctx), since=since, limit=limit, output_json=output_json))


@cli.command()
@click.option("--json", "output_json", is_flag=True, help="Output results as JSON")
@click.pass_context
def verify(ctx: click.Context, output_json: bool) -> None:
    """Replay the journal and check ledger invariants."""
    from .commands.query_cmd import run_verify

    sys.exit(run_verify(_home(ctx), output_json=output_json))


def main() -> None:
    """Main entrypoint."""
    cli()


if __name__ == "__main__":
    main()
