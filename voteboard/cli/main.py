"""CLI commands for the voting engine."""

import json
import sys
from collections.abc import Callable, Iterator
from contextlib import contextmanager

import click
import structlog

from voteboard.engine import VotingEngine
from voteboard.errors import VoteboardError
from voteboard.models import Item, RankingBasis
from voteboard.observability.logging import configure_from_settings, request_context
from voteboard.observability.metrics import EngineMetrics
from voteboard.settings import EngineSettings, get_settings
from voteboard.store.memory import MemoryStorage


logger = structlog.get_logger()

# Builds a ready engine from settings; overridable through the click context object.
EngineFactory = Callable[[EngineSettings], VotingEngine]

BASIS_CHOICE = click.Choice([basis.value for basis in RankingBasis])


def _redis_engine(settings: EngineSettings) -> VotingEngine:
    return VotingEngine.from_settings(settings)


def _memory_engine(settings: EngineSettings) -> VotingEngine:
    return VotingEngine(MemoryStorage(), settings)


def _echo_json(payload: object) -> None:
    click.echo(json.dumps(payload, indent=2, sort_keys=True))


def _items_payload(items: list[Item]) -> list[dict[str, object]]:
    return [item.model_dump() for item in items]


@contextmanager
def _engine_session(ctx: click.Context) -> Iterator[VotingEngine]:
    """Open an engine for one command and report domain errors on stderr.

    Args:
        ctx: Click context carrying settings and the engine factory.

    Yields:
        A ready engine, closed on exit.
    """
    settings: EngineSettings = ctx.obj["settings"]
    factory: EngineFactory = ctx.obj["engine_factory"]
    try:
        with factory(settings) as engine:
            yield engine
    except VoteboardError as exc:
        logger.error("command_failed", error=str(exc))
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)


@click.group()
@click.version_option(version="0.1.0")
@click.option(
    "--memory",
    is_flag=True,
    help="Use an in-process store instead of Redis (state is not kept).",
)
@click.pass_context
def cli(ctx: click.Context, memory: bool) -> None:
    """Time-decayed ranking and voting engine CLI."""
    settings = get_settings()
    configure_from_settings(settings)
    ctx.with_resource(request_context())

    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings
    ctx.obj.setdefault("engine_factory", _memory_engine if memory else _redis_engine)


@cli.command()
@click.argument("author")
@click.argument("title")
@click.argument("link")
@click.pass_context
def submit(ctx: click.Context, author: str, title: str, link: str) -> None:
    """Submit a new item and print its ID."""
    with _engine_session(ctx) as engine:
        item_id = engine.submit(author, title, link)
        _echo_json({"id": item_id})


@cli.command()
@click.argument("user")
@click.argument("item_id", type=int)
@click.pass_context
def vote(ctx: click.Context, user: str, item_id: int) -> None:
    """Vote for an item and print the outcome."""
    with _engine_session(ctx) as engine:
        outcome = engine.vote(user, item_id)
        _echo_json({"id": item_id, "outcome": outcome.value})


@cli.command()
@click.option("--order", "basis", type=BASIS_CHOICE, default="score", show_default=True)
@click.option("--page", "page_number", type=int, default=1, show_default=True)
@click.option("--size", "page_size", type=int, default=None, help="Items per page.")
@click.pass_context
def top(
    ctx: click.Context,
    basis: str,
    page_number: int,
    page_size: int | None,
) -> None:
    """Print a page of the global ranking."""
    with _engine_session(ctx) as engine:
        items = engine.page(RankingBasis(basis), page_number, page_size)
        _echo_json(_items_payload(items))


@cli.command("group-add")
@click.argument("item_id", type=int)
@click.argument("groups", nargs=-1, required=True)
@click.pass_context
def group_add(ctx: click.Context, item_id: int, groups: tuple[str, ...]) -> None:
    """Add an item to one or more groups."""
    with _engine_session(ctx) as engine:
        added = engine.add_to_groups(item_id, groups)
        _echo_json({"id": item_id, "groups": list(groups), "added": added})


@cli.command("group-top")
@click.argument("group")
@click.option("--order", "basis", type=BASIS_CHOICE, default="score", show_default=True)
@click.option("--page", "page_number", type=int, default=1, show_default=True)
@click.option("--size", "page_size", type=int, default=None, help="Items per page.")
@click.pass_context
def group_top(
    ctx: click.Context,
    group: str,
    basis: str,
    page_number: int,
    page_size: int | None,
) -> None:
    """Print a page of a group's ranking."""
    with _engine_session(ctx) as engine:
        items = engine.group_page(group, RankingBasis(basis), page_number, page_size)
        _echo_json(_items_payload(items))


@cli.command()
@click.option("--author", default="username", show_default=True)
@click.option("--voter", default="other_user", show_default=True)
@click.option("--group", "group", default="new-group", show_default=True)
@click.pass_context
def demo(ctx: click.Context, author: str, voter: str, group: str) -> None:
    """Walk through submit, vote, ranking and group ranking."""
    with _engine_session(ctx) as engine:
        item_id = engine.submit(author, "A title", "http://www.google.com")
        click.echo(f"We posted a new item with id: {item_id}")
        click.echo("Its record looks like:")
        _echo_json(engine.get_item(item_id).model_dump())

        outcome = engine.vote(voter, item_id)
        votes = engine.get_item(item_id).votes
        click.echo(f"We voted for the item ({outcome.value}), it now has votes: {votes}")

        click.echo("The currently highest-scoring items are:")
        _echo_json(_items_payload(engine.page(RankingBasis.SCORE)))

        engine.add_to_group(item_id, group)
        click.echo(f"We added the item to {group!r}, the group's items are:")
        _echo_json(_items_payload(engine.group_page(group)))

        click.echo("Metrics:")
        _echo_json(EngineMetrics.get_instance().to_dict())


if __name__ == "__main__":
    cli()
