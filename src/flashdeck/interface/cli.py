"""flashdeck CLI: list sharing, practice sessions and per-card stats."""

import asyncio
import json
import logging
import random
import sys
from pathlib import Path
from typing import Annotated, NoReturn, get_args

import typer
from pydantic import ValidationError

from flashdeck.application.config import AppConfig, resolve_config
from flashdeck.domain.errors import InvalidListStructureError

# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------

app = typer.Typer(
    help="flashdeck: adaptive flashcard practice and list sharing.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

config_app = typer.Typer(help="Manage flashdeck configuration.")
app.add_typer(config_app, name="config")


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s:%(name)s:%(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)


def _set_verbosity(verbose: int) -> None:
    level = logging.WARNING if verbose <= 1 else logging.INFO if verbose == 2 else logging.DEBUG
    logging.getLogger("flashdeck").setLevel(level)


def _resolve_with_overrides(**overrides) -> AppConfig:
    try:
        return resolve_config(overrides)
    except ValidationError as e:
        _fail(f"Invalid configuration ({e.error_count()} errors):\n{e}")


def _repository(config: AppConfig):
    from flashdeck.infrastructure.adapters.json_store import JsonListRepository

    return JsonListRepository(config.data_dir)


def _activity_repository(config: AppConfig):
    from flashdeck.infrastructure.adapters.json_store import JsonActivityRepository

    return JsonActivityRepository(config.data_dir)


def _fail(message: str) -> NoReturn:
    typer.secho(message, fg="red", err=True)
    raise typer.Exit(1)


def _run(coro):
    """Run a repository call, failing cleanly when the store cannot be read."""
    try:
        return asyncio.run(coro)
    except InvalidListStructureError as e:
        _fail(f"Could not read stored data: {e}")


# ---------------------------------------------------------------------------
# Global callback
# ---------------------------------------------------------------------------


@app.callback()
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose", "-v", count=True, help="Increase verbosity. Repeat for more detail."
        ),
    ] = 1,
    data_dir: Annotated[
        Path | None, typer.Option(help="Directory holding lists.json.")
    ] = None,
):
    """Global settings for flashdeck."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["data_dir"] = data_dir
    _set_verbosity(verbose)


# ---------------------------------------------------------------------------
# Lists
# ---------------------------------------------------------------------------


@app.command("lists")
def lists_command(ctx: typer.Context):
    """Show stored lists."""
    config = _resolve_with_overrides(data_dir=ctx.obj.get("data_dir"))
    repo = _repository(config)

    stored = _run(repo.list_all())
    if not stored:
        typer.secho("No lists stored.", fg="yellow")
        return

    for card_list in stored:
        typer.echo(f"{card_list.id}  {card_list.name}  ({len(card_list.cards)} cards)")


# ---------------------------------------------------------------------------
# Sharing
# ---------------------------------------------------------------------------


@app.command()
def share(
    ctx: typer.Context,
    list_id: Annotated[str, typer.Argument(help="Id of the list to share.")],
    url: Annotated[bool, typer.Option("--url", help="Print a full share URL.")] = False,
    base_url: Annotated[
        str | None, typer.Option(help="Base URL for --url. Defaults to config.")
    ] = None,
):
    """[bold green]Share[/bold green] a list as a compact token."""
    from flashdeck.application.sharing import generate_share_token, generate_share_url

    config = _resolve_with_overrides(
        data_dir=ctx.obj.get("data_dir"), share_base_url=base_url
    )
    card_list = _run(_repository(config).load_list(list_id))
    if card_list is None:
        _fail(f"List {list_id} not found.")

    if url:
        typer.echo(generate_share_url(card_list, config.share_base_url, config.share_path))
    else:
        typer.echo(generate_share_token(card_list))


@app.command("import")
def import_command(
    ctx: typer.Context,
    code: Annotated[str, typer.Argument(help="Share token, or a share URL containing one.")],
    dry_run: Annotated[
        bool, typer.Option("--dry-run", help="Decode and show the list without saving.")
    ] = False,
):
    """Import a shared list from a token or URL."""
    from flashdeck.application.sharing import decode_share_token, extract_import_token
    from flashdeck.domain.errors import ShareTokenError

    config = _resolve_with_overrides(data_dir=ctx.obj.get("data_dir"))

    token = code
    if "://" in code:
        token = extract_import_token(code)
        if token is None:
            _fail("URL has no import code.")

    try:
        card_list = decode_share_token(token)
    except ShareTokenError as e:
        _fail(f"Could not import list ({e.kind.value}): {e.message}")

    if not dry_run:
        card_list = _run(_repository(config).save_list(card_list))
        logger.info(f"Saved imported list {card_list.id} to {config.data_dir}")

    typer.secho(
        f"Imported '{card_list.name}' with {len(card_list.cards)} cards as {card_list.id}.",
        fg="green",
    )


# ---------------------------------------------------------------------------
# List management
# ---------------------------------------------------------------------------


@app.command()
def export(
    ctx: typer.Context,
    list_id: Annotated[str, typer.Argument(help="Id of the list to export.")],
    output: Annotated[
        Path | None, typer.Option("--output", "-o", help="Write to a file instead of stdout.")
    ] = None,
):
    """Export a list, performance included, as JSON."""
    from flashdeck.application.list_service import export_list_json

    config = _resolve_with_overrides(data_dir=ctx.obj.get("data_dir"))
    card_list = _run(_repository(config).load_list(list_id))
    if card_list is None:
        _fail(f"List {list_id} not found.")

    text = export_list_json(card_list)
    if output is None:
        typer.echo(text)
        return

    output.write_text(text + "\n", encoding="utf-8")
    typer.secho(f"Exported '{card_list.name}' to {output}", fg="green")


@app.command("import-file")
def import_file(
    ctx: typer.Context,
    path: Annotated[Path, typer.Argument(help="JSON file written by `export`.")],
):
    """Import a list from an exported JSON file."""
    from flashdeck.application.list_service import import_list_json

    config = _resolve_with_overrides(data_dir=ctx.obj.get("data_dir"))
    if not path.exists():
        _fail(f"File {path} not found.")

    try:
        card_list = import_list_json(path.read_text(encoding="utf-8"))
    except InvalidListStructureError as e:
        _fail(f"Could not import {path}: {e}")

    card_list = _run(_repository(config).save_list(card_list))
    typer.secho(
        f"Imported '{card_list.name}' with {len(card_list.cards)} cards as {card_list.id}.",
        fg="green",
    )


@app.command()
def duplicate(
    ctx: typer.Context,
    list_id: Annotated[str, typer.Argument(help="Id of the list to copy.")],
    name: Annotated[
        str | None, typer.Option(help="Name for the copy. Defaults to '<name> (2)'.")
    ] = None,
):
    """Copy a list, performance included, under a free name."""
    from flashdeck.application.list_service import duplicate_list, unique_copy_name

    config = _resolve_with_overrides(data_dir=ctx.obj.get("data_dir"))
    repo = _repository(config)

    stored = _run(repo.list_all())
    source = next((cl for cl in stored if cl.id == list_id), None)
    if source is None:
        _fail(f"List {list_id} not found.")

    new_name = unique_copy_name({cl.name for cl in stored}, name or source.name)
    copy = _run(repo.save_list(duplicate_list(source, new_name)))
    typer.secho(f"Copied '{source.name}' to '{copy.name}' as {copy.id}.", fg="green")


@app.command()
def delete(
    ctx: typer.Context,
    list_id: Annotated[str, typer.Argument(help="Id of the list to delete.")],
):
    """Delete a stored list."""
    config = _resolve_with_overrides(data_dir=ctx.obj.get("data_dir"))
    if not _run(_repository(config).delete_list(list_id)):
        _fail(f"List {list_id} not found.")
    typer.echo(f"Deleted {list_id}.")


# ---------------------------------------------------------------------------
# Practice
# ---------------------------------------------------------------------------


@app.command()
def practice(
    ctx: typer.Context,
    list_ids: Annotated[
        list[str], typer.Argument(help="One or more list ids (comma-separated also accepted).")
    ],
    mode: Annotated[
        str | None,
        typer.Option(
            "--mode", help="Shuffle mode: balanced, mastery-focused, challenge-first."
        ),
    ] = None,
    smart: Annotated[
        bool | None, typer.Option("--smart/--no-smart", help="Mastery-weighted repetition.")
    ] = None,
    seed: Annotated[int | None, typer.Option(help="Seed for a reproducible order.")] = None,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """Build a shuffled practice session from one or more lists."""
    from flashdeck.application.combiner import parse_list_ids
    from flashdeck.application.practice_service import PracticeService
    from flashdeck.domain.models import ShuffleMode

    if mode is not None and mode not in get_args(ShuffleMode):
        _fail(f"Unknown shuffle mode: {mode}")

    config = _resolve_with_overrides(
        data_dir=ctx.obj.get("data_dir"),
        shuffle_mode=mode,
        enable_smart_shuffle=smart,
    )
    ids = [list_id for raw in list_ids for list_id in parse_list_ids(raw)]

    rng = random.Random(seed) if seed is not None else None
    service = PracticeService(
        _repository(config), config.shuffle_config(), rng, activity=_activity_repository(config)
    )
    session = _run(service.start_session(ids))

    if not session.pool.cards:
        _fail("No cards found for the given lists.")

    distribution = session.distribution()

    if json_output:
        typer.echo(
            json.dumps(
                {
                    "name": session.name,
                    "direction": session.direction,
                    "cards": [
                        {
                            "id": card.id,
                            "list_id": session.card_origin_map[card.id],
                            "front": card.front,
                            "back": card.back,
                            "mastery": card.mastery_level,
                        }
                        for card in session.cards
                    ],
                    "distribution": {
                        "hard": vars(distribution.hard_cards),
                        "medium": vars(distribution.medium_cards),
                        "easy": vars(distribution.easy_cards),
                    },
                },
                ensure_ascii=False,
                indent=2,
            )
        )
        return

    typer.echo(f"Session: {session.name}  ({session.direction})")
    typer.echo(f"Cards: {len(session.cards)} ({len(session.pool.cards)} unique)")
    for position, card in enumerate(session.cards, start=1):
        typer.echo(f"  {position:3d}. {card.front} -> {card.back}  [{card.mastery_level}]")

    typer.echo(
        f"Hard: {distribution.hard_cards.count} ({distribution.hard_cards.percentage}%)  "
        f"Medium: {distribution.medium_cards.count} ({distribution.medium_cards.percentage}%)  "
        f"Easy: {distribution.easy_cards.count} ({distribution.easy_cards.percentage}%)"
    )


@app.command()
def record(
    ctx: typer.Context,
    list_id: Annotated[str, typer.Argument(help="List owning the card.")],
    card_id: Annotated[str, typer.Argument(help="Card that was practiced.")],
    response_ms: Annotated[int, typer.Argument(help="Response time in milliseconds.")],
    flips: Annotated[int, typer.Option(help="Flips during this view.")] = 0,
):
    """Record one practice interaction for a card."""
    from flashdeck.application.practice_service import PracticeService
    from flashdeck.domain.errors import CardNotFoundError, InvalidMetricsError

    config = _resolve_with_overrides(data_dir=ctx.obj.get("data_dir"))
    service = PracticeService(_repository(config), activity=_activity_repository(config))

    try:
        card = _run(service.record_result(list_id, card_id, response_ms, flips))
    except (CardNotFoundError, InvalidMetricsError) as e:
        _fail(str(e))

    typer.echo(f"{card.front}: mastery {card.mastery_level}")


@app.command()
def stats(
    ctx: typer.Context,
    list_id: Annotated[str, typer.Argument(help="List to report on.")],
    days: Annotated[int, typer.Option(min=1, help="Days of activity to summarize.")] = 30,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """Show per-card mastery and speed, plus recent activity and the practice streak."""
    from flashdeck.application.performance import (
        average_response_time,
        classify_difficulty,
        format_time,
        success_rate_percent,
    )
    from flashdeck.application.practice_service import PracticeService

    config = _resolve_with_overrides(data_dir=ctx.obj.get("data_dir"))
    card_list = _run(_repository(config).load_list(list_id))
    if card_list is None:
        _fail(f"List {list_id} not found.")

    service = PracticeService(_repository(config), activity=_activity_repository(config))
    report = _run(service.progress_report(list_id, days))
    summary, bands = report.summary, report.distribution

    rows = [
        {
            "id": card.id,
            "front": card.front,
            "mastery": card.mastery_level,
            "difficulty": classify_difficulty(card.performance),
            "views": card.performance.view_count,
            "average_ms": average_response_time(card.performance),
            "success_rate": success_rate_percent(card.performance),
        }
        for card in card_list.cards
    ]

    if json_output:
        typer.echo(
            json.dumps(
                {
                    "list": card_list.name,
                    "cards": rows,
                    "summary": vars(summary),
                    "distribution": vars(bands),
                },
                ensure_ascii=False,
                indent=2,
            )
        )
        return

    typer.echo(f"{card_list.name}: {len(rows)} cards")
    for row in rows:
        typer.echo(
            f"  {row['front']}  mastery={row['mastery']}  {row['difficulty']}  "
            f"views={row['views']}  avg={format_time(row['average_ms'])}  "
            f"success={row['success_rate']}%"
        )

    typer.echo(
        f"New: {bands.new}  Learning: {bands.learning}  "
        f"Familiar: {bands.familiar}  Mastered: {bands.mastered}"
    )
    typer.echo(
        f"Last {days} days: {summary.total_sessions} sessions, "
        f"{summary.total_cards_reviewed} reviews, "
        f"accuracy {summary.average_accuracy:.1f}%, "
        f"avg {format_time(summary.average_response_time)}, "
        f"streak {summary.current_streak}d"
    )


@app.command()
def version():
    """Show the flashdeck version."""
    from flashdeck.consts import VERSION

    typer.echo(f"flashdeck {VERSION}")


# ---------------------------------------------------------------------------
# Config subgroup
# ---------------------------------------------------------------------------


@config_app.command("show")
def config_show(ctx: typer.Context):
    """Display final resolved configuration."""
    config = _resolve_with_overrides(data_dir=(ctx.obj or {}).get("data_dir"))
    d = {k: str(v) if isinstance(v, Path) else v for k, v in config.model_dump().items()}
    typer.echo(json.dumps(d, indent=2))


if __name__ == "__main__":
    app()
