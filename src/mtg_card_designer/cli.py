"""Command-line interface for the MTG Card Designer."""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn
from rich.table import Table

from mtg_card_designer import __version__
from mtg_card_designer.config import get_settings
from mtg_card_designer.domain import DEFAULT_CARD_DATA, DEFAULT_TEMPLATES, CardData, Deck, Template
from mtg_card_designer.errors import CardDesignerError
from mtg_card_designer.export import export_card_png, export_deck_pdf
from mtg_card_designer.rendering import SymbolSegment, resolve_template, tokenize
from mtg_card_designer.services import ApiClient, PersistenceService

console = Console()
logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Set up logging configuration."""
    level = logging.DEBUG if verbose else get_settings().log_level.upper()
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True)],
    )


def _read_json(path: Path):
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="mtg-card-designer",
        description="Lay out and export custom Magic: The Gathering cards",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Render command
    render_parser = subparsers.add_parser("render", help="Render a card to PNG")
    render_parser.add_argument(
        "card",
        nargs="?",
        type=Path,
        help="Card JSON file (defaults to the sample card)",
    )
    render_parser.add_argument(
        "--template",
        type=Path,
        help="Template JSON file; overrides the card's templateId",
    )
    render_parser.add_argument(
        "--supersample",
        type=int,
        help="Output scale factor, at least 2 (default from settings)",
    )
    render_parser.add_argument(
        "-o",
        "--output-dir",
        type=Path,
        help="Directory for the PNG (default from settings)",
    )

    # Export deck command
    deck_parser = subparsers.add_parser("export-deck", help="Export a deck as a print PDF")
    deck_parser.add_argument("deck", type=Path, help="Deck JSON file")
    deck_parser.add_argument("-o", "--output", type=Path, help="Output PDF path")
    deck_parser.add_argument(
        "--supersample",
        type=int,
        help="Card raster scale factor, at least 2 (default from settings)",
    )

    # Tokenize command
    tokenize_parser = subparsers.add_parser(
        "tokenize", help="Show how card text splits into text and symbols"
    )
    tokenize_parser.add_argument("text", help='Card text, e.g. "{T}: Add {G}."')

    # Templates command
    templates_parser = subparsers.add_parser("templates", help="List available templates")
    templates_parser.add_argument(
        "--remote",
        action="store_true",
        help="Also list templates stored on the backend",
    )

    return parser


def cmd_render(args: argparse.Namespace) -> int:
    card = CardData.from_json_dict(_read_json(args.card)) if args.card else DEFAULT_CARD_DATA
    if args.template:
        template = Template.from_json_dict(_read_json(args.template))
    else:
        template = resolve_template(DEFAULT_TEMPLATES, card.template_id)

    settings = get_settings()
    exported = export_card_png(template, card, args.supersample or settings.export_supersample)
    path = exported.save(args.output_dir)
    console.print(f"[green]✓[/green] Rendered card: {card.name or '(unnamed)'}")
    console.print(f"[blue]📁 Saved to: {path}[/blue]")
    return 0


def cmd_export_deck(args: argparse.Namespace) -> int:
    deck = Deck.model_validate(_read_json(args.deck))

    with Progress(
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        console=console,
    ) as progress:
        task = progress.add_task(f"Exporting {deck.name}", total=len(deck))

        def on_progress(current: int, total: int) -> None:
            progress.update(task, completed=current, total=total)

        path = export_deck_pdf(
            deck,
            output_path=args.output,
            progress=on_progress,
            supersample=args.supersample,
        )

    console.print(f"[green]✓[/green] Exported {len(deck)} cards")
    console.print(f"[blue]📁 Saved to: {path}[/blue]")
    return 0


def cmd_tokenize(args: argparse.Namespace) -> int:
    table = Table(title="Segments")
    table.add_column("#", justify="right")
    table.add_column("Type")
    table.add_column("Value")

    for index, segment in enumerate(tokenize(args.text)):
        if isinstance(segment, SymbolSegment):
            table.add_row(str(index), "symbol", segment.key)
        else:
            table.add_row(str(index), "text", repr(segment.value))

    console.print(table)
    return 0


def cmd_templates(args: argparse.Namespace) -> int:
    templates = list(DEFAULT_TEMPLATES)
    if args.remote:
        templates.extend(PersistenceService(ApiClient()).get_templates())

    table = Table(title="Templates")
    table.add_column("ID")
    table.add_column("Name")
    table.add_column("Author")
    table.add_column("Custom elements", justify="right")
    for template in templates:
        table.add_row(
            template.id,
            template.name,
            template.author_name or "-",
            str(len(template.custom_elements)),
        )

    console.print(table)
    return 0


COMMANDS = {
    "render": cmd_render,
    "export-deck": cmd_export_deck,
    "tokenize": cmd_tokenize,
    "templates": cmd_templates,
}


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    if not args.command:
        parser.print_help()
        return 1

    try:
        return COMMANDS[args.command](args)
    except (CardDesignerError, ValidationError, OSError, json.JSONDecodeError) as e:
        logger.debug("Command failed", exc_info=True)
        console.print(f"[red]✗[/red] {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
