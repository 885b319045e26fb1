"""Command-line interface for term-resolver.

Uses Typer for a modern, type-hinted CLI experience. Every command that
needs a vocabulary reads a JSON catalog file given with ``--catalog`` or
the ``TERM_RESOLVER_CATALOG`` environment variable.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Optional

import typer
from dotenv import load_dotenv
from rich.console import Console

# Load environment variables from .env files
# Priority: local .env > ~/.term-resolver/.env
_user_env = Path.home() / ".term-resolver" / ".env"
if _user_env.exists():
    load_dotenv(_user_env)
load_dotenv()  # Load local .env (overrides user-level)
from rich.markup import escape
from rich.table import Table

from term_resolver import __version__
from term_resolver.catalog import CandidateLoader, load_catalog_file
from term_resolver.config import load_matching_config
from term_resolver.errors import TermResolverError, format_error_for_display
from term_resolver.logging import LogLevel, set_verbosity
from term_resolver.service import TermValidationService
from term_resolver.vocabulary.phonetic import get_phonetic_code, phonetic_similarity

# Create the main Typer app
app = typer.Typer(
    name="term-resolver",
    help="Resolve misheard and mangled tabletop wargame terms to catalog names.",
    add_completion=False,
    rich_markup_mode="rich",
)

console = Console()

CatalogOption = Annotated[
    Optional[Path],
    typer.Option(
        "--catalog",
        "-c",
        envvar="TERM_RESOLVER_CATALOG",
        help="JSON catalog of {name, category, faction} entries.",
    ),
]

ConfigOption = Annotated[
    Optional[Path],
    typer.Option(
        "--config",
        envvar="TERM_RESOLVER_CONFIG",
        help="JSON file with matching thresholds and limits.",
    ),
]

JsonOption = Annotated[bool, typer.Option("--json", help="Print machine-readable JSON.")]


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"term-resolver version {__version__}")
        raise typer.Exit()


def fail(error: Exception) -> None:
    """Print an error and exit with status 1."""
    console.print(f"[red]Error:[/red] {escape(format_error_for_display(error))}")
    raise typer.Exit(1)


def build_service(catalog: Path | None, config_path: Path | None) -> TermValidationService:
    """Build a validation service over a catalog file.

    Raises:
        typer.Exit: If the catalog or config can't be loaded
    """
    if catalog is None:
        console.print("[red]Error:[/red] No catalog given.")
        console.print("Pass --catalog or set TERM_RESOLVER_CATALOG.")
        raise typer.Exit(1)

    try:
        config = load_matching_config(config_path)
        source = load_catalog_file(catalog)
    except TermResolverError as e:
        fail(e)

    loader = CandidateLoader(source, ttl_seconds=config.cache_ttl_seconds)
    return TermValidationService(loader, config)


def confidence_style(confidence: float) -> str:
    """Rich style for a confidence value."""
    if confidence >= 0.9:
        return "green"
    if confidence >= 0.6:
        return "yellow"
    return "red"


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Log index builds and cache activity."),
    ] = False,
) -> None:
    """Term Resolver - match noisy wargame vocabulary to canonical names.

    [bold]search[/bold], [bold]validate[/bold] and [bold]resolve[/bold] work against a catalog;
    [bold]codes[/bold] and [bold]similar[/bold] inspect the phonetic encoder directly.
    """
    if verbose:
        set_verbosity(LogLevel.DEBUG)


# =============================================================================
# Catalog Commands
# =============================================================================


@app.command()
def search(
    query: Annotated[str, typer.Argument(help="Partial or misspelled name")],
    catalog: CatalogOption = None,
    config: ConfigOption = None,
    category: Annotated[
        Optional[list[str]],
        typer.Option("--category", "-k", help="Category to search (repeatable)"),
    ] = None,
    faction: Annotated[
        Optional[str], typer.Option("--faction", "-f", help="Limit to one faction")
    ] = None,
    limit: Annotated[int, typer.Option("--limit", "-n", help="Maximum results")] = 5,
    as_json: JsonOption = False,
) -> None:
    """Search the catalog for names like QUERY."""
    service = build_service(catalog, config)
    try:
        result = service.fuzzy_search(query, category, faction, limit)
    except TermResolverError as e:
        fail(e)

    if as_json:
        console.print_json(data=result.to_dict())
        return

    if not result.matches:
        console.print(f"[yellow]No matches for '{escape(query)}'.[/yellow]")
        return

    table = Table(title=f"Matches for '{escape(query)}'")
    table.add_column("Name", style="cyan")
    table.add_column("Category", style="white")
    table.add_column("Faction", style="white")
    table.add_column("Confidence", justify="right")
    table.add_column("Matcher", style="dim")

    for match in result.matches:
        style = confidence_style(match.confidence)
        table.add_row(
            match.term,
            match.category.value if match.category else "-",
            match.faction or "-",
            f"[{style}]{match.confidence:.2f}[/{style}]",
            match.matcher_used,
        )

    console.print(table)


@app.command()
def validate(
    terms: Annotated[list[str], typer.Argument(help="Terms to validate")],
    catalog: CatalogOption = None,
    config: ConfigOption = None,
    faction: Annotated[
        Optional[list[str]],
        typer.Option("--faction", "-f", help="Faction to limit to (repeatable)"),
    ] = None,
    category: Annotated[
        Optional[list[str]],
        typer.Option("--category", "-k", help="Category to search (repeatable)"),
    ] = None,
    min_confidence: Annotated[
        Optional[float],
        typer.Option("--min-confidence", "-m", help="Minimum confidence for a match"),
    ] = None,
    as_json: JsonOption = False,
) -> None:
    """Check each of TERMS against the catalog."""
    service = build_service(catalog, config)
    try:
        report = service.validate_terms(terms, faction, category, min_confidence)
    except TermResolverError as e:
        fail(e)

    if as_json:
        console.print_json(data=report.to_dict())
        return

    table = Table(title="Validation Results")
    table.add_column("Input", style="white")
    table.add_column("Match", style="cyan")
    table.add_column("Category", style="white")
    table.add_column("Confidence", justify="right")
    table.add_column("Alternates", style="dim")

    for result in report.results:
        if not result.matched:
            table.add_row(result.input, "[red]no match[/red]", "-", "-", "-")
            continue
        style = confidence_style(result.confidence)
        table.add_row(
            result.input,
            result.match,
            result.category.value if result.category else "-",
            f"[{style}]{result.confidence:.2f}[/{style}]",
            ", ".join(m.term for m in result.alternates) or "-",
        )

    console.print(table)
    console.print(f"Matched {report.matched} of {report.processed} terms.")
    if report.truncated:
        console.print(
            f"[yellow]Warning:[/yellow] only the first {report.processed} terms were validated."
        )


@app.command()
def resolve(
    term: Annotated[str, typer.Argument(help="Ambiguous term")],
    catalog: CatalogOption = None,
    config: ConfigOption = None,
    hint: Annotated[
        Optional[list[str]],
        typer.Option("--hint", help="Faction hint (repeatable)"),
    ] = None,
    context: Annotated[
        Optional[str], typer.Option("--context", help="Surrounding text")
    ] = None,
    as_json: JsonOption = False,
) -> None:
    """Rank every catalog entry TERM could mean."""
    service = build_service(catalog, config)
    try:
        resolution = service.resolve_ambiguous_term(term, hint, context)
    except TermResolverError as e:
        fail(e)

    if as_json:
        console.print_json(data=resolution.to_dict())
        return

    if not resolution.candidates:
        console.print(f"[yellow]No candidates for '{escape(term)}'.[/yellow]")
        return

    table = Table(title=f"Candidates for '{escape(term)}'")
    table.add_column("Name", style="cyan")
    table.add_column("Faction", style="white")
    table.add_column("Confidence", justify="right")
    table.add_column("Relevance", justify="right")
    table.add_column("Boosts", style="dim")

    for candidate in resolution.candidates:
        table.add_row(
            candidate.name,
            candidate.faction or "-",
            f"{candidate.confidence:.2f}",
            f"{candidate.relevance:.2f}",
            ", ".join(candidate.boosts) or "-",
        )

    console.print(table)
    if resolution.ambiguous:
        console.print("[yellow]Ambiguous:[/yellow] several candidates are equally plausible.")
    console.print(f"Recommendation: [bold]{resolution.recommendation}[/bold]")


@app.command()
def scan(
    text: Annotated[str, typer.Argument(help="Caption text to scan")],
    catalog: CatalogOption = None,
    config: ConfigOption = None,
    faction: Annotated[
        Optional[list[str]],
        typer.Option("--faction", "-f", help="Faction to limit to (repeatable)"),
    ] = None,
    min_confidence: Annotated[
        Optional[float],
        typer.Option("--min-confidence", "-m", help="Minimum phonetic confidence"),
    ] = None,
    apply: Annotated[
        bool, typer.Option("--apply", help="Print the text with matches replaced")
    ] = False,
) -> None:
    """Find phrases in TEXT that sound like catalog names."""
    service = build_service(catalog, config)
    try:
        scanner = service.scanner_for(faction_filters=faction, min_confidence=min_confidence)
    except TermResolverError as e:
        fail(e)

    matches = scanner.scan(text)
    if apply:
        console.print(scanner.apply(text, matches), markup=False)
        return

    if not matches:
        console.print("[yellow]No phonetic matches found.[/yellow]")
        return

    for match in matches:
        console.print(
            f"  '{match.original}' -> [cyan]{match.matched_term}[/cyan] "
            f"[dim]({match.confidence:.2f})[/dim]"
        )


# =============================================================================
# Phonetic Commands
# =============================================================================


@app.command()
def codes(
    text: Annotated[str, typer.Argument(help="Word or phrase to encode")],
    as_json: JsonOption = False,
) -> None:
    """Show the phonetic fingerprints of TEXT."""
    code = get_phonetic_code(text)

    if as_json:
        console.print_json(data=code.to_dict())
        return

    table = Table(title=f"Phonetic codes for '{escape(text)}'")
    table.add_column("Algorithm", style="cyan")
    table.add_column("Code", style="white")
    table.add_row("Metaphone", code.metaphone or "-")
    table.add_row("Soundex", code.soundex or "-")
    table.add_row("Double Metaphone (primary)", code.double_metaphone_primary or "-")
    table.add_row("Double Metaphone (secondary)", code.double_metaphone_secondary or "-")
    console.print(table)


@app.command()
def similar(
    first: Annotated[str, typer.Argument(help="First word or phrase")],
    second: Annotated[str, typer.Argument(help="Second word or phrase")],
    threshold: Annotated[
        float, typer.Option("--threshold", "-t", help="Similarity needed to count as alike")
    ] = 0.5,
) -> None:
    """Score how alike FIRST and SECOND sound."""
    score = phonetic_similarity(first, second)
    verdict = "[green]similar[/green]" if score >= threshold else "[red]not similar[/red]"
    console.print(f"Similarity: {score:.2f} ({verdict})")


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"term-resolver version {__version__}")


if __name__ == "__main__":
    app()
