"""
CLI Main - Typer command-line interface.
========================================

Commands:
- index: Load the course CSV into the record store
- chat: Interactive question loop
- ask: Answer a single question
- search: Show the raw nearest course lines for a query
- eval: Run the LLM-as-judge evaluation suites
- info: Show configuration and index status
"""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from usf_coursechat.shared.errors import CourseChatError, ModelCallError
from usf_coursechat.shared.logging import get_logger, setup_logging

logger = get_logger(__name__)

app = typer.Typer(
    name="coursechat",
    help="""USF CourseChat - Ask questions about this semester's courses

Course records are loaded from a CSV export into a ChromaDB index. A chat
model answers questions by calling the search_courses tool, which returns
the three nearest course lines.

QUICK START:

  coursechat index                              # Load data/courses.csv
  coursechat ask "Who is teaching CS 272?"      # One question
  coursechat chat                               # Interactive loop

Use 'coursechat <command> --help' for detailed command options.
""",
    add_completion=False,
    rich_markup_mode="rich",
)

console = Console()

CHAT_PROMPT = "Ask about courses: "


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level", "-l",
        help="Override the configured log level (DEBUG, INFO, WARNING, ...).",
    ),
):
    """Configure logging from settings before any command runs."""
    from usf_coursechat.shared.config import get_settings

    settings = get_settings()
    setup_logging(
        level=log_level or settings.get_effective_log_level(),
        use_rich=settings.logging.rich_console,
        log_file=settings.logging.file or None,
        log_format=settings.logging.format,
        force=True,
    )


def _fail(error: Exception) -> None:
    """Print a diagnostic and exit with status 1."""
    console.print(f"[red]Error: {error}[/red]")
    raise typer.Exit(1)


def _open_index(csv_path: Optional[Path] = None, build_if_empty: bool = True):
    """Open the embedder and store, loading the CSV when the store is empty."""
    from usf_coursechat.shared.config import get_settings
    from usf_coursechat.indexing import ensure_index, get_embedding_provider, open_record_store

    embedder = get_embedding_provider()
    store = open_record_store(dimensions=embedder.dimensions)

    if build_if_empty:
        csv_path = csv_path or get_settings().resolved_paths.courses_csv
        result = ensure_index(store, embedder, csv_path, show_progress=True)
        if result is not None:
            console.print(f"[green]✓ Loaded {result.inserted} courses[/green]")

    return embedder, store


def _create_session(csv_path: Optional[Path] = None):
    from usf_coursechat.rag import ChatSession, Retriever, get_chat_model

    embedder, store = _open_index(csv_path)
    return ChatSession(get_chat_model(), Retriever(store, embedder))


# ─────────────────────────────────────────────────────────────────────────────
# Index Command
# ─────────────────────────────────────────────────────────────────────────────


@app.command()
def index(
    csv_file: Optional[Path] = typer.Option(
        None,
        "--csv", "-c",
        help="Course CSV export. Default: paths.courses_csv from config/settings.yaml.",
    ),
    rebuild: bool = typer.Option(
        False,
        "--rebuild", "-r",
        help="Clear the existing index before loading.",
    ),
):
    """
    📊 Load course records into the record store.

    Does nothing if the store already holds courses, unless --rebuild is given.

    Examples:
        coursechat index
        coursechat index --csv spring.csv --rebuild
    """
    from usf_coursechat.shared.config import get_settings
    from usf_coursechat.indexing import IndexBuilder, get_embedding_provider, open_record_store

    settings = get_settings()
    csv_file = csv_file or settings.resolved_paths.courses_csv

    try:
        embedder = get_embedding_provider()
        store = open_record_store(dimensions=embedder.dimensions)

        console.print(Panel(
            f"[bold]Indexing Configuration[/bold]\n"
            f"CSV: {csv_file}\n"
            f"Provider: {embedder.provider_name} ({embedder.model_name}, {embedder.dimensions}d)\n"
            f"Collection: {store.collection_name}\n"
            f"Rebuild: {rebuild}",
            title="📊 Index",
        ))

        if rebuild:
            store.clear()
        elif store.count() > 0:
            console.print(
                f"[yellow]Index already holds {store.count()} courses. "
                f"Use --rebuild to reload.[/yellow]"
            )
            return

        result = IndexBuilder(store, embedder).build_from_csv(csv_file, show_progress=True)
    except CourseChatError as e:
        _fail(e)

    console.print(
        f"\n[bold green]✓ Indexed {result.inserted} courses in {result.batches} batches[/bold green]"
    )
    if result.skipped_rows:
        console.print(f"[yellow]Skipped {result.skipped_rows} malformed rows[/yellow]")

    counts = result.catalog.subject_counts()
    if counts:
        table = Table(title="Sections per subject")
        table.add_column("Subject", style="cyan")
        table.add_column("Sections", justify="right")
        for subject, count in counts.items():
            table.add_row(subject, str(count))
        console.print(table)
        console.print(f"[dim]{len(result.catalog.by_instructor)} instructors[/dim]")


# ─────────────────────────────────────────────────────────────────────────────
# Chat Commands
# ─────────────────────────────────────────────────────────────────────────────


@app.command()
def chat(
    csv_file: Optional[Path] = typer.Option(
        None,
        "--csv", "-c",
        help="Course CSV to load if the index is empty.",
    ),
):
    """
    💬 Ask questions in an interactive loop.

    Blank lines are ignored. End the session with Ctrl+D.
    """
    try:
        session = _create_session(csv_file)
    except CourseChatError as e:
        _fail(e)

    while True:
        try:
            question = console.input(CHAT_PROMPT)
        except (EOFError, KeyboardInterrupt):
            console.print()
            break

        question = question.strip()
        if not question:
            continue

        try:
            answer = session.ask(question)
        except ModelCallError as e:
            console.print(f"[red]Error: {e}[/red]")
            continue

        console.print(answer.answer, markup=False)


@app.command()
def ask(
    question: str = typer.Argument(
        ...,
        help="Natural language question about courses (wrap in quotes).",
    ),
    csv_file: Optional[Path] = typer.Option(
        None,
        "--csv", "-c",
        help="Course CSV to load if the index is empty.",
    ),
    show_queries: bool = typer.Option(
        False,
        "--queries/--no-queries",
        help="Show the search_courses queries the model made.",
    ),
):
    """
    💬 Answer a single question.

    Examples:
        coursechat ask "Who is teaching CS 272?"
        coursechat ask "Where does Bioinformatics meet?" --queries
    """
    try:
        session = _create_session(csv_file)
        answer = session.ask(question)
    except CourseChatError as e:
        _fail(e)

    console.print(Panel(answer.answer, title="💬 Answer", border_style="green"))
    if show_queries:
        for query in answer.tool_queries:
            console.print(f"[dim]search_courses: {query}[/dim]")
    console.print(
        f"[dim]{answer.model_calls} model call(s), {answer.total_tokens} tokens[/dim]"
    )


@app.command()
def search(
    query: str = typer.Argument(..., help="Free-text search query."),
):
    """
    🔎 Show the nearest course lines for a query, with distances.
    """
    from usf_coursechat.rag import Retriever

    try:
        embedder, store = _open_index()
        hits = Retriever(store, embedder).search_hits(query)
    except CourseChatError as e:
        _fail(e)

    if not hits:
        console.print("[yellow]No matching courses.[/yellow]")
        return

    table = Table(show_header=True)
    table.add_column("ID", justify="right")
    table.add_column("Distance", justify="right")
    table.add_column("Course", overflow="fold")
    for hit in hits:
        table.add_row(str(hit.serial_id), f"{hit.distance:.4f}", hit.text)
    console.print(table)


# ─────────────────────────────────────────────────────────────────────────────
# Eval Command
# ─────────────────────────────────────────────────────────────────────────────


@app.command()
def eval(
    suite: str = typer.Option(
        "all",
        "--suite", "-s",
        help="Question suite: lab07, project06 or all.",
    ),
    output_file: Optional[Path] = typer.Option(
        None,
        "--output", "-o",
        help="Save detailed results to a JSON file.",
    ),
):
    """
    📊 Score answers to the built-in questions with an LLM judge.

    Exits with status 1 if any case scores below its minimum.
    """
    from usf_coursechat.evaluation import EvaluationRunner, get_suites
    from usf_coursechat.shared.utils import save_json

    try:
        suites = get_suites(suite)
        session = _create_session()
        report = EvaluationRunner(session).run(suites)
    except CourseChatError as e:
        _fail(e)

    table = Table(title="Evaluation")
    table.add_column("Suite")
    table.add_column("Case", style="cyan")
    table.add_column("Score", justify="right")
    table.add_column("Result")
    for result in report.results:
        status = "[green]PASS[/green]" if result.passed else "[red]FAIL[/red]"
        score = str(result.score) if result.error is None else "-"
        table.add_row(result.suite, result.name, score, status)
    console.print(table)
    console.print("\n" + report.summary())

    if output_file:
        save_json(output_file, report.to_dict())
        console.print(f"\n[green]✓ Results saved to {output_file}[/green]")

    if not report.all_passed:
        raise typer.Exit(1)


# ─────────────────────────────────────────────────────────────────────────────
# Info Command
# ─────────────────────────────────────────────────────────────────────────────


@app.command()
def info():
    """
    ℹ️ Show configuration, providers and index status.
    """
    from usf_coursechat import __version__
    from usf_coursechat.shared.config import DEFAULT_CONFIG_FILE, get_settings

    settings = get_settings()

    console.print(Panel(
        f"[bold]USF CourseChat[/bold]\n"
        f"Version: {__version__}\n"
        f"Config: {DEFAULT_CONFIG_FILE}",
        title="ℹ️ Info",
    ))

    console.print("\n[bold]Providers:[/bold]")
    console.print(f"  embeddings: {settings.get_effective_embedding_provider()}")
    console.print(f"  chat: {settings.get_effective_chat_provider()}")
    console.print(f"  distance: {settings.store.distance_space}")

    console.print("\n[bold]Data Paths:[/bold]")
    resolved_paths = settings.resolved_paths
    path_dict = {
        "data_dir": resolved_paths.data_dir,
        "courses_csv": resolved_paths.courses_csv,
        "index_dir": resolved_paths.index_dir,
    }
    for name, path in path_dict.items():
        exists = "✓" if path.exists() else "✗"
        console.print(f"  {name}: {path} [{exists}]", markup=False)

    try:
        _, store = _open_index(build_if_empty=False)
        console.print(f"\n[bold]Index:[/bold] {store.count()} courses in '{store.collection_name}'")
    except CourseChatError as e:
        console.print(f"\n[yellow]Index unavailable: {e}[/yellow]")


# ─────────────────────────────────────────────────────────────────────────────
# Entry Point
# ─────────────────────────────────────────────────────────────────────────────


def cli():
    """CLI entry point."""
    app()


if __name__ == "__main__":
    cli()
