import click

from datetime import date
from rich.console import Console
from rich.markup import escape

from query_dsl.dsl_logging import configure_logging
from query_dsl.exceptions import QueryDslError
from query_dsl.extractors import get_repo_infos
from query_dsl.language import build_document
from query_dsl.symbols import SymbolTable
from query_dsl.utils import print_document_debug
from query_dsl.validation import DiagnosticKind, position_of, validate_document

console = Console()


def _stamp() -> str:
    return f"[{date.today().strftime('%Y-%m-%d')}]"


def _load(document_path: str):
    symbols = SymbolTable.from_catalog()
    document = build_document(document_path)
    symbols.update(document)
    return document, symbols


def format_diagnostic(diagnostic, text: str) -> str:
    """Render a diagnostic as `line:col message`, plus the conflicting position if any."""
    line, col = position_of(text, diagnostic.start)
    rendered = f"{line}:{col} {diagnostic.message}"
    if diagnostic.kind is DiagnosticKind.MUTUAL_EXCLUSION and diagnostic.conflict_node is not None:
        other_line, other_col = position_of(text, diagnostic.conflict_node.start)
        rendered += f" (conflicts with {other_line}:{other_col})"
    return rendered


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug output.")
@click.option("--quiet", "-q", is_flag=True, help="Only print warnings and errors.")
@click.option("--log-file", type=click.Path(dir_okay=False), default=None, help="Also write a debug log to this file.")
@click.pass_context
def cli(context, verbose, quiet, log_file):
    context.ensure_object(dict)
    configure_logging(verbose=verbose, quiet=quiet, log_file=log_file)


@cli.command("validate", help="Validate a query document and list every problem found.")
@click.pass_context
@click.argument("document_path")
def validate(context, document_path):
    try:
        document, symbols = _load(document_path)
    except (OSError, QueryDslError) as e:
        console.print(f"{_stamp()} Validation failed with error(s): {escape(str(e))}", style="red")
        context.exit(1)

    diagnostics = validate_document(document, symbols)
    if not diagnostics:
        console.print(f"{_stamp()} Document validation success!", style="green")
        context.exit(0)

    for diagnostic in diagnostics:
        console.print(escape(format_diagnostic(diagnostic, document.text)), style="red", soft_wrap=True)
    console.print(f"{_stamp()} Validation found {len(diagnostics)} problem(s).", style="red")
    context.exit(1)


@cli.command("inspect", help="Parse and print the document tree and its variables.")
@click.pass_context
@click.argument("document_path")
def inspect_cmd(context, document_path):
    try:
        document, symbols = _load(document_path)
    except (OSError, QueryDslError) as e:
        console.print(f"{_stamp()} Inspect failed with error(s): {escape(str(e))}", style="red")
        context.exit(1)

    print_document_debug(document, symbols)
    context.exit(0)


@cli.command("repos", help="List the owner/repo pairs referenced by repo: qualifiers.")
@click.pass_context
@click.argument("document_path")
def repos_cmd(context, document_path):
    try:
        document, symbols = _load(document_path)
    except (OSError, QueryDslError) as e:
        console.print(f"{_stamp()} Extraction failed with error(s): {escape(str(e))}", style="red")
        context.exit(1)

    for info in get_repo_infos(document, symbols):
        click.echo(f"{info.owner}/{info.repo}")
    context.exit(0)


def main():
    cli(prog_name="qdsl")
