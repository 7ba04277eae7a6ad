"""Main CLI entry point for PDF Illustrator."""
import sys
import click
from pathlib import Path
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from utils.logger import setup_logger
from ingestion.pdf_extractor import InvalidPDFError, NoExtractableTextError
from execution.models import PipelineConfig, PipelineResult
from execution.pipeline import IllustrationPipeline
import config

logger = setup_logger(__name__)
console = Console()


def print_summary(result: PipelineResult) -> None:
    """Print one row per chunk: pages, scene prompt, image outcome."""
    table = Table(title="Illustrations")
    table.add_column("#", justify="right")
    table.add_column("Pages")
    table.add_column("Scene")
    table.add_column("Image")

    status_style = {
        "ok": "[green]ok[/green]",
        "failed": "[red]failed[/red]",
        "skipped_budget": "[yellow]out of time[/yellow]",
        "skipped_no_prompt": "[yellow]no prompt[/yellow]",
    }

    for chunk, scene, illustration in zip(result.chunks, result.prompts, result.illustrations):
        table.add_row(
            str(chunk.index + 1),
            f"{chunk.start + 1}-{chunk.end}",
            scene.text[:70] or "[dim](none)[/dim]",
            status_style[illustration.status]
        )

    console.print(table)


@click.group()
def cli():
    """PDF Illustrator - add AI-generated illustrations to a PDF"""
    pass


@cli.command()
@click.option('--pdf', required=True, type=click.Path(exists=True, dir_okay=False), help='Path to PDF file')
@click.option('--output', default=None, type=click.Path(dir_okay=False), help='Output path')
@click.option('--budget', default=None, type=click.FloatRange(min=0, min_open=True), help='Seconds allowed for image generation')
def illustrate(pdf, output, budget):
    """Illustrate a PDF and write the result."""
    console.print("\n[bold cyan]PDF Illustration[/bold cyan]\n")

    pdf_path = Path(pdf)
    output_path = Path(output) if output else config.OUTPUT_DIR / f"{pdf_path.stem}_illustrated.pdf"

    cfg = PipelineConfig(budget_seconds=budget) if budget is not None else PipelineConfig()

    with IllustrationPipeline(cfg) as pipeline, Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console
    ) as progress:
        task = progress.add_task("Generating illustrations (this may take a minute)...", total=None)

        try:
            result = pipeline.run(pdf_path.read_bytes())
            progress.update(task, completed=True)
        except (InvalidPDFError, NoExtractableTextError) as e:
            console.print(f"[red]Error: {e}[/red]")
            sys.exit(1)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(result.pdf_bytes)

    print_summary(result)

    console.print(f"\n[green]✓ Illustrated PDF written![/green]")
    console.print(f"Output: [cyan]{output_path}[/cyan]")
    console.print(f"Pages: {result.total_pages} original + {result.illustrations_inserted} illustrations")
    console.print(f"Elapsed: {result.elapsed_seconds:.1f}s")
    if result.budget_exhausted:
        console.print("[yellow]Time budget ran out before every chunk was illustrated[/yellow]")


@cli.command()
@click.option('--host', default='127.0.0.1', help='Bind address')
@click.option('--port', default=5000, type=int, help='Port')
def serve(host, port):
    """Serve the upload endpoint over HTTP."""
    from web.app import create_app

    console.print(f"Serving on [cyan]http://{host}:{port}/api/process-pdf[/cyan]")
    create_app().run(host=host, port=port)


if __name__ == '__main__':
    cli()
