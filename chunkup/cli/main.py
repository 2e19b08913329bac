"""chunkup CLI - Main commands."""
import asyncio
import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn, TaskProgressColumn, DownloadColumn
from rich.table import Table

app = typer.Typer(
    name="chunkup",
    help="Chunked concurrent file uploader",
    add_completion=False
)
console = Console()


def run_async(coro):
    """Run async function."""
    return asyncio.run(coro)


@app.command()
def upload(
    file_path: Path = typer.Argument(..., help="Local file to upload", exists=True, dir_okay=False),
    url: str = typer.Option(..., "--url", "-u", help="Upload endpoint base URL"),
    chunk_size: int = typer.Option(1024 * 1024, "--chunk-size", "-c", help="Chunk size in bytes"),
    concurrency: int = typer.Option(5, "--concurrency", "-j", help="Maximum parallel chunk uploads"),
    name: str = typer.Option(None, "--name", "-n", help="Name sent to the server"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Upload a file in chunks."""
    from chunkup import Uploader, LocalFile, UploadProgress, UploadError, setup_logging

    if verbose:
        logging.basicConfig(level=logging.DEBUG)
        setup_logging(logging.DEBUG)

    try:
        uploader = Uploader(concurrency=concurrency).options(url=url, chunk_size=chunk_size)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    async def do_upload():
        async with uploader:
            source = LocalFile(file_path, name=name)
            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                BarColumn(),
                TaskProgressColumn(),
                DownloadColumn(),
                console=console
            ) as progress:
                task = progress.add_task(f"Uploading {source.name}", total=source.size)

                def on_progress(p: UploadProgress):
                    progress.update(task, completed=p.loaded)

                try:
                    return await uploader.upload(source, progress_callback=on_progress)
                except asyncio.CancelledError:
                    uploader.abort()
                    raise

    try:
        result = run_async(do_upload())
    except UploadError as e:
        console.print(f"[red]Upload failed: {e}[/red]")
        raise typer.Exit(1)
    except KeyboardInterrupt:
        console.print("[yellow]Upload aborted[/yellow]")
        raise typer.Exit(130)

    console.print(f"[green]Uploaded:[/green] {result.file_name}")
    console.print(f"File id: {result.file_id}")
    console.print(f"Size: {result.file_size:,} bytes in {result.total_chunks} chunks ({result.elapsed:.2f}s)")


@app.command()
def plan(
    file_path: Path = typer.Argument(..., help="Local file", exists=True, dir_okay=False),
    chunk_size: int = typer.Option(1024 * 1024, "--chunk-size", "-c", help="Chunk size in bytes"),
):
    """Show how a file would be split into chunks."""
    from chunkup import FixedSizeChunkingStrategy

    try:
        strategy = FixedSizeChunkingStrategy(chunk_size)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    size = file_path.stat().st_size
    table = Table(title=f"{file_path.name} ({size:,} bytes)")
    table.add_column("Chunk", justify="right")
    table.add_column("Start", justify="right")
    table.add_column("End", justify="right")
    table.add_column("Size", justify="right")

    for chunk_id in range(strategy.count(size)):
        chunk = strategy.chunk(chunk_id, size)
        table.add_row(str(chunk.index), f"{chunk.start:,}", f"{chunk.end:,}", f"{chunk.size:,}")

    console.print(table)


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
