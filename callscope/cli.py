"""
Callscope CLI

Commands:
- callscope chain AAPL        Call chain valuation tables per expiration
- callscope chart AAPL        One PNG chart per expiration
- callscope serve             HTTP service (GET /options?ticker=...)
"""
from __future__ import annotations

import json
from pathlib import Path

import typer

app = typer.Typer(
    add_completion=False,
    help="""Callscope CLI — call option valuation from Massive snapshots

\b
  callscope chain AAPL          Premium, intrinsic/extrinsic, targets
  callscope chart AAPL -o out   Per-expiration charts
  callscope serve               JSON API for the chart UI

\b
Run 'callscope <command> --help' for details.
""",
)


def _fmt(v: float | None) -> str:
    if v is None:
        return "-"
    return f"${v:,.2f}"


def _run(ticker: str, verbose: bool):
    from rich.console import Console

    from callscope.errors import CallscopeError
    from callscope.options.pipeline import build_chain
    from callscope.utils.logging import DiagnosticLog

    console = Console()
    diag = DiagnosticLog(ticker=ticker)
    try:
        result = build_chain(ticker, diag=diag)
    except CallscopeError as e:
        console.print(f"[red]{e.message}[/red]")
        if e.details:
            console.print(f"[dim]{e.details[:500]}[/dim]")
        raise typer.Exit(code=1)
    finally:
        if verbose:
            diag.print()
    return result


@app.command("chain")
def chain_cmd(
    ticker: str = typer.Argument(..., help="Underlying ticker symbol"),
    as_json: bool = typer.Option(False, "--json", help="Print the raw JSON payload"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Print diagnostic events"),
):
    """Call chain valuation, one table per expiration."""
    from rich.console import Console
    from rich.table import Table

    result = _run(ticker, verbose)
    console = Console()

    if as_json:
        console.print_json(json.dumps(result.to_dict()))
        return

    console.print(
        f"[bold]{result.ticker}[/bold]  spot {_fmt(result.underlying_price)}  "
        f"[dim]{len(result.expirations)} expirations · {len(result.options)} calls · {result.pages_fetched} page(s)[/dim]"
    )
    for expiration, rows in result.by_expiration().items():
        if not rows:
            console.print(f"[dim]Expiry {expiration}: no options available.[/dim]")
            continue
        table = Table(title=f"Expiry {expiration}", title_justify="left")
        table.add_column("Strike", justify="right")
        table.add_column("Premium", justify="right")
        table.add_column("Intrinsic", justify="right", style="green")
        table.add_column("Extrinsic", justify="right", style="blue")
        table.add_column("Break-even", justify="right", style="yellow")
        table.add_column("2×", justify="right")
        table.add_column("3×", justify="right")
        table.add_column("4×", justify="right")
        for o in rows:
            table.add_row(
                _fmt(o.strike),
                _fmt(o.premium),
                _fmt(o.intrinsic),
                _fmt(o.extrinsic),
                _fmt(o.break_even),
                _fmt(o.target2x),
                _fmt(o.target3x),
                _fmt(o.target4x),
            )
        console.print(table)


@app.command("chart")
def chart_cmd(
    ticker: str = typer.Argument(..., help="Underlying ticker symbol"),
    out: Path = typer.Option(Path("charts"), "--out", "-o", help="Output directory"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Print diagnostic events"),
):
    """Render one PNG chart per expiration."""
    from rich.console import Console

    from callscope.options.chart import render_chain_charts

    result = _run(ticker, verbose)
    paths = render_chain_charts(result, out)
    console = Console()
    if not paths:
        console.print("[yellow]No options available to chart.[/yellow]")
        return
    for p in paths:
        console.print(f"[green]wrote[/green] {p}")


@app.command("serve")
def serve_cmd(
    host: str = typer.Option("127.0.0.1", "--host", help="Bind address"),
    port: int = typer.Option(5000, "--port", "-p", help="Port"),
    debug: bool = typer.Option(False, "--debug", help="Flask debug mode"),
):
    """Run the JSON API (GET /options?ticker=...)."""
    from dashboard.app import create_app

    create_app().run(host=host, port=port, debug=debug)


def main():
    app()


if __name__ == "__main__":
    main()
