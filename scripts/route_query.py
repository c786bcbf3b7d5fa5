#!/usr/bin/env python3
"""
Route queries through the intent router in-process.

Usage:
  python scripts/route_query.py "who owns intel" "late stage deals"
  python scripts/route_query.py --stats
  python scripts/route_query.py --health
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))
from dotenv import load_dotenv

load_dotenv(Path(__file__).parent.parent / ".env")

from rich.console import Console
from rich.table import Table

from intent_router.core.errors import IntentRouterError
from intent_router.core.intent.router import get_router

METHODS = ("pattern", "semantic", "trained_model")

console = Console()


def _confidence_style(confidence: float) -> str:
    if confidence >= 0.8:
        return "green"
    if confidence >= 0.6:
        return "yellow"
    return "red"


def _render(results) -> Table:
    table = Table(title="Intent routing", show_lines=False)
    table.add_column("query", style="cyan", max_width=40)
    table.add_column("intent", style="bold")
    table.add_column("conf", justify="right")
    table.add_column("winner")
    for method in METHODS:
        table.add_column(method, justify="right")
    table.add_column("ms", justify="right", style="dim")

    for query, result in results:
        style = _confidence_style(result.confidence)
        per_method = []
        for method in METHODS:
            sub = result.method_results.get(method)
            if sub is None:
                per_method.append("[dim]-[/dim]")
            else:
                per_method.append(f"{sub.intent} {sub.confidence:.2f}")
        table.add_row(
            query,
            result.intent,
            f"[{style}]{result.confidence:.3f}[/{style}]",
            result.winning_method or "none",
            *per_method,
            f"{result.latency_ms:.1f}",
        )
    return table


async def route_queries(queries: list[str]) -> int:
    router = get_router()
    await router.warm_up()
    results = []
    for query in queries:
        try:
            results.append((query, await router.classify(query)))
        except IntentRouterError as e:
            console.print(f"[red]✗ {query!r}: {e.message}[/red]")
    if results:
        console.print(_render(results))
    return 0 if len(results) == len(queries) else 1


async def show_health() -> int:
    report = await get_router().health_check()
    table = Table(title=f"Health: {report['status']}")
    table.add_column("component")
    table.add_column("state")
    table.add_column("latency", justify="right")
    table.add_column("message")
    for c in report["components"]:
        table.add_row(c["name"], c["state"], f"{c['latency_ms']:.1f} ms", c["message"])
    console.print(table)
    return 0 if report["status"] != "unhealthy" else 1


def main():
    parser = argparse.ArgumentParser(
        description="Intent router - classify queries from the terminal",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("queries", nargs="*", help="Queries to classify (reads stdin lines when omitted)")
    parser.add_argument("--stats", action="store_true", help="Print router statistics as JSON")
    parser.add_argument("--health", action="store_true", help="Run the component health checks")
    args = parser.parse_args()

    with console.status("Building router (training classifier)..."):
        get_router()

    if args.stats:
        console.print_json(json.dumps(get_router().get_stats(), default=str))
        return 0
    if args.health:
        return asyncio.run(show_health())

    queries = args.queries or [line.strip() for line in sys.stdin if line.strip()]
    if not queries:
        parser.print_usage()
        return 2
    return asyncio.run(route_queries(queries))


if __name__ == "__main__":
    sys.exit(main())
