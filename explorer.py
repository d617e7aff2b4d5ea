#!/usr/bin/env python3
"""Book Search CLI - live catalog search from the terminal."""
import argparse
import asyncio
import sys
import logging

from booksearch.async_client import AsyncGoogleBooksClient
from booksearch.client import GoogleBooksClient, ThreadedCatalog
from booksearch.config import Config
from booksearch.models import Empty, Error, SearchScope, Success
from booksearch.orchestrator import SearchOrchestrator
from booksearch.render import render_state

logger = logging.getLogger(__name__)

SCOPE_COMMANDS = {
    ":all": SearchScope.ALL,
    ":title": SearchScope.TITLE,
    ":author": SearchScope.AUTHOR,
}
FINAL_STATES = (Success, Empty, Error)


def setup_logging(config: Config):
    """Configure root logging."""
    logging.basicConfig(
        level=getattr(logging, config.LOG_LEVEL, logging.INFO),
        format='%(asctime)s - %(levelname)s - %(message)s'
    )


async def search_once(args, config: Config) -> int:
    """Run one orchestrated search and print its outcome."""
    if not args.query.strip():
        logger.error("Search query must not be blank")
        return 1

    if args.use_sync:
        with GoogleBooksClient(
            api_key=config.GOOGLE_BOOKS_API_KEY,
            timeout=config.DEFAULT_TIMEOUT,
            max_results=config.DEFAULT_MAX_RESULTS,
            max_retries=config.DEFAULT_MAX_RETRIES
        ) as client:
            return await run_search(ThreadedCatalog(client), args, config)

    async with AsyncGoogleBooksClient(
        api_key=config.GOOGLE_BOOKS_API_KEY,
        timeout=config.DEFAULT_TIMEOUT,
        max_results=config.DEFAULT_MAX_RESULTS
    ) as client:
        return await run_search(client, args, config)


async def run_search(catalog, args, config: Config) -> int:
    """Drive the orchestrator until the search settles."""
    orchestrator = SearchOrchestrator(catalog, debounce_interval=config.SEARCH_DEBOUNCE_SECONDS)
    try:
        orchestrator.set_scope(SearchScope(args.scope))
        orchestrator.set_query_text(args.query)

        async for state in orchestrator.observe_state():
            if isinstance(state, FINAL_STATES):
                print("\n" + render_state(state, args.format))
                return 1 if isinstance(state, Error) else 0
        return 0
    finally:
        await orchestrator.aclose()


async def print_states(orchestrator: SearchOrchestrator, format_type: str):
    """Print every state change until cancelled."""
    async for state in orchestrator.observe_state():
        print("\n" + render_state(state, format_type), flush=True)


async def interactive(args, config: Config) -> int:
    """Live search session driven by stdin lines."""
    async with AsyncGoogleBooksClient(
        api_key=config.GOOGLE_BOOKS_API_KEY,
        timeout=config.DEFAULT_TIMEOUT,
        max_results=config.DEFAULT_MAX_RESULTS
    ) as client:
        orchestrator = SearchOrchestrator(client, debounce_interval=config.SEARCH_DEBOUNCE_SECONDS)
        orchestrator.set_scope(SearchScope(args.scope))
        printer = asyncio.create_task(print_states(orchestrator, args.format))

        try:
            while True:
                line = await asyncio.to_thread(sys.stdin.readline)
                if not line:
                    break
                command = line.rstrip("\n")

                if command == ":quit":
                    break
                elif command in SCOPE_COMMANDS:
                    orchestrator.set_scope(SCOPE_COMMANDS[command])
                elif command == ":retry":
                    orchestrator.retry()
                elif command == ":clear":
                    orchestrator.clear()
                else:
                    orchestrator.set_query_text(command)
        finally:
            printer.cancel()
            await asyncio.gather(printer, return_exceptions=True)
            await orchestrator.aclose()

    return 0


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Book Search - live Google Books catalog search",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # One-shot search
  %(prog)s search "dune"

  # Author-only search using the blocking client
  %(prog)s search "herbert" --scope author --sync --format compact

  # Live session (type queries, :title/:author/:all, :retry, :clear, :quit)
  %(prog)s interactive --format compact
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")
    scopes = [scope.value for scope in SearchScope]
    formats = ["table", "json", "compact"]

    # Search command
    search_parser = subparsers.add_parser("search", help="Search for books")
    search_parser.add_argument("query", help="Search query")
    search_parser.add_argument("--scope", choices=scopes, default="all", help="Search scope")
    search_parser.add_argument("--format", choices=formats, default="table", help="Output format")
    search_parser.add_argument("--sync", dest="use_sync", action="store_true", help="Use blocking client with retries")

    # Interactive command
    interactive_parser = subparsers.add_parser("interactive", help="Live search session")
    interactive_parser.add_argument("--scope", choices=scopes, default="all", help="Initial search scope")
    interactive_parser.add_argument("--format", choices=formats, default="compact", help="Output format")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    config = Config()
    setup_logging(config)

    try:
        if args.command == "search":
            sys.exit(asyncio.run(search_once(args, config)))

        elif args.command == "interactive":
            sys.exit(asyncio.run(interactive(args, config)))

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(0)
    except Exception as e:
        logger.error(f"Error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
