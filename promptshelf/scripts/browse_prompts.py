"""
Page through the hosted prompts from a terminal.

Usage:
    python -m promptshelf.scripts.browse_prompts
    python -m promptshelf.scripts.browse_prompts --limit 5 --category rust

Commands:
    <enter>      load the next page
    c <name>     switch category ("c" alone clears the filter)
    q            quit
"""

import argparse
import asyncio
from typing import Awaitable, Callable, Optional

from promptshelf.server import PAGINATION
from promptshelf.server.services.gateway.prompt_gateway import PromptGateway
from promptshelf.server.services.pagination.paginated_list_controller import (
    LoadResult,
    PaginatedListController,
)

ReadLine = Callable[[], Awaitable[Optional[str]]]


async def _read_stdin() -> Optional[str]:
    try:
        return await asyncio.to_thread(input, "> ")
    except EOFError:
        return None


def _print_new_items(controller: PaginatedListController, start: int) -> None:
    for index, prompt in enumerate(controller.items[start:], start=start + 1):
        preview = prompt.content.replace("\n", " ")[:60]
        print(f"{index:>4}. [{prompt.category or '-'}] {prompt.display_name}: {preview}")


def _print_result(controller: PaginatedListController, result: LoadResult) -> None:
    if result == LoadResult.EXHAUSTED:
        print("-- end of prompts --")
    elif result == LoadResult.FAILED:
        print(f"Failed to load prompts: {controller.error}")


async def browse(controller: PaginatedListController, read_line: ReadLine) -> None:
    """
    Run the pager until the user quits or input ends

    Args:
        controller (PaginatedListController): Controller holding the listing state
        read_line (ReadLine): Returns the next command, None at end of input
    """
    start = len(controller.items)
    result = await controller.notify_near_end()
    _print_new_items(controller, start)
    _print_result(controller, result)

    while True:
        line = await read_line()
        if line is None:
            return
        command = line.strip()
        if command == "q":
            return

        start = len(controller.items)
        if command == "c" or command.startswith("c "):
            category = command[1:].strip() or None
            print(f"== category: {category or 'all'} ==")
            start = 0
            result = await controller.set_category(category)
        elif command == "":
            if not controller.has_more:
                print("-- end of prompts --")
                continue
            result = await controller.notify_near_end()
        else:
            print("commands: <enter> next page, c <name> category, q quit")
            continue
        _print_new_items(controller, start)
        _print_result(controller, result)


def main():
    parser = argparse.ArgumentParser(description="Browse stored prompts page by page")
    parser.add_argument(
        "--limit", type=int, default=PAGINATION.page_size, help="Prompts per page"
    )
    parser.add_argument("--category", default=None, help="Category filter")
    args = parser.parse_args()

    gateway = PromptGateway()

    async def fetch_page(offset: int, limit: int, category: Optional[str]):
        return await gateway.list_prompts(offset=offset, limit=limit, category=category)

    controller = PaginatedListController(
        fetch_page, limit=args.limit, category=args.category
    )
    asyncio.run(browse(controller, _read_stdin))


if __name__ == "__main__":
    main()
