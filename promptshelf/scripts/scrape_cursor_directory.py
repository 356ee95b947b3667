"""
Seed the hosted prompt storage with the rules published on cursor.directory.

Usage:
    python -m promptshelf.scripts.scrape_cursor_directory
    python -m promptshelf.scripts.scrape_cursor_directory --sections rust python
    python -m promptshelf.scripts.scrape_cursor_directory --dry-run
"""

import argparse
import html
import logging
import re
from typing import Optional

import requests

from promptshelf_client import PromptStorageClient
from promptshelf_client.errors import PromptStorageError
from promptshelf_commons.api_schema.prompt_schema import PromptCreateParams
from promptshelf.server import (
    PROMPT_STORAGE_API_KEY,
    PROMPT_STORAGE_API_URL,
    PROMPT_STORAGE_TIMEOUT_SECONDS,
)

logger = logging.getLogger(__name__)

CURSOR_DIRECTORY_URL = "https://cursor.directory/rules"

DEFAULT_SECTIONS = [
    "typescript",
    "next.js",
    "python",
    "react",
    "php",
    "javascript",
    "tailwindcss",
    "node.js",
    "graphql",
    "testing",
    "supabase",
    "rust",
    "swift",
    "vite",
    "fastapi",
    "browser-api",
]

# rule bodies are rendered as <code class="text-sm block pr-3">
RULE_CLASSES = {"text-sm", "block", "pr-3"}
CODE_TAG_PATTERN = re.compile(r"<(/?)code\b([^>]*)>", re.I)
CLASS_ATTR_PATTERN = re.compile(r"""class\s*=\s*["']([^"']*)["']""", re.I)
TAG_PATTERN = re.compile(r"<[^>]+>")


def _outer_code_elements(page_html: str) -> list[tuple[str, str]]:
    """
    Return (attributes, inner html) of every top level <code> element.
    Nested <code> elements stay part of their parent's inner html.
    """
    elements = []
    depth = 0
    attrs = ""
    inner_start = 0
    for match in CODE_TAG_PATTERN.finditer(page_html):
        if not match.group(1):
            if depth == 0:
                attrs = match.group(2)
                inner_start = match.end()
            depth += 1
        elif depth > 0:
            depth -= 1
            if depth == 0:
                elements.append((attrs, page_html[inner_start : match.start()]))
    return elements


def extract_rules(page_html: str) -> list[str]:
    """
    Extract the text of every rule code block of a rules page

    Args:
        page_html (str): Html of https://cursor.directory/rules/<section>

    Returns:
        list[str]: Rule texts in page order, blank blocks dropped
    """
    rules = []
    for attrs, inner in _outer_code_elements(page_html):
        class_match = CLASS_ATTR_PATTERN.search(attrs)
        if not class_match or not RULE_CLASSES.issubset(class_match.group(1).split()):
            continue
        text = html.unescape(TAG_PATTERN.sub("", inner)).strip()
        if text:
            rules.append(text)
    return rules


def fetch_section_rules(
    section: str, session: Optional[requests.Session] = None, timeout: int = 30
) -> list[str]:
    """
    Download one rules section and extract its rules

    Raises:
        requests.RequestException: If the page could not be fetched
    """
    session = session or requests.Session()
    response = session.get(f"{CURSOR_DIRECTORY_URL}/{section}", timeout=timeout)
    response.raise_for_status()
    return extract_rules(response.text)


def scrape_sections(
    sections: list[str],
    client: Optional[PromptStorageClient],
    session: Optional[requests.Session] = None,
) -> dict[str, int]:
    """
    Create one prompt per scraped rule; a failing section is logged and skipped

    Args:
        sections (list[str]): Section slugs to scrape
        client (Optional[PromptStorageClient]): Client used to create prompts, None for a dry run
        session (Optional[requests.Session]): Session used to download the pages

    Returns:
        dict[str, int]: Number of rules handled per section that did not fail
    """
    session = session or requests.Session()
    results = {}
    for section in sections:
        try:
            rules = fetch_section_rules(section, session=session)
            logger.info("Found %d rules for %s", len(rules), section)
            if client is not None:
                for rule in rules:
                    client.create_prompt(
                        PromptCreateParams(content=rule, name=section, tags=[section])
                    )
        except (requests.RequestException, PromptStorageError) as e:
            logger.error("Failed to fetch rules for %s: %s", section, e)
            continue
        results[section] = len(rules)
    return results


def main():
    parser = argparse.ArgumentParser(
        description="Create prompts from the rules published on cursor.directory"
    )
    parser.add_argument(
        "--sections",
        nargs="+",
        default=DEFAULT_SECTIONS,
        help="Sections to scrape (default: all known sections)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Only count the rules, do not create prompts",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(name)s - %(levelname)s - %(message)s")

    client = None
    if not args.dry_run:
        client = PromptStorageClient(
            api_key=PROMPT_STORAGE_API_KEY,
            url_endpoint=PROMPT_STORAGE_API_URL,
            timeout=PROMPT_STORAGE_TIMEOUT_SECONDS,
        )

    results = scrape_sections(args.sections, client)
    print(f"{'Section':<20} {'Rules'}")
    print("-" * 30)
    for section, count in results.items():
        print(f"{section:<20} {count}")
    skipped = [section for section in args.sections if section not in results]
    if skipped:
        print(f"Skipped: {', '.join(skipped)}")


if __name__ == "__main__":
    main()
