"""
Shared html shell for every server rendered page
"""

from html import escape
from typing import Optional

from promptshelf_commons.api_schema.prompt_schema import Prompt

SITE_TITLE = "Simple Prompt Storage"

NAV_LINKS = [
    ("/prompts", "prompts"),
    ("/dashboard/prompts", "dashboard"),
    ("/docs/getting-started", "docs"),
]

BASE_CSS = """
body { font-family: ui-monospace, Menlo, Consolas, monospace; margin: 0; color: #111; background: #fafafa; }
header, main, footer { max-width: 1100px; margin: 0 auto; padding: 1rem; }
header nav a { margin-right: 1.5rem; }
a { color: inherit; }
pre { white-space: pre-wrap; }
.card { border: 1px dashed #888; padding: .75rem; background: #fff; }
.card pre { max-height: 200px; overflow-y: auto; font-size: .85rem; }
.grid { display: grid; gap: 1rem; grid-template-columns: repeat(auto-fill, minmax(300px, 1fr)); }
.muted { color: #666; }
.error { color: #b00020; }
.tag { border: 1px solid #888; padding: 0 .3rem; margin-right: .3rem; font-size: .75rem; }
form label { display: block; margin-top: .75rem; }
form input, form textarea, form select { width: 100%; font-family: inherit; }
table { border-collapse: collapse; width: 100%; }
td, th { border: 1px dashed #888; padding: .4rem; text-align: left; }
"""


def render_page(title: str, body: str, extra_head: str = "") -> str:
    """
    Wrap page content in the site shell

    Args:
        title (str): Page title, escaped here
        body (str): Already escaped html for the main element
        extra_head (str): Raw html appended to the head element

    Returns:
        str: Full html document
    """
    nav = "".join(f'<a href="{href}">[{label}]</a>' for href, label in NAV_LINKS)
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>{escape(title)} | {SITE_TITLE}</title>
<style>{BASE_CSS}</style>
{extra_head}
</head>
<body>
<header><a href="/"><strong>+-- {SITE_TITLE} --+</strong></a><nav>{nav}</nav></header>
<main>
{body}
</main>
<footer class="muted">Free now while in alpha</footer>
</body>
</html>"""


def render_tags(tags: Optional[list[str]]) -> str:
    return "".join(f'<span class="tag">{escape(tag)}</span>' for tag in tags or [])


def render_prompt_card(prompt: Prompt, actions: str = "") -> str:
    """
    Render one prompt as a card of the listing grid

    Args:
        prompt (Prompt): The prompt to show
        actions (str): Extra html placed in the card footer

    Returns:
        str: Html of the card
    """
    description = prompt.metadata.description if prompt.metadata else None
    return f"""<div class="card" data-prompt-id="{escape(prompt.id)}">
<h3>{escape(prompt.display_name)}</h3>
<p class="muted">{escape(description or "")}</p>
<a href="/prompt/{escape(prompt.id)}"><pre>{escape(prompt.content)}</pre></a>
<div>{render_tags(prompt.tags)}</div>
{actions}
</div>"""


def render_field_errors(errors: dict[str, list[str]], field: str) -> str:
    messages = errors.get(field, [])
    return "".join(f'<p class="error">{escape(message)}</p>' for message in messages)
