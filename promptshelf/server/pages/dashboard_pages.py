"""
Dashboard pages: my prompts, create and edit forms, placeholder api keys
"""

from html import escape
from typing import Optional
from urllib.parse import quote

from promptshelf_commons.api_schema.dashboard_schema import (
    MAX_PROMPT_TAGS,
    PROMPT_CATEGORIES,
    ApiKey,
)
from promptshelf_commons.api_schema.prompt_schema import Prompt
from promptshelf.server.pages.layout import (
    render_field_errors,
    render_page,
    render_prompt_card,
)

DASHBOARD_LINKS = [
    ("/dashboard/prompts", "my prompts"),
    ("/dashboard/create", "create"),
    ("/dashboard/api-keys", "api keys"),
]


def render_dashboard(title: str, content: str) -> str:
    links = " | ".join(
        f'<a href="{href}">{label}</a>' for href, label in DASHBOARD_LINKS
    )
    return render_page(title, f"<nav>{links}</nav>\n{content}")


# ==============================
# My prompts
# ==============================


def render_my_prompts_page(prompts: list[Prompt], error: Optional[str] = None) -> str:
    """
    Render the prompts saved in this browser profile

    Args:
        prompts (list[Prompt]): Resolved saved prompts
        error (Optional[str]): Inline error when the prompts could not be resolved

    Returns:
        str: Full html document
    """
    if error:
        listing = f'<p class="error">{escape(error)}</p>'
    elif not prompts:
        listing = '<p class="muted">No prompts yet. <a href="/dashboard/create">Create one</a>.</p>'
    else:
        cards = []
        for prompt in prompts:
            prompt_path = quote(prompt.id, safe="")
            actions = f"""<p><a href="/dashboard/prompts/{prompt_path}/edit">[edit]</a></p>
<form method="post" action="/dashboard/prompts/{prompt_path}/delete">
<button type="submit">[delete]</button>
</form>"""
            cards.append(render_prompt_card(prompt, actions))
        listing = f'<div class="grid">{"".join(cards)}</div>'
    return render_dashboard("My Prompts", f"<h1>My Prompts</h1>\n{listing}")


# ==============================
# Create and edit
# ==============================


def _render_metadata_fields(
    values: dict[str, str], errors: dict[str, list[str]]
) -> str:
    options = ['<option value="">select a category</option>']
    for category in PROMPT_CATEGORIES:
        selected = " selected" if values.get("category") == category else ""
        options.append(
            f'<option value="{escape(category)}"{selected}>{escape(category)}</option>'
        )
    return f"""<label>title <input name="title" value="{escape(values.get("title", ""))}"></label>
{render_field_errors(errors, "title")}
<label>description <input name="description" value="{escape(values.get("description", ""))}"></label>
{render_field_errors(errors, "description")}
<label>category <select name="category">{"".join(options)}</select></label>
{render_field_errors(errors, "category")}
<label>tags (comma separated, at most {MAX_PROMPT_TAGS}) <input name="tags" value="{escape(values.get("tags", ""))}"></label>
{render_field_errors(errors, "tags")}"""


def render_create_prompt_page(
    values: Optional[dict[str, str]] = None,
    errors: Optional[dict[str, list[str]]] = None,
    form_error: Optional[str] = None,
) -> str:
    """
    Render the create prompt form

    Args:
        values (Optional[dict[str, str]]): Previously submitted values to refill the form
        errors (Optional[dict[str, list[str]]]): Validation messages per field
        form_error (Optional[str]): Message for a failure that is not tied to a field

    Returns:
        str: Full html document
    """
    values = values or {}
    errors = errors or {}
    banner = f'<p class="error">{escape(form_error)}</p>' if form_error else ""
    content = f"""<h1>Create Prompt</h1>
{banner}
<form method="post" action="/dashboard/create">
{_render_metadata_fields(values, errors)}
<label>content <textarea name="content" rows="14">{escape(values.get("content", ""))}</textarea></label>
{render_field_errors(errors, "content")}
<p><button type="submit">[create prompt]</button></p>
</form>"""
    return render_dashboard("Create Prompt", content)


def render_edit_prompt_page(
    prompt: Prompt,
    values: Optional[dict[str, str]] = None,
    errors: Optional[dict[str, list[str]]] = None,
    form_error: Optional[str] = None,
    saved: bool = False,
) -> str:
    """Render the metadata form of a prompt; content is shown read only"""
    if values is None:
        metadata = prompt.metadata
        values = {
            "title": (metadata.name if metadata else None) or "",
            "description": (metadata.description if metadata else None) or "",
            "category": prompt.category or "",
            "tags": ", ".join(prompt.tags),
        }
    errors = errors or {}
    banner = ""
    if form_error:
        banner = f'<p class="error">{escape(form_error)}</p>'
    elif saved:
        banner = '<p class="muted">Saved.</p>'
    prompt_path = quote(prompt.id, safe="")
    content = f"""<h1>Edit Prompt</h1>
{banner}
<p class="muted">id <code>{escape(prompt.id)}</code></p>
<form method="post" action="/dashboard/prompts/{prompt_path}/edit">
{_render_metadata_fields(values, errors)}
<p><button type="submit">[save]</button></p>
</form>
<h2>content</h2>
<div class="card"><pre>{escape(prompt.content)}</pre></div>"""
    return render_dashboard("Edit Prompt", content)


# ==============================
# Api keys
# ==============================


def render_api_keys_page(
    api_keys: list[ApiKey],
    msg: Optional[str] = None,
    new_key: Optional[ApiKey] = None,
) -> str:
    """
    Render the placeholder api keys of this browser profile

    Args:
        api_keys (list[ApiKey]): Stored keys
        msg (Optional[str]): Inline error of the generate form
        new_key (Optional[ApiKey]): Key generated by this request, shown in full

    Returns:
        str: Full html document
    """
    if not api_keys:
        listing = '<p class="muted">No API Keys</p>'
    else:
        rows = []
        for api_key in api_keys:
            rows.append(
                f"""<tr><td>{escape(api_key.name)}</td><td><code>{escape(api_key.key)}</code></td>
<td>{escape(api_key.created_at)}</td>
<td><form method="post" action="/dashboard/api-keys/{quote(api_key.id, safe="")}/delete"><button type="submit">[delete]</button></form></td></tr>"""
            )
        listing = f"""<table>
<tr><th>name</th><th>key</th><th>created</th><th></th></tr>
{"".join(rows)}
</table>"""

    notice = ""
    if msg:
        notice = f'<p class="error">{escape(msg)}</p>'
    elif new_key:
        notice = f'<p>Generated <strong>{escape(new_key.name)}</strong>: <code>{escape(new_key.key)}</code></p>'

    content = f"""<h1>API Keys</h1>
<p class="muted">Keys are placeholders stored in this browser profile only.</p>
<form method="post" action="/dashboard/api-keys">
<label>name <input name="name"></label>
<p><button type="submit">[generate key]</button></p>
</form>
{notice}
{listing}"""
    return render_dashboard("API Keys", content)
