"""
Public pages: home, the prompt listing, prompt detail and not found
"""

import json
from datetime import datetime, timezone
from html import escape
from typing import Optional
from urllib.parse import quote

from promptshelf_commons.api_schema.prompt_schema import Prompt
from promptshelf.server.pages.layout import render_page, render_prompt_card, render_tags


def render_home_page() -> str:
    body = """<h1>Simple Prompt Storage</h1>
<p>Store your system prompts once and fetch them from any app.
Update a prompt without shipping a new deployment.</p>
<pre>
+-------------+        +-----------------+        +---------+
|  your app   | -----> |  prompt storage | -----> | content |
+-------------+  GET   +-----------------+        +---------+
</pre>
<p><a href="/prompts">&gt;&gt; browse prompts</a></p>
<p><a href="/dashboard/create">&gt;&gt; create a prompt</a></p>
<p><a href="/docs/getting-started">&gt;&gt; read the docs</a></p>"""
    return render_page("Home", body)


# Pages through /api/prompts while the sentinel is in view. Only one request
# is in flight at a time; an empty page stops further requests. A failed page
# waits for the retry link.
INFINITE_SCROLL_SCRIPT = """<script>
(function () {
  var config = JSON.parse(document.getElementById("listing-config").textContent);
  var state = { offset: config.offset, loading: false, hasMore: true };
  var grid = document.getElementById("prompt-grid");
  var sentinel = document.getElementById("sentinel");
  var status = document.getElementById("listing-status");

  function text(value) {
    var node = document.createElement("div");
    node.textContent = value == null ? "" : String(value);
    return node.innerHTML;
  }

  function card(prompt) {
    var meta = prompt.metadata || {};
    var tags = (meta.tags || []).map(function (tag) {
      return '<span class="tag">' + text(tag) + "</span>";
    }).join("");
    return '<div class="card" data-prompt-id="' + text(prompt.id) + '">' +
      "<h3>" + text(meta.name || "Prompt missing name") + "</h3>" +
      '<p class="muted">' + text(meta.description) + "</p>" +
      '<a href="/prompt/' + encodeURIComponent(prompt.id) + '"><pre>' + text(prompt.content) + "</pre></a>" +
      "<div>" + tags + "</div></div>";
  }

  function loadMore() {
    if (state.loading || !state.hasMore) {
      return;
    }
    state.loading = true;
    status.textContent = "loading...";
    var params = new URLSearchParams({ offset: state.offset, limit: config.limit });
    if (config.category) {
      params.set("category", config.category);
    }
    fetch("/api/prompts?" + params.toString())
      .then(function (response) {
        if (!response.ok) {
          throw new Error("HTTP " + response.status);
        }
        return response.json();
      })
      .then(function (page) {
        state.loading = false;
        if (page.length === 0) {
          state.hasMore = false;
          status.textContent = "-- end of prompts --";
          observer.disconnect();
          return;
        }
        grid.insertAdjacentHTML("beforeend", page.map(card).join(""));
        state.offset += page.length;
        status.textContent = "";
        // re-observing reports the sentinel again if it is still in view
        observer.unobserve(sentinel);
        observer.observe(sentinel);
      })
      .catch(function (error) {
        state.loading = false;
        status.textContent = "Failed to load more prompts: " + error.message + " ";
        var retry = document.createElement("a");
        retry.href = "#";
        retry.id = "listing-retry";
        retry.textContent = "retry";
        retry.addEventListener("click", function (event) {
          event.preventDefault();
          loadMore();
        });
        status.appendChild(retry);
      });
  }

  var observer = new IntersectionObserver(function (entries) {
    if (entries[0].isIntersecting) {
      loadMore();
    }
  }, { rootMargin: "200px" });
  observer.observe(sentinel);
})();
</script>"""


def render_category_filter(categories: list[str], selected: Optional[str]) -> str:
    options = ['<option value="">all categories</option>']
    for category in categories:
        is_selected = " selected" if category == selected else ""
        options.append(
            f'<option value="{escape(category)}"{is_selected}>{escape(category)}</option>'
        )
    return f"""<form method="get" action="/prompts">
<label>category <select name="category" onchange="this.form.submit()">{"".join(options)}</select></label>
<noscript><button type="submit">filter</button></noscript>
</form>"""


def render_prompts_page(
    prompts: list[Prompt],
    limit: int,
    category: Optional[str] = None,
    categories: Optional[list[str]] = None,
    error: Optional[str] = None,
) -> str:
    """
    Render the first page of the listing plus the sentinel that loads the rest

    Args:
        prompts (list[Prompt]): First page, fetched while rendering
        limit (int): Page size used by the script for the following pages
        category (Optional[str]): Active category filter
        categories (Optional[list[str]]): Options of the category filter
        error (Optional[str]): Message shown instead of the grid when the first page failed

    Returns:
        str: Full html document
    """
    if error:
        grid = f'<p class="error">{escape(error)}</p>'
    elif not prompts:
        grid = '<p class="muted">No prompts found</p>'
    else:
        grid = "".join(render_prompt_card(prompt) for prompt in prompts)

    # "</" must not appear inside the script element
    config = json.dumps(
        {"offset": len(prompts), "limit": limit, "category": category or ""}
    ).replace("</", "<\\/")
    body = f"""<h1>Prompts</h1>
{render_category_filter(categories or [], category)}
<div id="prompt-grid" class="grid">{grid}</div>
<div id="sentinel" style="height: 1px"></div>
<p id="listing-status" class="muted"></p>
<script type="application/json" id="listing-config">{config}</script>"""

    if error:
        return render_page("Prompts", body)
    return render_page("Prompts", body + INFINITE_SCROLL_SCRIPT)


def _format_timestamp(created_at: int) -> str:
    return datetime.fromtimestamp(created_at, tz=timezone.utc).strftime(
        "%Y-%m-%d %H:%M UTC"
    )


def render_prompt_detail_page(prompt: Prompt) -> str:
    """Detail view of one prompt, including its parent relation."""
    if prompt.has_parent:
        parent = f'<a href="/prompt/{quote(prompt.parent, safe="")}">{escape(prompt.parent)}</a>'
    else:
        parent = "parent == this.prompt"

    description = prompt.metadata.description if prompt.metadata else None
    body = f"""<h1>{escape(prompt.display_name)}</h1>
<p class="muted">{escape(description or "")}</p>
<table>
<tr><th>id</th><td><code>{escape(prompt.id)}</code></td></tr>
<tr><th>version</th><td>{prompt.version}</td></tr>
<tr><th>category</th><td>{escape(prompt.category or "-")}</td></tr>
<tr><th>tags</th><td>{render_tags(prompt.tags) or "-"}</td></tr>
<tr><th>parent</th><td>{parent}</td></tr>
<tr><th>created</th><td>{_format_timestamp(prompt.created_at)}</td></tr>
</table>
<h2>content</h2>
<div class="card"><pre>{escape(prompt.content)}</pre></div>
<p><a href="/prompts">&lt;&lt; back to prompts</a></p>"""
    return render_page(prompt.display_name, body)


def render_not_found_page(path: str = "") -> str:
    body = f"""<h1>404</h1>
<pre>
+---------------------------+
|   nothing lives here...   |
+---------------------------+
</pre>
<p class="muted">{escape(path)}</p>
<p><a href="/">&lt;&lt; home</a></p>"""
    return render_page("Not found", body)
