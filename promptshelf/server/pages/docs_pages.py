"""
Static documentation pages for the hosted prompt storage api
"""

from dataclasses import dataclass, field
from html import escape

from promptshelf_client.client import DEFAULT_BACKEND_URL
from promptshelf.server.pages.layout import render_page

DOCS_LINKS = [
    ("/docs/getting-started", "getting started"),
    ("/docs/api", "api"),
    ("/docs/api/create", "  create"),
    ("/docs/api/read", "  read"),
    ("/docs/api/update", "  update"),
    ("/docs/api/delete", "  delete"),
    ("/docs/openapi-spec", "openapi spec"),
    ("/docs/pricing", "pricing"),
    ("/docs/upcoming-features", "upcoming features"),
]

UPCOMING_FEATURES = [
    "Prompt Chaining",
    "Evaluations",
    "Prompt Versioning",
    "Documentation",
    "Prompt Generator",
    "LLM Model Directory",
    "Prompt Enhancers",
    "Batch Testing",
]


@dataclass
class Parameter:
    name: str
    type: str
    required: bool
    description: str


@dataclass
class Endpoint:
    method: str
    route: str
    description: str
    response: str
    parameters: list[Parameter] = field(default_factory=list)
    snippet: str = ""


CLIENT_SETUP = """from promptshelf_client import (
    PromptContentParams,
    PromptCreateParams,
    PromptListParams,
    PromptRetrieveParams,
    PromptStorageClient,
    PromptUpdateMetadataParams,
    PromptUpdateParams,
)

client = PromptStorageClient(api_key="sk_...")
"""

API_SECTIONS: dict[str, list[Endpoint]] = {
    "create": [
        Endpoint(
            method="POST",
            route="/prompt",
            description="Create prompt or update it by passing the parent id",
            response="201 - Prompt id | 400 - Invalid request body",
            parameters=[
                Parameter("content", "string", True, "The content of the prompt"),
                Parameter(
                    "parent",
                    "string | null",
                    False,
                    "The parent of the prompt. Leave empty for a new prompt with no lineage.",
                ),
                Parameter("name", "string | null", False, "The name of the prompt"),
                Parameter(
                    "description", "string | null", False, "The description of the prompt"
                ),
                Parameter("category", "string | null", False, "The category of the prompt"),
                Parameter("tags", "string[] | null", False, "The tags of the prompt"),
                Parameter(
                    "branched", "boolean | null", False, "Whether the prompt is being branched"
                ),
            ],
            snippet="""prompt_id = client.create_prompt(
    PromptCreateParams(
        content="Your prompt content here",
        name="My Prompt",
        description="A description of the prompt",
        category="typescript",
        tags=["react", "typescript"],
    )
)""",
        )
    ],
    "read": [
        Endpoint(
            method="GET",
            route="/prompt/{id}",
            description="Get entire prompt with option to include metadata",
            response="200 - Prompt object | 404 - Prompt not found | 500 - Internal server error",
            parameters=[
                Parameter("id", "string", True, "Prompt identifier"),
                Parameter(
                    "metadata", "boolean", False, "Whether to include metadata in the response"
                ),
            ],
            snippet="""# with metadata
prompt = client.retrieve_prompt("prompt_id")

# without metadata
prompt = client.retrieve_prompt("prompt_id", PromptRetrieveParams(metadata=False))""",
        ),
        Endpoint(
            method="GET",
            route="/prompt/{id}/content",
            description="Get prompt content",
            response="200 - Prompt content (text/plain) | 404 - Prompt not found | 500 - Internal server error",
            parameters=[
                Parameter("id", "string", True, "Prompt identifier"),
                Parameter("latest", "boolean", False, "Latest version of the prompt"),
            ],
            snippet="""content = client.retrieve_prompt_content("prompt_id", PromptContentParams(latest=True))""",
        ),
        Endpoint(
            method="GET",
            route="/prompts",
            description="Get list of prompts with pagination",
            response="200 - Array of Prompt objects | 400 - Invalid request body",
            parameters=[
                Parameter(
                    "category", "string", False, "The category of the prompts to return"
                ),
                Parameter(
                    "offset",
                    "integer",
                    False,
                    "The pagination offset to start from (0-based). Default is 0.",
                ),
                Parameter("limit", "integer", False, "The number of prompts to return."),
            ],
            snippet="""prompts = client.list_prompts(PromptListParams(offset=0, limit=20, category="rust"))""",
        ),
        Endpoint(
            method="GET",
            route="/prompt/categories",
            description="Get the categories used by stored prompts",
            response="200 - Array of strings",
            snippet="""categories = client.list_categories()""",
        ),
    ],
    "update": [
        Endpoint(
            method="PUT",
            route="/prompt",
            description="Replace the content of a prompt",
            response="200 - Prompt id | 400 - Invalid request body | 404 - Prompt not found",
            parameters=[
                Parameter("id", "string", True, "Prompt identifier"),
                Parameter("content", "string", True, "The new content of the prompt"),
            ],
            snippet="""client.update_prompt(
    PromptUpdateParams(id="prompt_id", content="Your updated prompt content")
)""",
        ),
        Endpoint(
            method="PUT",
            route="/prompt/metadata",
            description="Update prompt metadata",
            response="200 - Prompt id | 400 - Invalid request body | 404 - Prompt not found",
            parameters=[
                Parameter("id", "string", True, "Prompt identifier"),
                Parameter("name", "string | null", False, "The new name"),
                Parameter("description", "string | null", False, "The new description"),
                Parameter("category", "string | null", False, "The new category"),
                Parameter("tags", "string[] | null", False, "The new tags"),
            ],
            snippet="""client.update_prompt_metadata(
    PromptUpdateMetadataParams(
        id="prompt_id",
        name="Updated Prompt Name",
        description="Updated description",
        category="typescript",
        tags=["typescript", "javascript"],
    )
)""",
        )
    ],
    "delete": [
        Endpoint(
            method="DELETE",
            route="/prompt/{id}",
            description="Delete a prompt by id",
            response="200 - Deleted | 404 - Prompt not found",
            parameters=[Parameter("id", "string", True, "Prompt identifier")],
            snippet="""client.delete_prompt("prompt_id")""",
        )
    ],
}


def render_docs_page(title: str, content: str) -> str:
    sidebar = "<br>".join(
        f'<a href="{href}">{escape(label).replace(" ", "&nbsp;")}</a>'
        for href, label in DOCS_LINKS
    )
    body = f"""<div style="display: flex; gap: 2rem">
<aside style="min-width: 180px">{sidebar}</aside>
<article style="flex: 1">{content}</article>
</div>"""
    return render_page(title, body)


def render_getting_started_page() -> str:
    content = f"""<h1>Getting Started</h1>
<p>Welcome to Simple Prompt Storage! Choose your preferred method to get started:</p>
<h2>Installation</h2>
<h3>Python client</h3>
<pre>pip install promptshelf</pre>
<pre>{escape(CLIENT_SETUP)}</pre>
<h3>cURL / REST API</h3>
<p>Use the REST API directly with cURL or any HTTP client. See the
<a href="/docs/api">API documentation</a> for detailed endpoints.</p>
<pre>curl "{DEFAULT_BACKEND_URL}/prompts?offset=0&amp;limit=10"</pre>"""
    return render_docs_page("Getting Started", content)


def render_api_index_page() -> str:
    content = f"""<h1>API Overview</h1>
<p>The Simple Prompt Storage API provides endpoints for managing prompts with full CRUD operations.</p>
<h3><a href="/docs/api/create">Create</a></h3>
<p>Create new prompts or update existing ones by specifying a parent ID.</p>
<h3><a href="/docs/api/read">Read</a></h3>
<p>Retrieve prompts, their content, and lists of prompts with pagination support.</p>
<h3><a href="/docs/api/update">Update</a></h3>
<p>Update prompt metadata including name, description, category, and tags.</p>
<h3><a href="/docs/api/delete">Delete</a></h3>
<p>Delete prompts by their unique identifier.</p>
<h4>Base URLs</h4>
<p><strong>Production:</strong> <code>{DEFAULT_BACKEND_URL}</code></p>
<p><strong>Local:</strong> <code>http://localhost:8080</code></p>"""
    return render_docs_page("API", content)


def _render_endpoint(endpoint: Endpoint) -> str:
    rows = "".join(
        f"<tr><td><code>{escape(p.name)}</code></td><td>{escape(p.type)}</td>"
        f"<td>{'yes' if p.required else 'no'}</td><td>{escape(p.description)}</td></tr>"
        for p in endpoint.parameters
    )
    table = ""
    if rows:
        table = f"<table><tr><th>name</th><th>type</th><th>required</th><th>description</th></tr>{rows}</table>"
    snippet = f"<pre>{escape(endpoint.snippet)}</pre>" if endpoint.snippet else ""
    return f"""<section class="card">
<h2><code>{endpoint.method} {escape(endpoint.route)}</code></h2>
<p>{escape(endpoint.description)}</p>
{table}
<p class="muted">{escape(endpoint.response)}</p>
{snippet}
</section>"""


def render_api_section_page(section: str) -> str:
    """
    Render the endpoints of one api section

    Args:
        section (str): One of create, read, update or delete

    Returns:
        str: Full html document

    Raises:
        KeyError: If the section is unknown
    """
    endpoints = API_SECTIONS[section]
    content = (
        f"<h1>{escape(section.capitalize())}</h1>"
        f"<pre>{escape(CLIENT_SETUP)}</pre>"
        + "".join(
            _render_endpoint(endpoint) for endpoint in endpoints
        )
    )
    return render_docs_page(f"API {section}", content)


def render_pricing_page() -> str:
    return render_docs_page("Pricing", "<h1>Pricing</h1>\n<p>Free now while in alpha</p>")


def render_upcoming_features_page() -> str:
    features = "".join(
        f'<div class="card"><h3>{escape(feature)}</h3></div>'
        for feature in UPCOMING_FEATURES
    )
    return render_docs_page(
        "Upcoming Features",
        f'<h1>Upcoming Features</h1>\n<div class="grid">{features}</div>',
    )


def render_openapi_spec_page() -> str:
    swagger_url = f"{DEFAULT_BACKEND_URL}/swagger-ui"
    lines = [
        "openapi: 3.1.0",
        "info:",
        "  title: Simple Prompt Storage API",
        "  version: 0.0.1",
        "servers:",
        f"- url: {DEFAULT_BACKEND_URL}",
        "  description: Production path",
        "- url: http://localhost:8080",
        "  description: Local path",
        "paths:",
    ]
    for endpoints in API_SECTIONS.values():
        for endpoint in endpoints:
            lines.append(f"  {endpoint.route}:")
            lines.append(f"    {endpoint.method.lower()}:")
            lines.append(f"      summary: {endpoint.description}")
    spec_yaml = "\n".join(lines)
    content = f"""<h1>OpenAPI Specification</h1>
<p><a href="{swagger_url}" target="_blank" rel="noopener noreferrer">&gt;&gt; {swagger_url}</a></p>
<pre>{escape(spec_yaml)}</pre>"""
    return render_docs_page("OpenAPI Specification", content)
