import asyncio
import logging
import os
import re
import secrets
from typing import Optional

from fastapi import Depends, FastAPI, Form, Request, status
from fastapi.exception_handlers import http_exception_handler
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from promptshelf_client.errors import PromptNotFoundError, PromptStorageError
from promptshelf_commons.api_schema.dashboard_schema import (
    CreatePromptForm,
    EditPromptForm,
    ErrorResponse,
    GenerateApiKeyForm,
)
from promptshelf.server import PAGINATION, PROFILE_COOKIE_NAME
from promptshelf.server.api_endpoints import dashboard_api, prompt_api
from promptshelf.server.api_endpoints.precondition_checks import split_tags
from promptshelf.server.api_endpoints.request_context import RequestContext
from promptshelf.server.cache.request_context_cache import (
    get_cache_stats,
    get_prompt_gateway,
    get_request_context,
)
from promptshelf.server.pages import dashboard_pages, docs_pages, public_pages
from promptshelf.server.pages.layout import render_page
from promptshelf.server.services.gateway.prompt_gateway import PromptGateway

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT_SECONDS = 60
PROFILE_COOKIE_MAX_AGE_SECONDS = 60 * 60 * 24 * 365
PROFILE_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,64}$")
DASHBOARD_WRITE_LIMIT = "30/minute"


def get_rate_limit_key(request: Request) -> str:
    """Get rate limit key based on the browser profile (if known) or IP address.

    Args:
        request (Request): The incoming request

    Returns:
        str: Rate limit key (profile id or IP address)
    """
    if hasattr(request.state, "profile_id") and request.state.profile_id:
        return f"profile:{request.state.profile_id}"
    return get_remote_address(request)


# Initialize rate limiter
limiter = Limiter(key_func=get_rate_limit_key)


class TimeoutMiddleware(BaseHTTPMiddleware):
    """Middleware to enforce request timeout."""

    async def dispatch(self, request: Request, call_next):
        """Process request with timeout enforcement.

        Args:
            request (Request): The incoming request
            call_next: Next middleware/handler in chain

        Returns:
            Response: The response from the next handler or a 504 JSON response
        """
        try:
            return await asyncio.wait_for(
                call_next(request), timeout=REQUEST_TIMEOUT_SECONDS
            )
        except asyncio.TimeoutError:
            return JSONResponse(
                status_code=status.HTTP_504_GATEWAY_TIMEOUT,
                content={"detail": "Request timeout"},
            )


class ProfileCookieMiddleware(BaseHTTPMiddleware):
    """Middleware that identifies the browser profile of every request."""

    async def dispatch(self, request: Request, call_next):
        """Attach the profile id to the request, issuing a cookie on first visit.

        Args:
            request (Request): The incoming request
            call_next: Next middleware/handler in chain

        Returns:
            Response: The response from the next handler
        """
        profile_id = request.cookies.get(PROFILE_COOKIE_NAME, "")
        is_new_profile = not PROFILE_ID_PATTERN.match(profile_id)
        if is_new_profile:
            profile_id = secrets.token_hex(16)
        request.state.profile_id = profile_id

        response = await call_next(request)
        if is_new_profile:
            response.set_cookie(
                PROFILE_COOKIE_NAME,
                profile_id,
                max_age=PROFILE_COOKIE_MAX_AGE_SECONDS,
                httponly=True,
                samesite="lax",
            )
        return response


# /docs serves the documentation pages, so the generated api docs move
app = FastAPI(docs_url="/swagger-ui", redoc_url=None)

# Configure rate limiter
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Add middlewares (order matters: last added = first executed)
# 1. CORS (innermost)
origins = [
    "*",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 2. Timeout middleware
app.add_middleware(TimeoutMiddleware)

# 3. Browser profile (outermost, runs first)
app.add_middleware(ProfileCookieMiddleware)


def get_gateway() -> PromptGateway:
    return get_prompt_gateway()


def get_profile_context(
    request: Request, gateway: PromptGateway = Depends(get_gateway)
) -> RequestContext:
    """Get the context of the requesting browser profile.

    Args:
        request (Request): The incoming request, carrying the profile id
        gateway (PromptGateway): Gateway used when the context is created

    Returns:
        RequestContext: Cached context of the profile
    """
    return get_request_context(request.state.profile_id, gateway=gateway)


def error_json(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content=ErrorResponse(error=message).model_dump()
    )


@app.exception_handler(StarletteHTTPException)
async def not_found_handler(request: Request, exc: StarletteHTTPException):
    """Json errors for /api routes, an html 404 page for everything else."""
    if exc.status_code != status.HTTP_404_NOT_FOUND:
        return await http_exception_handler(request, exc)
    if request.url.path.startswith("/api/"):
        return error_json(status.HTTP_404_NOT_FOUND, "Not found")
    return HTMLResponse(
        public_pages.render_not_found_page(request.url.path),
        status_code=status.HTTP_404_NOT_FOUND,
    )


@app.exception_handler(PromptStorageError)
async def prompt_storage_error_handler(request: Request, exc: PromptStorageError):
    """The hosted service failed and the route had no inline error state for it."""
    logger.error("Prompt storage error on %s: %s", request.url.path, exc)
    if request.url.path.startswith("/api/"):
        return error_json(status.HTTP_502_BAD_GATEWAY, exc.message)
    return HTMLResponse(
        render_page("Error", '<p class="error">The prompt service is unavailable</p>'),
        status_code=status.HTTP_502_BAD_GATEWAY,
    )


async def _fetch_prompt_or_404(gateway: PromptGateway, prompt_id: str):
    try:
        return await prompt_api.get_prompt(gateway, prompt_id)
    except PromptNotFoundError:
        raise StarletteHTTPException(status_code=status.HTTP_404_NOT_FOUND)


@app.get("/health")
def health_check():
    """Health check endpoint for container orchestration."""
    return {"status": "healthy", "context_cache": get_cache_stats()}


# ==============================
# Json api
# ==============================


@app.get("/api/prompts")
async def list_prompts_endpoint(
    offset: Optional[str] = None,
    limit: Optional[str] = None,
    category: Optional[str] = None,
    gateway: PromptGateway = Depends(get_gateway),
):
    """List one page of prompts as json.

    Args:
        offset (str, optional): Number of prompts to skip. Defaults to 0
        limit (str, optional): Page size. Defaults to API_PROMPTS_DEFAULT_LIMIT
        category (str, optional): Category filter

    Returns:
        JSONResponse: Array of prompts, or {"error": ...}
    """
    try:
        parsed_offset = prompt_api.parse_non_negative_int(offset, 0, "offset")
        parsed_limit = prompt_api.parse_non_negative_int(
            limit, PAGINATION.api_default_limit, "limit"
        )
    except prompt_api.InvalidQueryError as e:
        return error_json(status.HTTP_400_BAD_REQUEST, str(e))

    try:
        prompts = await prompt_api.list_prompts(
            gateway, parsed_offset, parsed_limit, category
        )
    except PromptStorageError as e:
        logger.error("Error listing prompts: %s", e)
        return error_json(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to fetch prompts"
        )
    return JSONResponse([prompt.model_dump(mode="json") for prompt in prompts])


@app.get("/api/promptbyids")
async def get_prompts_by_ids_endpoint(
    ids: Optional[str] = None,
    gateway: PromptGateway = Depends(get_gateway),
):
    """Resolve a comma separated list of prompt ids as json.

    Args:
        ids (str, optional): Comma separated prompt ids

    Returns:
        JSONResponse: Array of prompts in the order of ids, or {"error": ...}
    """
    if not ids:
        return error_json(status.HTTP_400_BAD_REQUEST, "No IDs provided")

    prompt_ids = prompt_api.parse_prompt_ids(ids)
    if not prompt_ids:
        return JSONResponse([])

    try:
        prompts = await prompt_api.get_prompts_by_ids(gateway, prompt_ids)
    except PromptStorageError as e:
        logger.error("Error fetching prompts by ids %s: %s", prompt_ids, e)
        return error_json(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to fetch prompts"
        )
    return JSONResponse([prompt.model_dump(mode="json") for prompt in prompts])


# ==============================
# Public pages
# ==============================


@app.get("/", response_class=HTMLResponse)
def home_page():
    return public_pages.render_home_page()


@app.get("/prompts", response_class=HTMLResponse)
async def prompts_page(
    category: Optional[str] = None,
    gateway: PromptGateway = Depends(get_gateway),
):
    """First page of the prompt listing; the rest is loaded by the browser."""
    category = category or None
    categories = await prompt_api.list_categories(gateway)
    try:
        prompts = await prompt_api.list_prompts(
            gateway, 0, PAGINATION.page_size, category
        )
    except PromptStorageError as e:
        logger.error("Error rendering prompt listing: %s", e)
        return HTMLResponse(
            public_pages.render_prompts_page(
                [],
                PAGINATION.page_size,
                category=category,
                categories=categories,
                error="Failed to fetch prompts",
            ),
            status_code=status.HTTP_502_BAD_GATEWAY,
        )
    return public_pages.render_prompts_page(
        prompts, PAGINATION.page_size, category=category, categories=categories
    )


@app.get("/prompt/{prompt_id}", response_class=HTMLResponse)
async def prompt_detail_page(
    prompt_id: str, gateway: PromptGateway = Depends(get_gateway)
):
    prompt = await _fetch_prompt_or_404(gateway, prompt_id)
    return public_pages.render_prompt_detail_page(prompt)


# ==============================
# Dashboard
# ==============================


@app.get("/dashboard")
def dashboard_index():
    return RedirectResponse("/dashboard/prompts")


@app.get("/dashboard/prompts", response_class=HTMLResponse)
async def my_prompts_page(context: RequestContext = Depends(get_profile_context)):
    prompts, error = await dashboard_api.get_saved_prompts(context)
    return dashboard_pages.render_my_prompts_page(prompts, error=error)


@app.post("/dashboard/prompts/{prompt_id}/delete")
@limiter.limit(DASHBOARD_WRITE_LIMIT)
def forget_prompt_action(
    request: Request,
    prompt_id: str,
    context: RequestContext = Depends(get_profile_context),
):
    dashboard_api.forget_saved_prompt(context, prompt_id)
    return RedirectResponse("/dashboard/prompts", status_code=status.HTTP_303_SEE_OTHER)


@app.get("/dashboard/create", response_class=HTMLResponse)
def create_prompt_page():
    return dashboard_pages.render_create_prompt_page()


@app.post("/dashboard/create")
@limiter.limit(DASHBOARD_WRITE_LIMIT)
async def create_prompt_action(
    request: Request,
    title: str = Form(""),
    description: str = Form(""),
    category: str = Form(""),
    content: str = Form(""),
    tags: list[str] = Form([]),
    context: RequestContext = Depends(get_profile_context),
):
    """Create a prompt from the dashboard form.

    Returns:
        Response: 303 redirect to My Prompts, or the form with errors
    """
    form = CreatePromptForm(
        title=title,
        description=description,
        category=category,
        content=content,
        tags=split_tags(tags),
    )
    values = {
        "title": title,
        "description": description,
        "category": category,
        "content": content,
        "tags": ", ".join(form.tags),
    }
    try:
        response = await dashboard_api.create_prompt(context, form)
    except PromptStorageError as e:
        logger.error("Error creating prompt: %s", e)
        return HTMLResponse(
            dashboard_pages.render_create_prompt_page(
                values, form_error="Failed to create prompt"
            ),
            status_code=status.HTTP_502_BAD_GATEWAY,
        )
    if not response.success:
        return HTMLResponse(
            dashboard_pages.render_create_prompt_page(values, response.errors),
            status_code=status.HTTP_400_BAD_REQUEST,
        )
    return RedirectResponse("/dashboard/prompts", status_code=status.HTTP_303_SEE_OTHER)


@app.get("/dashboard/prompts/{prompt_id}/edit", response_class=HTMLResponse)
async def edit_prompt_page(
    prompt_id: str, context: RequestContext = Depends(get_profile_context)
):
    prompt = await _fetch_prompt_or_404(context.gateway, prompt_id)
    return dashboard_pages.render_edit_prompt_page(prompt)


@app.post("/dashboard/prompts/{prompt_id}/edit")
@limiter.limit(DASHBOARD_WRITE_LIMIT)
async def edit_prompt_action(
    request: Request,
    prompt_id: str,
    title: str = Form(""),
    description: str = Form(""),
    category: str = Form(""),
    tags: list[str] = Form([]),
    context: RequestContext = Depends(get_profile_context),
):
    """Update prompt metadata from the dashboard form.

    Returns:
        Response: 303 redirect to My Prompts, or the form with errors
    """
    form = EditPromptForm(
        title=title, description=description, category=category, tags=split_tags(tags)
    )
    values = {
        "title": title,
        "description": description,
        "category": category,
        "tags": ", ".join(form.tags),
    }
    prompt = await _fetch_prompt_or_404(context.gateway, prompt_id)
    try:
        response = await dashboard_api.update_prompt(context, prompt_id, form)
    except PromptStorageError as e:
        logger.error("Error updating prompt %s: %s", prompt_id, e)
        return HTMLResponse(
            dashboard_pages.render_edit_prompt_page(
                prompt, values, form_error="Failed to update prompt"
            ),
            status_code=status.HTTP_502_BAD_GATEWAY,
        )
    if not response.success:
        return HTMLResponse(
            dashboard_pages.render_edit_prompt_page(prompt, values, response.errors),
            status_code=status.HTTP_400_BAD_REQUEST,
        )
    return RedirectResponse("/dashboard/prompts", status_code=status.HTTP_303_SEE_OTHER)


@app.get("/dashboard/api-keys", response_class=HTMLResponse)
def api_keys_page(context: RequestContext = Depends(get_profile_context)):
    return dashboard_pages.render_api_keys_page(dashboard_api.list_api_keys(context))


@app.post("/dashboard/api-keys")
@limiter.limit(DASHBOARD_WRITE_LIMIT)
def generate_api_key_action(
    request: Request,
    name: str = Form(""),
    context: RequestContext = Depends(get_profile_context),
):
    response = dashboard_api.generate_api_key(
        context, GenerateApiKeyForm(name=name)
    )
    api_keys = dashboard_api.list_api_keys(context)
    if not response.success:
        return HTMLResponse(
            dashboard_pages.render_api_keys_page(api_keys, msg=response.msg),
            status_code=status.HTTP_400_BAD_REQUEST,
        )
    return HTMLResponse(
        dashboard_pages.render_api_keys_page(api_keys, new_key=response.api_key)
    )


@app.post("/dashboard/api-keys/{api_key_id}/delete")
@limiter.limit(DASHBOARD_WRITE_LIMIT)
def delete_api_key_action(
    request: Request,
    api_key_id: str,
    context: RequestContext = Depends(get_profile_context),
):
    dashboard_api.delete_api_key(context, api_key_id)
    return RedirectResponse("/dashboard/api-keys", status_code=status.HTTP_303_SEE_OTHER)


# ==============================
# Docs
# ==============================


@app.get("/docs")
def docs_index():
    return RedirectResponse("/docs/getting-started")


@app.get("/docs/getting-started", response_class=HTMLResponse)
def getting_started_page():
    return docs_pages.render_getting_started_page()


@app.get("/docs/api", response_class=HTMLResponse)
def api_docs_page():
    return docs_pages.render_api_index_page()


@app.get("/docs/api/{section}", response_class=HTMLResponse)
def api_section_docs_page(section: str):
    if section not in docs_pages.API_SECTIONS:
        raise StarletteHTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return docs_pages.render_api_section_page(section)


@app.get("/docs/pricing", response_class=HTMLResponse)
def pricing_page():
    return docs_pages.render_pricing_page()


@app.get("/docs/upcoming-features", response_class=HTMLResponse)
def upcoming_features_page():
    return docs_pages.render_upcoming_features_page()


@app.get("/docs/openapi-spec", response_class=HTMLResponse)
def openapi_spec_page():
    return docs_pages.render_openapi_spec_page()


def main():
    import uvicorn

    uvicorn.run(
        "promptshelf.server.api:app",
        host=os.environ.get("HOST", "0.0.0.0"),
        port=int(os.environ.get("PORT", "8000")),
    )


if __name__ == "__main__":
    main()
