from pathlib import Path
from fastapi import APIRouter
from fastapi.responses import HTMLResponse, RedirectResponse, Response

from ..models.api_models import AnalyzerStatus
from ..orchestrator import RequestOrchestrator
from ...core.enums import ResponseKind
from ...core.models import AnalyzeResponse


OUTPUT_DIR = Path(__file__).resolve().parent.parent.parent / "output"
COMPUTING_PAGE = OUTPUT_DIR / "computing" / "index.html"
NO_STATS_PAGE = OUTPUT_DIR / "no-stats" / "index.html"

# Route the static pages link to
DEFAULT_REQUEST_PATH = "/_analyze"


def load_page(page: Path, request_path: str = DEFAULT_REQUEST_PATH) -> str:
    """Read a static page, pointing its links at the mounted request path"""
    content = page.read_text(encoding="utf-8")
    if request_path != DEFAULT_REQUEST_PATH:
        content = content.replace(DEFAULT_REQUEST_PATH, request_path)
    return content


def render_response(result: AnalyzeResponse, request_path: str = DEFAULT_REQUEST_PATH) -> Response:
    """Turn an orchestrator outcome into an HTTP response"""
    if result.kind is ResponseKind.ARTIFACT:
        return HTMLResponse(result.body)
    if result.kind is ResponseKind.REDIRECT:
        return RedirectResponse(result.location, status_code=302)
    if result.kind is ResponseKind.NO_STATS:
        return HTMLResponse(load_page(NO_STATS_PAGE, request_path))
    return HTMLResponse(load_page(COMPUTING_PAGE, request_path))


def create_analyze_router(orchestrator: RequestOrchestrator) -> APIRouter:
    """Build the analyze routes mounted under the orchestrator's request path"""
    request_path = orchestrator.request_path
    router = APIRouter(prefix=request_path, tags=["analyze"])

    @router.get("", response_class=HTMLResponse)
    async def view_stats():
        """Cached report, or the computing page while none is ready"""
        return render_response(await orchestrator.view(), request_path)

    @router.get("/compute")
    async def compute_stats():
        """Compute the report and redirect back to the view"""
        return render_response(await orchestrator.compute(), request_path)

    @router.get("/status", response_model=AnalyzerStatus)
    async def analyzer_status():
        return AnalyzerStatus.from_dict(orchestrator.status())

    return router
