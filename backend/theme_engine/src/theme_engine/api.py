import logging
from typing import List, Optional

from fastapi import APIRouter, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from .config import settings
from .errors import InvalidBreakpoints, InvalidColorFormat
from .models.schemas import (
    AccessibilityReport,
    AccessibilityRequest,
    AccessibilityResult,
    ApplyRequest,
    ApplyResponse,
    BrandInputs,
    ColorPalette,
    CompiledTheme,
    CompileRequest,
    CompileResponse,
    DesignTokens,
    GridRequest,
    GridSystem,
    PaletteRequest,
    SpacingRequest,
    SpacingScale,
    ThemePreset,
    TypeScale,
    TypeScaleRequest,
)
from .service.builder import audit_tokens, build_design_tokens, tokens_for_preset
from .service.color import check_accessibility
from .service.compiler import compile_tokens, render_css
from .service.legacy import normalize_theme
from .service.palette import clear_cache, generate_palette
from .service.runtime import get_style_registry
from .service.spacing import generate_grid_system, generate_spacing_scale
from .service.typography import generate_type_scale
from .utils.loader import get_preset_loader

logger = logging.getLogger(settings.SERVICE_NAME + ".api")

# Create a router for the theme engine endpoints
router = APIRouter(prefix=f"/{settings.API_VERSION}")


def _unprocessable(e: Exception) -> HTTPException:
    logger.warning(f"Rejected invalid input: {e}")
    return HTTPException(status_code=422, detail=str(e))


def _resolve_tokens(request: CompileRequest) -> DesignTokens:
    """Pick the token source of a compile/apply request."""
    if request.tokens is not None:
        return request.tokens
    if request.legacy is not None:
        return normalize_theme(request.legacy)
    if request.preset:
        preset = get_preset_loader().get_preset(request.preset)
        if preset is None:
            raise HTTPException(status_code=404, detail=f"Unknown preset: {request.preset}")
        return tokens_for_preset(preset)
    if request.inputs is not None:
        return build_design_tokens(request.inputs)
    return DesignTokens()


def _compile_response(compiled: CompiledTheme) -> CompileResponse:
    return CompileResponse(
        scope_id=compiled.scope_id,
        selector=compiled.selector,
        declarations=compiled.as_dict(),
        diagnostics=list(compiled.diagnostics),
        color_scheme=compiled.color_scheme,
        fingerprint=compiled.fingerprint,
        css=render_css(compiled),
    )


@router.post(
    "/palette",
    response_model=ColorPalette,
    summary="Generate a color palette",
    description="Shade ramp, harmony families, semantic and brand colors derived from one base color.",
)
async def palette(request: PaletteRequest) -> ColorPalette:
    try:
        return generate_palette(request.color)
    except InvalidColorFormat as e:
        raise _unprocessable(e)


@router.post(
    "/accessibility",
    response_model=AccessibilityResult,
    summary="Check the contrast of a color pair",
)
async def accessibility(request: AccessibilityRequest) -> AccessibilityResult:
    try:
        return check_accessibility(request.foreground, request.background, request.min_ratio)
    except InvalidColorFormat as e:
        raise _unprocessable(e)


@router.post("/typography", response_model=TypeScale, summary="Generate a modular type scale")
async def typography(request: TypeScaleRequest) -> TypeScale:
    return generate_type_scale(request.base, request.ratio)


@router.post("/spacing", response_model=SpacingScale, summary="Generate a spacing scale")
async def spacing(request: SpacingRequest) -> SpacingScale:
    scale = generate_spacing_scale(request.base, request.unit, request.ratio)
    if request.convert_to:
        scale = scale.convert(request.convert_to)
    return scale


@router.post("/grid", response_model=GridSystem, summary="Generate a grid system")
async def grid(request: GridRequest) -> GridSystem:
    try:
        return generate_grid_system(
            columns=request.columns,
            gutter=request.gutter,
            margins=request.margins,
            unit=request.unit,
            breakpoints=request.breakpoints,
        )
    except InvalidBreakpoints as e:
        raise _unprocessable(e)


@router.post(
    "/tokens",
    response_model=DesignTokens,
    summary="Build design tokens from brand inputs",
    description="Turns a brand color, font pairing and density into a complete token tree.",
)
async def tokens(inputs: BrandInputs) -> DesignTokens:
    try:
        return build_design_tokens(inputs)
    except InvalidColorFormat as e:
        raise _unprocessable(e)


@router.post("/audit", response_model=AccessibilityReport, summary="Audit the contrast of a token tree")
async def audit(tokens: DesignTokens) -> AccessibilityReport:
    return audit_tokens(tokens)


@router.post(
    "/compile",
    response_model=CompileResponse,
    summary="Compile a theme for a tenant scope",
    description="Flattens a token tree (or a legacy theme, preset or brand inputs) into scoped declarations.",
)
async def compile_theme(request: CompileRequest) -> CompileResponse:
    logger.info(f"Received compile request for scope '{request.scope_id}'")
    try:
        compiled = compile_tokens(_resolve_tokens(request), request.scope_id)
        return _compile_response(compiled)
    except HTTPException:
        raise
    except InvalidColorFormat as e:
        raise _unprocessable(e)
    except Exception as e:
        logger.error(f"Error compiling theme: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error compiling theme: {str(e)}")


@router.post(
    "/apply",
    response_model=ApplyResponse,
    summary="Compile and apply a theme to a tenant scope",
    description="Creates or replaces the single style fragment of the scope. Empty themes leave the current one in place.",
)
async def apply_theme(request: ApplyRequest) -> ApplyResponse:
    logger.info(f"Received apply request for scope '{request.scope_id}'")
    try:
        compiled = compile_tokens(_resolve_tokens(request), request.scope_id)
        registry = get_style_registry()
        result = registry.apply(compiled, theme_name=request.theme_name or request.preset)
        return ApplyResponse(
            scope_id=result.scope_id,
            element_id=result.element_id,
            state=result.state,
            previous_state=result.previous_state,
            changed=result.changed,
            reason=result.reason,
            theme_name=result.theme_name,
            css=registry.get_stylesheet(result.scope_id) or "",
        )
    except HTTPException:
        raise
    except InvalidColorFormat as e:
        raise _unprocessable(e)
    except Exception as e:
        logger.error(f"Error applying theme: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error applying theme: {str(e)}")


@router.get("/stylesheet", response_class=PlainTextResponse, summary="Every applied tenant fragment")
async def stylesheet() -> str:
    return get_style_registry().render()


@router.get("/stylesheet/{scope_id}", response_class=PlainTextResponse, summary="One tenant fragment")
async def scope_stylesheet(scope_id: str) -> str:
    css = get_style_registry().get_stylesheet(scope_id)
    if css is None:
        raise HTTPException(status_code=404, detail=f"No theme applied for scope: {scope_id}")
    return css


@router.delete("/stylesheet/{scope_id}", response_model=dict, summary="Remove a tenant fragment")
async def remove_stylesheet(scope_id: str) -> dict:
    if not get_style_registry().remove(scope_id):
        raise HTTPException(status_code=404, detail=f"No theme applied for scope: {scope_id}")
    return {"status": "success", "scope_id": scope_id}


@router.get("/presets", response_model=List[ThemePreset], summary="List saved theme presets")
async def presets(tag: Optional[str] = None, industry: Optional[str] = None) -> List[ThemePreset]:
    return get_preset_loader().find_presets(tag=tag, industry=industry)


@router.post(
    "/reload",
    response_model=dict,
    summary="Reload presets from file",
    description="Force a reload of the presets file and clear the palette cache.",
)
async def reload_presets() -> dict:
    logger.info("Received request to reload presets")
    try:
        success = get_preset_loader().load_presets(force=True)
        clear_cache()
        if success:
            return {"status": "success", "message": "Presets reloaded successfully"}
        return {"status": "error", "message": "Failed to reload presets"}
    except Exception as e:
        logger.error(f"Error reloading presets: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error reloading presets: {str(e)}")


@router.get("/healthz", response_model=dict, summary="Health check endpoint")
async def health_check() -> dict:
    loader = get_preset_loader()
    presets_count = len(loader.get_presets())
    status = {
        "status": "ok" if loader.library is not None else "degraded",
        "service": settings.SERVICE_NAME,
        "presets_loaded": loader.library is not None,
        "presets_count": presets_count,
        "active_scopes": len(get_style_registry().scopes()),
    }
    if loader.library is None:
        status["message"] = "Presets not loaded"
    return status


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application for the Theme Engine service.

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title="Theme Engine Service",
        description="Generates design tokens and compiles scoped, per-tenant theme stylesheets.",
        version="0.1.0",
        docs_url=f"/{settings.API_VERSION}/docs",
        redoc_url=f"/{settings.API_VERSION}/redoc",
        openapi_url=f"/{settings.API_VERSION}/openapi.json",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Adjust for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router, tags=["Theme Engine"])

    @app.on_event("startup")
    async def startup_event():
        logger.info("Starting Theme Engine service")
        loader = get_preset_loader()
        if loader.library is None:
            logger.warning("Presets not loaded during startup")

    @app.on_event("shutdown")
    async def shutdown_event():
        logger.info("Shutting down Theme Engine service")
        get_preset_loader().stop_file_watcher()

    return app


# Create the FastAPI app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    logger.info("Running Theme Engine API directly")
    uvicorn.run(
        "theme_engine.api:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        log_level=settings.LOG_LEVEL.lower(),
        reload=True,
    )
