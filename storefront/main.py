"""
FastAPI Application Entry Point

DnD Catering Storefront - single-restaurant online ordering.
Each browser session (cookie) owns its own in-memory view state.

Endpoints:
    - GET  /storefront: Server-rendered page for the current view
    - GET  /api/menu: Menu catalog
    - GET  /api/state: Current view state (drains notifications)
    - POST /api/cart/items: Add to cart
    - PATCH/DELETE /api/cart/items/{line_id}: Change or remove a line
    - POST /api/view/...: Open/close cart, checkout, back
    - POST /api/orders: Submit checkout form
    - GET  /api/orders/current: Order status timeline
    - POST /api/orders/new: Start over
    - GET  /health: System health check

Version: 1.0.0
"""

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

from fastapi import Depends, FastAPI, HTTPException, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.templating import Jinja2Templates
import uvicorn

from storefront.catalog import CustomizationError, get_catalog
from storefront.controller import InvalidTransitionError, ItemNotFoundError, StorefrontController
from storefront.core.config import get_settings, setup_logging
from storefront.schemas import (
    AddToCartRequest,
    CheckoutRequest,
    ErrorResponse,
    HealthResponse,
    MenuResponse,
    OrderStatusResponse,
    UpdateCartItemRequest,
    ViewStateResponse,
)
from storefront.services.geo import get_geo_service
from storefront.services.notifications import get_notification_service
from storefront.services.sessions import SESSION_COOKIE, get_session_registry

# Initialize configuration and logging
settings = get_settings()
setup_logging()
logger = logging.getLogger(__name__)

templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))


# =============================================================================
# APPLICATION LIFECYCLE
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application startup and shutdown events.
    """
    logger.info("=" * 60)
    logger.info(f"🚀 Starting {settings.app_name}")
    logger.info(f"   Version: {settings.app_version}")
    logger.info(f"   Environment: {settings.env_mode.value}")
    logger.info(f"   Debug: {settings.debug}")
    logger.info("=" * 60)

    geo_service = get_geo_service()
    notification_service = get_notification_service()
    logger.info(f"✅ Geo Service: {geo_service.provider_name}")
    logger.info(f"✅ Notification Service: {notification_service.provider_name}")
    logger.info(f"✅ Menu: {len(get_catalog())} items")

    if settings.use_real_services:
        missing = settings.validate_production_config()
        if missing:
            logger.warning(f"⚠️ Missing production config: {missing}")

    logger.info("=" * 60)
    logger.info("✅ Application ready!")
    logger.info("=" * 60)

    yield

    logger.info("Shutting down...")
    get_session_registry().clear()
    logger.info("✅ Cleanup complete")


# =============================================================================
# APPLICATION INSTANCE
# =============================================================================

app = FastAPI(
    title=settings.app_name,
    description=(
        "Online ordering for a single restaurant: menu, cart, checkout with "
        "delivery address checks, and an order status timeline."
    ),
    version=settings.app_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# SESSION DEPENDENCY
# =============================================================================

@dataclass
class Session:
    id: str
    controller: StorefrontController
    is_new: bool


def get_session(request: Request, response: Response) -> Session:
    """Resolve the caller's session from its cookie, starting one if needed."""
    requested = request.cookies.get(SESSION_COOKIE)
    session_id, controller = get_session_registry().get_or_create(requested)
    is_new = session_id != requested
    if is_new:
        response.set_cookie(SESSION_COOKIE, session_id, httponly=True, samesite="lax")
    return Session(id=session_id, controller=controller, is_new=is_new)


def get_controller(session: Session = Depends(get_session)) -> StorefrontController:
    return session.controller


def view_state(controller: StorefrontController, drain: bool = False) -> ViewStateResponse:
    """Render model for a reply. Only page and state reads consume toasts."""
    return ViewStateResponse.from_controller(controller, drain=drain)


# =============================================================================
# ROOT & HEALTH ENDPOINTS
# =============================================================================

@app.get("/", tags=["Root"])
async def root() -> dict[str, str]:
    """API root with navigation links."""
    return {
        "message": f"🍕 Welcome to {settings.restaurant_name}",
        "version": settings.app_version,
        "environment": settings.env_mode.value,
        "documentation": "/docs",
        "storefront": "/storefront",
        "health": "/health",
    }


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["Health"],
    summary="System Health Check",
)
async def health_check() -> HealthResponse:
    """Verify all system components are operational."""
    geo_service = get_geo_service()
    geo_status = "healthy" if await geo_service.health_check() else "unhealthy"

    notification_service = get_notification_service()
    notification_status = (
        "healthy" if await notification_service.health_check() else "unhealthy"
    )

    overall = "operational" if all(
        s == "healthy" for s in [geo_status, notification_status]
    ) else "degraded"

    return HealthResponse(
        status=overall,
        geo_service=geo_status,
        notification_service=notification_status,
        active_sessions=len(get_session_registry()),
        timestamp=datetime.now(),
    )


# =============================================================================
# STOREFRONT PAGE
# =============================================================================

@app.get(
    "/storefront",
    response_class=HTMLResponse,
    tags=["Storefront"],
)
async def storefront_page(
    request: Request,
    session: Session = Depends(get_session),
) -> HTMLResponse:
    """Serve the page for the session's current view."""
    page = templates.TemplateResponse(
        request,
        "storefront.html",
        {
            "settings": settings,
            "menu": get_catalog().items,
            "state": view_state(session.controller, drain=True),
        },
    )
    if session.is_new:
        page.set_cookie(SESSION_COOKIE, session.id, httponly=True, samesite="lax")
    return page


# =============================================================================
# MENU & STATE
# =============================================================================

@app.get("/api/menu", response_model=MenuResponse, tags=["Menu"])
async def get_menu() -> MenuResponse:
    """List every menu item with its customization options."""
    return MenuResponse(
        restaurant_name=settings.restaurant_name,
        delivery_fee=settings.delivery_fee,
        items=list(get_catalog().items),
    )


@app.get("/api/state", response_model=ViewStateResponse, tags=["View"])
async def get_state(
    controller: StorefrontController = Depends(get_controller),
) -> ViewStateResponse:
    """Current view, cart, order and pending notifications (consumed)."""
    return view_state(controller, drain=True)


# =============================================================================
# CART ENDPOINTS
# =============================================================================

@app.post(
    "/api/cart/items",
    response_model=ViewStateResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
    tags=["Cart"],
    summary="Add to Cart",
)
async def add_cart_item(
    payload: AddToCartRequest,
    controller: StorefrontController = Depends(get_controller),
) -> ViewStateResponse:
    controller.add_to_cart(
        payload.item_id,
        customization=payload.customization,
        special_instructions=payload.special_instructions,
        quantity=payload.quantity,
    )
    return view_state(controller)


@app.patch(
    "/api/cart/items/{line_id}",
    response_model=ViewStateResponse,
    tags=["Cart"],
    summary="Update Cart Line",
)
async def update_cart_item(
    line_id: str,
    payload: UpdateCartItemRequest,
    controller: StorefrontController = Depends(get_controller),
) -> ViewStateResponse:
    """Zero or negative quantities remove the line; unknown lines are ignored."""
    if payload.special_instructions is not None:
        controller.update_instructions(line_id, payload.special_instructions)
    if payload.quantity is not None:
        controller.change_quantity(line_id, payload.quantity)
    return view_state(controller)


@app.post("/api/cart/items/{line_id}/increment", response_model=ViewStateResponse, tags=["Cart"])
async def increment_cart_item(
    line_id: str,
    controller: StorefrontController = Depends(get_controller),
) -> ViewStateResponse:
    controller.increment_line(line_id)
    return view_state(controller)


@app.post("/api/cart/items/{line_id}/decrement", response_model=ViewStateResponse, tags=["Cart"])
async def decrement_cart_item(
    line_id: str,
    controller: StorefrontController = Depends(get_controller),
) -> ViewStateResponse:
    controller.decrement_line(line_id)
    return view_state(controller)


@app.delete("/api/cart/items/{line_id}", response_model=ViewStateResponse, tags=["Cart"])
async def remove_cart_item(
    line_id: str,
    controller: StorefrontController = Depends(get_controller),
) -> ViewStateResponse:
    controller.remove_line(line_id)
    return view_state(controller)


# =============================================================================
# VIEW TRANSITIONS
# =============================================================================

@app.post("/api/view/cart/open", response_model=ViewStateResponse, tags=["View"])
async def open_cart(controller: StorefrontController = Depends(get_controller)) -> ViewStateResponse:
    controller.open_cart()
    return view_state(controller)


@app.post("/api/view/cart/close", response_model=ViewStateResponse, tags=["View"])
async def close_cart(controller: StorefrontController = Depends(get_controller)) -> ViewStateResponse:
    controller.close_cart()
    return view_state(controller)


@app.post("/api/view/checkout", response_model=ViewStateResponse, tags=["View"])
async def begin_checkout(
    controller: StorefrontController = Depends(get_controller),
) -> ViewStateResponse:
    controller.begin_checkout()
    return view_state(controller)


@app.post("/api/view/back", response_model=ViewStateResponse, tags=["View"])
async def leave_checkout(controller: StorefrontController = Depends(get_controller)) -> ViewStateResponse:
    controller.leave_checkout()
    return view_state(controller)


# =============================================================================
# ORDER ENDPOINTS
# =============================================================================

@app.post(
    "/api/orders",
    response_model=ViewStateResponse,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
    tags=["Orders"],
    summary="Place Order",
)
async def place_order(
    payload: CheckoutRequest,
    controller: StorefrontController = Depends(get_controller),
) -> ViewStateResponse:
    """
    Validate the checkout form and place the order.

    A rejected form answers 400 with the reason; the session stays on the
    checkout form so the customer can correct it.
    """
    logger.info(f"Checkout submitted for: {payload.name}")

    result = await controller.submit_order(payload.to_customer())
    if not result.is_valid:
        raise HTTPException(status_code=400, detail=result.error_message)

    return view_state(controller)


@app.get(
    "/api/orders/current",
    response_model=OrderStatusResponse,
    responses={404: {"model": ErrorResponse}},
    tags=["Orders"],
)
async def current_order(
    controller: StorefrontController = Depends(get_controller),
) -> OrderStatusResponse:
    """Status timeline of the session's order."""
    snapshot = controller.order_status()
    order = controller.state.order
    if order is None or snapshot is None:
        raise HTTPException(status_code=404, detail="No order has been placed")
    return OrderStatusResponse.from_order(order, snapshot)


@app.post("/api/orders/new", response_model=ViewStateResponse, tags=["Orders"])
async def new_order(controller: StorefrontController = Depends(get_controller)) -> ViewStateResponse:
    """Discard the current order and go back to the menu."""
    controller.new_order()
    return view_state(controller)


# =============================================================================
# ERROR HANDLERS
# =============================================================================

def error_response(status_code: int, error: str, detail: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": error, "detail": detail},
    )


@app.exception_handler(ItemNotFoundError)
async def item_not_found_handler(request: Request, exc: ItemNotFoundError) -> JSONResponse:
    return error_response(404, "Not Found", str(exc))


@app.exception_handler(CustomizationError)
async def customization_handler(request: Request, exc: CustomizationError) -> JSONResponse:
    return error_response(422, "Invalid Customization", str(exc))


@app.exception_handler(InvalidTransitionError)
async def invalid_transition_handler(request: Request, exc: InvalidTransitionError) -> JSONResponse:
    logger.info(f"Rejected {request.method} {request.url.path}: {exc}")
    return error_response(409, "Conflict", str(exc))


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all exception handler."""
    logger.exception(f"Unhandled exception: {exc}")

    content: dict[str, Any] = {
        "success": False,
        "error": "Internal Server Error",
        "detail": str(exc) if settings.debug else "An unexpected error occurred",
    }
    return JSONResponse(status_code=500, content=content)


# =============================================================================
# SERVER
# =============================================================================

def run() -> None:
    """Serve the app with uvicorn on the configured host and port."""
    logger.info(f"Starting server on {settings.api_host}:{settings.api_port}")
    uvicorn.run(app, host=settings.api_host, port=settings.api_port, log_level="info")


if __name__ == "__main__":
    run()
