import hmac
import logging
from datetime import date
from typing import Any

from fastapi import Depends, FastAPI, File, Form, Header, HTTPException, Query, Request, UploadFile
from fastapi.responses import JSONResponse, Response
import opik
from pydantic import BaseModel
from starlette.concurrency import run_in_threadpool

from po_desk.builder import ServiceBuilder
from po_desk.config import AppConfig
from po_desk.core.dates import dmy_to_ymd, month_grid, parse_date, shift_month, ymd_to_dmy
from po_desk.core.errors import NotAuthenticatedError, OrderNotFoundError, StorageError
from po_desk.core.export import orders_to_csv
from po_desk.core.files import document_name, is_supported_document
from po_desk.core.filters import OrderFilter, filter_orders, unique_suppliers
from po_desk.core.mapping import ItemMapping, mapping_statuses
from po_desk.core.overview import build_overview
from po_desk.core.purchase_order import ExtractedPurchaseOrder, OrderStatus, PurchaseOrder
from po_desk.core.user import CurrentUser
from po_desk.core.window import DEFAULT_WINDOW_HEIGHT, FALLBACK_VIEWPORT_RATIO, centered_scroll_top, visible_window

logger = logging.getLogger("po_desk.api")


class StatusUpdate(BaseModel):
    status: OrderStatus


class ItemEdit(BaseModel):
    field: str
    value: Any


def _parse_range_bound(value: str | None) -> date | None:
    """Accept DD/MM/YYYY (picker value) or YYYY-MM-DD (filter value)."""
    if not value:
        return None
    parsed = parse_date(value) or parse_date(ymd_to_dmy(value))
    if parsed is None:
        raise HTTPException(status_code=400, detail=f"Invalid date: {value}")
    return parsed


def _month_ref(first: date, months: int) -> dict | None:
    """Year and month `months` away from `first`, or None past the calendar's range."""
    try:
        shifted = shift_month(first, months)
    except ValueError:
        return None
    return {"year": shifted.year, "month": shifted.month}


def create_app(config: AppConfig | None = None) -> FastAPI:
    """Factory function for creating the FastAPI app with config."""
    if config is None:
        config = AppConfig.from_yaml("config.yaml")

    logging.basicConfig(level=config.log_level)

    if config.opik_api_key:
        opik.configure(api_key=config.opik_api_key, workspace=config.opik_workspace, force=True)

    builder = ServiceBuilder(config)
    workflow = builder.build()
    orders = builder.build_order_service()
    api_key = config.api_key

    app = FastAPI(title="PO Desk")

    @opik.track(name="po_intake", project_name=config.opik_project, capture_input=False)
    def run_intake(state: dict) -> dict:
        return workflow.invoke(state)

    def verify_api_key(x_api_key: str | None = Header(default=None)) -> None:
        if api_key and not hmac.compare_digest(api_key, x_api_key or ""):
            raise HTTPException(status_code=401, detail="Invalid API key")

    def current_user(
        x_user_id: str | None = Header(default=None),
        x_user_name: str | None = Header(default=None),
        x_user_email: str | None = Header(default=None),
        _: None = Depends(verify_api_key),
    ) -> CurrentUser:
        if not x_user_id:
            raise NotAuthenticatedError()
        return CurrentUser(uid=x_user_id, display_name=x_user_name, email=x_user_email)

    @app.exception_handler(NotAuthenticatedError)
    async def not_authenticated(request: Request, exc: NotAuthenticatedError):
        return JSONResponse(status_code=401, content={"detail": str(exc)})

    @app.exception_handler(OrderNotFoundError)
    async def order_not_found(request: Request, exc: OrderNotFoundError):
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    # --- Extraction ---

    @app.post("/extract")
    async def extract(
        files: list[UploadFile] = File(default=[]),
        text: str = Form(default=""),
        source: str = Form(default="upload"),
        user: CurrentUser = Depends(current_user),
    ):
        """Extract a purchase order from uploaded documents or pasted text.

        Pasted text is also summarized. Nothing is saved here; the reviewed
        result goes to POST /orders.
        """
        if not files and not text.strip():
            raise HTTPException(status_code=400, detail="Upload an image or provide text to extract.")

        documents = []
        for upload in files:
            if not is_supported_document(upload.content_type):
                raise HTTPException(
                    status_code=415,
                    detail=f"Unsupported file type: {upload.content_type}",
                )
            documents.append({
                "file_name": document_name(upload.filename, upload.content_type, source),
                "content_type": upload.content_type,
                "data": await upload.read(),
            })

        logger.info(f"Extraction requested by {user.uid}: documents={len(documents)}, text={bool(text.strip())}")
        result = await run_in_threadpool(run_intake, {
            "documents": documents,
            "source_text": text,
            "trajectory": [],
        })

        if result.get("final_status") != "completed":
            logger.warning(f"Extraction failed: {result.get('error_message')}")
            raise HTTPException(status_code=502, detail=result.get("error_message") or "Extraction failed")

        return {
            "status": result["final_status"],
            "order": result["extracted_data"],
            "summary": result.get("summary", ""),
            "file_names": [d["file_name"] for d in documents],
        }

    # --- Orders ---

    @app.post("/orders", status_code=201)
    def create_order(payload: ExtractedPurchaseOrder, user: CurrentUser = Depends(current_user)):
        return {"id": orders.create_order(payload, user)}

    def order_filter(
        search: str = "",
        supplier: str = "",
        cnpj: str = "",
        status: str = "",
    ) -> OrderFilter:
        return OrderFilter(search=search, supplier=supplier, cnpj=cnpj, status=status)

    @app.get("/orders")
    def list_orders(criteria: OrderFilter = Depends(order_filter), user: CurrentUser = Depends(current_user)):
        selected = filter_orders(orders.list_orders(), criteria)
        return {"count": len(selected), "orders": selected}

    @app.get("/orders/window")
    def order_window(
        criteria: OrderFilter = Depends(order_filter),
        scroll_top: float = Query(default=0, ge=0),
        viewport_height: float | None = Query(default=None, gt=0),
        highlight_id: str | None = None,
        user: CurrentUser = Depends(current_user),
    ):
        """The slice of the filtered list a fixed-row-height table should render."""
        selected = filter_orders(orders.list_orders(), criteria)
        window = visible_window(
            len(selected), scroll_top, viewport_height,
            row_height=config.row_height, overscan=config.overscan_count,
        )

        highlight_scroll_top = None
        if highlight_id:
            index = next((i for i, o in enumerate(selected) if o.id == highlight_id), -1)
            if index > -1:
                highlight_scroll_top = centered_scroll_top(
                    index, viewport_height or DEFAULT_WINDOW_HEIGHT * FALLBACK_VIEWPORT_RATIO, config.row_height,
                )

        return {
            "total": len(selected),
            **window.model_dump(),
            "orders": selected[window.start:window.end],
            "highlight_scroll_top": highlight_scroll_top,
        }

    @app.get("/orders/suppliers")
    def suppliers(user: CurrentUser = Depends(current_user)):
        return unique_suppliers(orders.list_orders())

    @app.get("/orders/export.csv")
    def export_csv(criteria: OrderFilter = Depends(order_filter), user: CurrentUser = Depends(current_user)):
        selected = filter_orders(orders.list_orders(), criteria)
        try:
            content = orders_to_csv(selected)
        except ValueError as e:
            raise HTTPException(status_code=404, detail=str(e))
        file_name = f"ordens_compra_{date.today().isoformat()}.csv"
        return Response(
            content=content,
            media_type="text/csv; charset=utf-8",
            headers={"Content-Disposition": f'attachment; filename="{file_name}"'},
        )

    @app.get("/orders/{order_id}")
    def get_order(order_id: str, user: CurrentUser = Depends(current_user)):
        return orders.get_order(order_id)

    @app.put("/orders/{order_id}")
    def update_order(order_id: str, payload: PurchaseOrder, user: CurrentUser = Depends(current_user)):
        """Replace the order's fields. The id comes from the path; a body id is ignored."""
        orders.get_order(order_id)
        return orders.update_order(payload.model_copy(update={"id": order_id}), user)

    @app.delete("/orders/{order_id}", status_code=204)
    def delete_order(order_id: str, user: CurrentUser = Depends(current_user)):
        orders.delete_order(order_id, user)
        return Response(status_code=204)

    @app.patch("/orders/{order_id}/status")
    def set_status(order_id: str, payload: StatusUpdate, user: CurrentUser = Depends(current_user)):
        return orders.set_status(order_id, payload.status, user)

    # --- Line items ---

    @app.post("/orders/{order_id}/items", status_code=201)
    def add_item(order_id: str, user: CurrentUser = Depends(current_user)):
        return orders.add_item(order_id, user)

    @app.patch("/orders/{order_id}/items/{index}")
    def edit_item(order_id: str, index: int, payload: ItemEdit, user: CurrentUser = Depends(current_user)):
        try:
            return orders.edit_item(order_id, index, payload.field, payload.value, user)
        except IndexError as e:
            raise HTTPException(status_code=404, detail=str(e))
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

    @app.delete("/orders/{order_id}/items/{index}")
    def remove_item(order_id: str, index: int, user: CurrentUser = Depends(current_user)):
        try:
            return orders.remove_item(order_id, index, user)
        except IndexError as e:
            raise HTTPException(status_code=404, detail=str(e))

    # --- ERP mapping ---

    @app.get("/mappings")
    def mappings(user: CurrentUser = Depends(current_user)):
        return mapping_statuses(orders.list_orders())

    @app.put("/orders/{order_id}/mappings")
    def update_mappings(
        order_id: str, payload: list[ItemMapping], user: CurrentUser = Depends(current_user)
    ):
        try:
            return orders.update_mappings(order_id, payload, user)
        except IndexError as e:
            raise HTTPException(status_code=400, detail=str(e))

    # --- Attachments ---

    @app.post("/orders/{order_id}/attachments", status_code=201)
    async def add_attachment(
        order_id: str,
        file: UploadFile = File(...),
        user: CurrentUser = Depends(current_user),
    ):
        data = await file.read()
        file_name = file.filename or "attachment"
        content_type = file.content_type or "application/octet-stream"
        try:
            return await run_in_threadpool(
                orders.add_attachment, order_id, file_name, data, content_type, user,
            )
        except StorageError as e:
            logger.warning(f"Attachment upload failed for {order_id}: {e}")
            raise HTTPException(status_code=502, detail=str(e))

    @app.delete("/orders/{order_id}/attachments")
    def remove_attachment(order_id: str, url: str, user: CurrentUser = Depends(current_user)):
        try:
            return orders.remove_attachment(order_id, url, user)
        except OrderNotFoundError:
            raise
        except LookupError as e:
            raise HTTPException(status_code=404, detail=str(e))

    # --- Overview & calendar ---

    @app.get("/overview")
    def overview(
        start: str | None = None,
        end: str | None = None,
        user: CurrentUser = Depends(current_user),
    ):
        return build_overview(
            orders.list_orders(),
            start=_parse_range_bound(start),
            end=_parse_range_bound(end),
            top_suppliers=config.top_suppliers,
            language=config.prompt_language,
        )

    @app.get("/calendar/{year}/{month}", dependencies=[Depends(verify_api_key)])
    def calendar_month(year: int, month: int, selected: str | None = None):
        """Month grid for the date picker, with neighbouring months for navigation.

        `previous` or `next` is None when it falls outside years 1 to 9999.
        """
        if month < 1 or month > 12 or year < 1 or year > 9999:
            raise HTTPException(status_code=400, detail="Invalid month")
        first = date(year, month, 1)
        return {
            "year": year,
            "month": month,
            "weeks": month_grid(year, month),
            "selected": dmy_to_ymd(selected) if parse_date(selected) else None,
            "previous": _month_ref(first, -1),
            "next": _month_ref(first, 1),
        }

    return app
