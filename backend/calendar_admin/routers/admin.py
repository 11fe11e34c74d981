"""Server-rendered admin interface for managing calendar events.

Validation and not-found errors are raised as ``HTTPException`` and turned
into message pages by the admin branch of the error handlers.
"""

from pathlib import Path
from typing import List, Optional

from fastapi import APIRouter, Depends, Form, Query, Request, Response
from fastapi.templating import Jinja2Templates

from calendar_admin.config import settings
from calendar_admin.schemas.event import EVENT_TYPES, GRADE_TAGS
from calendar_admin.services import event_service
from calendar_admin.storage import Storage, get_storage
from calendar_admin.utils.helpers import paginate, query_string

router = APIRouter(prefix="/admin", tags=["admin"])

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parents[1] / "templates"))
templates.env.globals.update(event_types=EVENT_TYPES, grade_tags=GRADE_TAGS)


def render_message(request: Request, message: str, status_code: int = 200):
    return templates.TemplateResponse(
        request, "message.html", {"message": message}, status_code=status_code
    )


def _filter_params(search, event_type, grade, start, end) -> dict:
    return {"search": search, "type": event_type, "grade": grade, "start": start, "end": end}


def _form_event_data(start, end, title_zh, title_en, description_zh, description_en, event_type, grade, grade_brackets, link):
    return event_service.build_event_data(
        start=start,
        end=end,
        title_zh=title_zh,
        title_en=title_en,
        description_zh=description_zh,
        description_en=description_en,
        type=event_type,
        grade=(grade or []) + (grade_brackets or []),
        link=link,
    )


@router.get("")
def admin_page(
    request: Request,
    search: Optional[str] = None,
    event_type: Optional[str] = Query(None, alias="type"),
    grade: Optional[str] = None,
    start: Optional[str] = None,
    end: Optional[str] = None,
    page: Optional[str] = None,
    page_size: Optional[str] = None,
    storage: Storage = Depends(get_storage),
):
    params = _filter_params(search, event_type, grade, start, end)
    filters = event_service.build_filter(search=search, type=event_type, grade=grade, start=start, end=end)
    records = event_service.list_events(storage, filters, order_by_start=True)
    result = paginate(
        records, page, page_size,
        default_size=settings.ADMIN_PAGE_SIZE,
        max_size=settings.ADMIN_MAX_PAGE_SIZE,
    )
    size_param = page_size if page_size else None
    return templates.TemplateResponse(
        request,
        "admin.html",
        {
            "page": result,
            "filters": params,
            "prev_query": query_string(params, page=result.page - 1, page_size=size_param) if result.has_prev else None,
            "next_query": query_string(params, page=result.page + 1, page_size=size_param) if result.has_next else None,
            "filter_query": query_string(params),
        },
    )


@router.post("/add")
def add_event(
    request: Request,
    start: Optional[str] = Form(None),
    end: Optional[str] = Form(None),
    title_zh: Optional[str] = Form(None),
    title_en: Optional[str] = Form(None),
    description_zh: Optional[str] = Form(None),
    description_en: Optional[str] = Form(None),
    event_type: Optional[str] = Form(None, alias="type"),
    grade: Optional[List[str]] = Form(None),
    grade_brackets: Optional[List[str]] = Form(None, alias="grade[]"),
    link: Optional[str] = Form(None),
    storage: Storage = Depends(get_storage),
):
    data = _form_event_data(start, end, title_zh, title_en, description_zh, description_en, event_type, grade, grade_brackets, link)
    event_service.create_event(storage, data)
    return render_message(request, "事件新增成功！請重新整理頁面以查看更新。", status_code=201)


@router.post("/update")
def edit_event_form(
    request: Request,
    event_id: Optional[str] = Form(None, alias="id"),
    storage: Storage = Depends(get_storage),
):
    record = event_service.get_event(storage, event_service.parse_event_id(event_id))
    return templates.TemplateResponse(request, "edit.html", {"event": record})


@router.post("/update/save")
def save_event(
    request: Request,
    event_id: Optional[str] = Form(None, alias="id"),
    start: Optional[str] = Form(None),
    end: Optional[str] = Form(None),
    title_zh: Optional[str] = Form(None),
    title_en: Optional[str] = Form(None),
    description_zh: Optional[str] = Form(None),
    description_en: Optional[str] = Form(None),
    event_type: Optional[str] = Form(None, alias="type"),
    grade: Optional[List[str]] = Form(None),
    grade_brackets: Optional[List[str]] = Form(None, alias="grade[]"),
    link: Optional[str] = Form(None),
    storage: Storage = Depends(get_storage),
):
    target_id = event_service.parse_event_id(event_id)
    data = _form_event_data(start, end, title_zh, title_en, description_zh, description_en, event_type, grade, grade_brackets, link)
    event_service.update_event(storage, target_id, data)
    return render_message(request, "事件更新成功！")


@router.post("/delete")
def delete_event(
    request: Request,
    event_id: Optional[str] = Form(None, alias="id"),
    storage: Storage = Depends(get_storage),
):
    event_service.delete_event(storage, event_service.parse_event_id(event_id))
    return render_message(request, "事件已刪除。")


@router.post("/clear")
def clear_events(request: Request, storage: Storage = Depends(get_storage)):
    event_service.clear_events(storage)
    return render_message(request, "所有事件已清除。")


@router.get("/export.csv")
def export_csv(
    search: Optional[str] = None,
    event_type: Optional[str] = Query(None, alias="type"),
    grade: Optional[str] = None,
    start: Optional[str] = None,
    end: Optional[str] = None,
    storage: Storage = Depends(get_storage),
):
    filters = event_service.build_filter(search=search, type=event_type, grade=grade, start=start, end=end)
    csv_text = event_service.export_csv(storage, filters)
    return Response(
        content=csv_text,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": 'attachment; filename="events.csv"'},
    )


@router.get("/print")
def print_events(
    request: Request,
    search: Optional[str] = None,
    event_type: Optional[str] = Query(None, alias="type"),
    grade: Optional[str] = None,
    start: Optional[str] = None,
    end: Optional[str] = None,
    storage: Storage = Depends(get_storage),
):
    filters = event_service.build_filter(search=search, type=event_type, grade=grade, start=start, end=end)
    records = event_service.list_events(storage, filters, order_by_start=True)
    return templates.TemplateResponse(
        request,
        "print.html",
        {"events": records, "filters": _filter_params(search, event_type, grade, start, end)},
    )
