from uuid import uuid4

from fastapi import APIRouter, Depends, Form, HTTPException, Request, Response
from fastapi.responses import HTMLResponse

from query_console.console.schemas import ResultAreaResponse
from query_console.console.service import download_csv, submit_query
from query_console.console.state import ResultAreaRegistry, get_result_areas
from query_console.console.transport import TransportClient, get_transport_client
from query_console.core.templates import templates

STATE_HEADER = "X-Console-State"

page_router = APIRouter(tags=["Console"])
router = APIRouter(tags=["Console"], prefix="/v1/console")


@page_router.get("/", response_class=HTMLResponse)
async def console_page(request: Request):
    return templates.TemplateResponse(
        request,
        "console.html",
        {"session_id": uuid4().hex},
    )


@router.post("/query", response_class=HTMLResponse)
async def query_endpoint(
    session_id: str = Form(...),
    query: str = Form(""),
    token: str = Form(""),
    transport: TransportClient = Depends(get_transport_client),
    areas: ResultAreaRegistry = Depends(get_result_areas),
):
    view = await submit_query(areas.get(session_id), transport, query, token)
    if view is None:
        return Response(status_code=204)
    return HTMLResponse(view.html, headers={STATE_HEADER: view.state.value})


@router.post("/download")
async def download_endpoint(
    session_id: str = Form(...),
    query: str = Form(""),
    token: str = Form(""),
    transport: TransportClient = Depends(get_transport_client),
    areas: ResultAreaRegistry = Depends(get_result_areas),
):
    result = await download_csv(areas.get(session_id), transport, query, token)
    if result.response is not None:
        return result.response
    if result.superseded or result.view is None:
        return Response(status_code=204)
    return HTMLResponse(result.view.html, headers={STATE_HEADER: result.view.state.value})


@router.get("/result/{session_id}", response_model=ResultAreaResponse)
async def result_endpoint(
    session_id: str,
    areas: ResultAreaRegistry = Depends(get_result_areas),
):
    area = areas.peek(session_id)
    if area is None:
        raise HTTPException(status_code=404, detail="Console session not found")
    return ResultAreaResponse(session_id=session_id, state=area.state, html=area.view.html)
