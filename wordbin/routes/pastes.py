"""
Paste routes.
Handles upload, HTML/raw/URL/file views, removal, listing and the JSON API.
Store calls run in the threadpool because the store blocks on its lock and
on snapshot writes.
"""
import logging
import os
from typing import List

from fastapi import APIRouter, Depends, Request
from fastapi.responses import FileResponse, HTMLResponse, PlainTextResponse, RedirectResponse
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile

from wordbin.animals import to_animal_names, to_u64
from wordbin.database import PasteStore
from wordbin.dependencies import get_files, get_store
from wordbin.errors import InvalidIdentifier, PasteNotFound
from wordbin.files import FilePayloadStore
from wordbin.models import ExpirationChoice, Paste, PasteKind, PasteView, normalize_file_name
from wordbin.pages import render_index, render_paste, render_paste_list

router = APIRouter()
logger = logging.getLogger(__name__)

UPLOAD_CHUNK_SIZE = 64 * 1024
NOT_FOUND_TEXT = "Paste not found! :-("


def _find(store: PasteStore, animal_names: str) -> Paste:
    return store.find(to_u64(animal_names))


def _remove(store: PasteStore, animal_names: str) -> Paste:
    return store.remove(to_u64(animal_names))


async def _save_upload(
    files: FilePayloadStore, paste_id: int, file_name: str, upload: UploadFile
) -> None:
    """Stream an upload to the payload store chunk by chunk."""
    handle = await run_in_threadpool(files.open_for_write, paste_id, file_name)
    try:
        while True:
            chunk = await upload.read(UPLOAD_CHUNK_SIZE)
            if not chunk:
                break
            await run_in_threadpool(handle.write, chunk)
    finally:
        await run_in_threadpool(handle.close)


@router.get("/", response_class=HTMLResponse)
async def index() -> str:
    """Serve the create paste page."""
    return render_index()


@router.post("/upload")
async def create_paste(
    request: Request,
    store: PasteStore = Depends(get_store),
    files: FilePayloadStore = Depends(get_files),
) -> RedirectResponse:
    """
    Create a paste from a multipart form.

    Form fields:
        content: Text content (optional)
        expiration: One of 1min, 10min, 1hour, 24hour, 1week, never
        file: Optional file upload

    Returns:
        Redirect to the new paste's page

    Raises:
        InvalidExpirationChoice: If the expiration keyword is unknown (400)
    """
    async with request.form() as form:
        content = form.get("content")
        if not isinstance(content, str):
            content = ""
        expiration = ExpirationChoice.parse(str(form.get("expiration", ExpirationChoice.NEVER.value)))

        upload = form.get("file")
        file_name = None
        if isinstance(upload, UploadFile):
            file_name = normalize_file_name(upload.filename)

        paste_id = await run_in_threadpool(store.reserve_id)
        try:
            if file_name:
                await _save_upload(files, paste_id, file_name, upload)
            await run_in_threadpool(store.create, content, expiration, file_name, paste_id)
        except Exception:
            logger.error(f"Upload of paste {to_animal_names(paste_id)} failed, discarding it")
            await run_in_threadpool(store.release_id, paste_id)
            if file_name:
                await run_in_threadpool(files.delete, paste_id)
            raise

    return RedirectResponse(f"/pasta/{to_animal_names(paste_id)}", status_code=302)


@router.get("/pasta/{animal_names}", response_class=HTMLResponse)
async def view_paste(animal_names: str, store: PasteStore = Depends(get_store)) -> str:
    """View a paste as HTML."""
    paste = await run_in_threadpool(_find, store, animal_names)
    return render_paste(paste)


@router.get("/raw/{animal_names}", response_class=PlainTextResponse)
async def raw_paste(animal_names: str, store: PasteStore = Depends(get_store)) -> PlainTextResponse:
    """Return the paste content as plain text."""
    try:
        paste = await run_in_threadpool(_find, store, animal_names)
    except (InvalidIdentifier, PasteNotFound):
        return PlainTextResponse(NOT_FOUND_TEXT, status_code=404)
    return PlainTextResponse(paste.content)


@router.get("/url/{animal_names}")
async def redirect_url(animal_names: str, store: PasteStore = Depends(get_store)):
    """Redirect to the URL stored in a url paste."""
    try:
        paste = await run_in_threadpool(_find, store, animal_names)
    except (InvalidIdentifier, PasteNotFound):
        return PlainTextResponse(NOT_FOUND_TEXT, status_code=404)
    if paste.kind != PasteKind.URL:
        return PlainTextResponse("This is not a valid URL. :-(", status_code=400)
    return RedirectResponse(paste.content, status_code=302)


@router.get("/file/{animal_names}")
async def download_file(
    animal_names: str,
    store: PasteStore = Depends(get_store),
    files: FilePayloadStore = Depends(get_files),
) -> FileResponse:
    """
    Download the file attached to a paste.

    Raises:
        PasteNotFound: If the paste is missing, has no file, or its payload
            is gone from disk (404)
    """
    paste = await run_in_threadpool(_find, store, animal_names)
    if not paste.has_file:
        raise PasteNotFound(paste.id)
    path = files.path_for(paste)
    if not os.path.isfile(path):
        logger.error(f"File payload of {animal_names} is missing at {path}")
        raise PasteNotFound(paste.id)
    return FileResponse(path, filename=paste.file_name)


@router.get("/remove/{animal_names}")
async def remove_paste(animal_names: str, store: PasteStore = Depends(get_store)) -> RedirectResponse:
    """Remove a paste and go back to the list."""
    await run_in_threadpool(_remove, store, animal_names)
    return RedirectResponse("/pastalist", status_code=302)


@router.get("/pastalist", response_class=HTMLResponse)
async def list_pastes(store: PasteStore = Depends(get_store)) -> str:
    """List all live pastes."""
    pastes = await run_in_threadpool(store.list)
    return render_paste_list(pastes)


@router.get("/api/pastes", response_model=List[PasteView])
async def api_list_pastes(store: PasteStore = Depends(get_store)) -> List[PasteView]:
    pastes = await run_in_threadpool(store.list)
    return [PasteView.from_paste(p) for p in pastes]


@router.get("/api/pastes/{animal_names}", response_model=PasteView)
async def api_fetch_paste(animal_names: str, store: PasteStore = Depends(get_store)) -> PasteView:
    """
    Fetch a paste (API endpoint).

    Raises:
        PasteNotFound: If the paste is missing or expired (404)
        InvalidIdentifier: If the id does not decode (404)
    """
    paste = await run_in_threadpool(_find, store, animal_names)
    return PasteView.from_paste(paste)
