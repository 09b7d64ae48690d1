"""
FastAPI dependencies exposing the objects built in ``create_app``.
"""
from fastapi import Request

from wordbin.database import PasteStore
from wordbin.files import FilePayloadStore


def get_store(request: Request) -> PasteStore:
    return request.app.state.store


def get_files(request: Request) -> FilePayloadStore:
    return request.app.state.files
