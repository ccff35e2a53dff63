# /classroom-ai-backend/app/routers/classrooms_router.py

from fastapi import APIRouter, Depends, HTTPException, status
from typing import List

from ..models.classroom_model import Classroom, ClassroomPublic, ClassroomSettingsUpdate
from ..models.session_model import ChatSession
from ..models.dashboard_model import ClassroomSummary
from ..services import classroom_service, session_service, dashboard_service
from ..services.result import run_mutation
from ..services.storage_service import StorageService, get_storage_service
from .result_handling import unwrap

router = APIRouter()


@router.get("/{code}", response_model=ClassroomPublic, summary="Look Up a Classroom by Code")
def get_classroom(code: str, db: StorageService = Depends(get_storage_service)):
    # Codes typed by people are case-insensitive; the registry match is exact.
    classroom = classroom_service.find_by_code(db, classroom_service.normalize_code(code))
    if classroom is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Classroom with code {code} not found")
    return ClassroomPublic.from_classroom(classroom)


@router.put("/{code}/settings", response_model=Classroom, summary="Update the API Key and System Guidelines")
def update_classroom_settings(
    code: str,
    update: ClassroomSettingsUpdate,
    db: StorageService = Depends(get_storage_service),
):
    return unwrap(run_mutation(classroom_service.update_settings, db, classroom_service.normalize_code(code), update))


@router.get("/{code}/sessions", response_model=List[ChatSession], summary="Get Every Student Session of a Classroom")
def get_classroom_sessions(code: str, db: StorageService = Depends(get_storage_service)):
    return session_service.list_by_classroom(db, classroom_service.normalize_code(code))


@router.get("/{code}/summary", response_model=ClassroomSummary, summary="Get the Classroom Overview")
def get_classroom_summary(code: str, db: StorageService = Depends(get_storage_service)):
    return dashboard_service.get_classroom_summary(db, classroom_service.normalize_code(code))
