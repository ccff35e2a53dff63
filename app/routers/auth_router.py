# /classroom-ai-backend/app/routers/auth_router.py

"""
Login endpoints for students (class code + student id) and teachers
(display name), plus restoring and clearing the last-logged-in user.
"""

from fastapi import APIRouter, Depends, HTTPException, Response, status
from typing import Union

from ..models.classroom_model import ClassroomPublic
from ..models.user_model import (
    StudentLogin,
    TeacherLogin,
    StudentLoginResponse,
    TeacherLoginResponse,
    UserRole,
)
from ..services import auth_service
from ..services.storage_service import StorageService, get_storage_service
from .result_handling import unwrap

router = APIRouter()


@router.post("/student", response_model=StudentLoginResponse, summary="Join a Classroom as a Student")
def login_student(payload: StudentLogin, db: StorageService = Depends(get_storage_service)):
    user, classroom = unwrap(auth_service.login_student(db, payload.student_id, payload.class_code))
    return StudentLoginResponse(user=user, classroom=ClassroomPublic.from_classroom(classroom))


@router.post("/teacher", response_model=TeacherLoginResponse, summary="Open (or Create) a Teacher's Classroom")
def login_teacher(payload: TeacherLogin, db: StorageService = Depends(get_storage_service)):
    user, classroom = unwrap(auth_service.login_teacher(db, payload.teacher_name))
    return TeacherLoginResponse(user=user, classroom=classroom)


@router.get(
    "/last",
    response_model=Union[TeacherLoginResponse, StudentLoginResponse],
    summary="Restore the Last Logged-in User",
)
def get_last_user(db: StorageService = Depends(get_storage_service)):
    restored = auth_service.restore_last_user(db)
    if restored is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No remembered login.")
    user, classroom = restored
    if user.role is UserRole.TEACHER:
        return TeacherLoginResponse(user=user, classroom=classroom)
    return StudentLoginResponse(user=user, classroom=ClassroomPublic.from_classroom(classroom))


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT, summary="Forget the Remembered Login")
def logout(db: StorageService = Depends(get_storage_service)):
    unwrap(auth_service.logout(db))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
