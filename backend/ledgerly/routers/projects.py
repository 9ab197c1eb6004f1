from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from ledgerly.core.deps import get_current_user
from ledgerly.db.session import get_db
from ledgerly.models.enums import ProjectStatus
from ledgerly.models.user import User
from ledgerly.schemas.common import page_meta
from ledgerly.schemas.project import (
    ProjectCreate,
    ProjectDetail,
    ProjectListResponse,
    ProjectRead,
    ProjectUpdate,
)
from ledgerly.services import projects as project_service

router = APIRouter(prefix="/api/projects", tags=["projects"])


@router.get("", response_model=ProjectListResponse)
def list_projects(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    customer_id: Optional[int] = Query(None),
    status_filter: Optional[ProjectStatus] = Query(None, alias="status"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ProjectListResponse:
    rows, total = project_service.list_projects(
        db,
        user_id=current_user.id,
        page=page,
        page_size=page_size,
        customer_id=customer_id,
        status=status_filter,
    )
    return ProjectListResponse(
        items=[ProjectRead.model_validate(row) for row in rows],
        **page_meta(total=total, page=page, page_size=page_size),
    )


@router.post("", response_model=ProjectRead, status_code=status.HTTP_201_CREATED)
def create_project(
    project_in: ProjectCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ProjectRead:
    project = project_service.create_project(db, user=current_user, payload=project_in)
    db.commit()
    return ProjectRead.model_validate(project)


@router.get("/{project_id}", response_model=ProjectDetail)
def get_project(
    project_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ProjectDetail:
    return project_service.get_project_detail(db, user_id=current_user.id, project_id=project_id)


@router.put("/{project_id}", response_model=ProjectRead)
def update_project(
    project_id: int,
    project_in: ProjectUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ProjectRead:
    project = project_service.update_project(db, user=current_user, project_id=project_id, payload=project_in)
    db.commit()
    return ProjectRead.model_validate(project)


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_project(
    project_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Response:
    project_service.delete_project(db, user=current_user, project_id=project_id)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
