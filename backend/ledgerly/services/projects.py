from __future__ import annotations

from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from ledgerly.core.errors import ConflictError, NotFoundError
from ledgerly.models.enums import ProjectStatus
from ledgerly.models.project import Project
from ledgerly.models.user import User
from ledgerly.repositories import customers as customers_repo
from ledgerly.repositories import projects as projects_repo
from ledgerly.schemas.project import ProjectCreate, ProjectDetail, ProjectInvoiceSummary, ProjectRead, ProjectUpdate


def get_project_or_404(db: Session, *, user_id: int, project_id: int) -> Project:
    project = projects_repo.get_project(db, user_id=user_id, project_id=project_id)
    if not project:
        raise NotFoundError("Project not found")
    return project


def _ensure_customer(db: Session, *, user_id: int, customer_id: int) -> None:
    if not customers_repo.get_customer(db, user_id=user_id, customer_id=customer_id):
        raise NotFoundError("Customer not found")


def list_projects(
    db: Session,
    *,
    user_id: int,
    page: int,
    page_size: int,
    customer_id: Optional[int] = None,
    status: Optional[ProjectStatus] = None,
) -> Tuple[List[Project], int]:
    return projects_repo.list_projects(
        db,
        user_id=user_id,
        page=page,
        page_size=page_size,
        customer_id=customer_id,
        status=status,
    )


def get_project_detail(db: Session, *, user_id: int, project_id: int) -> ProjectDetail:
    project = get_project_or_404(db, user_id=user_id, project_id=project_id)
    billed, paid = projects_repo.invoice_totals(db, user_id=user_id, project_id=project.id)
    return ProjectDetail(
        **ProjectRead.model_validate(project).model_dump(),
        invoice_count=projects_repo.count_invoices(db, user_id=user_id, project_id=project.id),
        invoices=ProjectInvoiceSummary(total_billed=billed, total_paid=paid, unpaid=billed - paid),
    )


def create_project(db: Session, *, user: User, payload: ProjectCreate) -> Project:
    _ensure_customer(db, user_id=user.id, customer_id=payload.customer_id)
    project = Project(user_id=user.id, **payload.model_dump())
    projects_repo.add_project(db, project)
    db.refresh(project, ["customer"])
    return project


def update_project(db: Session, *, user: User, project_id: int, payload: ProjectUpdate) -> Project:
    project = get_project_or_404(db, user_id=user.id, project_id=project_id)
    _ensure_customer(db, user_id=user.id, customer_id=payload.customer_id)
    for field, value in payload.model_dump().items():
        setattr(project, field, value)
    db.add(project)
    db.flush()
    db.refresh(project, ["customer"])
    return project


def delete_project(db: Session, *, user: User, project_id: int) -> None:
    project = get_project_or_404(db, user_id=user.id, project_id=project_id)
    if projects_repo.count_invoices(db, user_id=user.id, project_id=project.id):
        raise ConflictError("Project has invoices and cannot be deleted")
    project.soft_delete()
    db.add(project)
    db.flush()
