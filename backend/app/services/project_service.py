# Project persistence - direct pass-through to the primary store

import logging
from typing import List, Optional

from sqlmodel import Session, select

from app.models import Project, ProjectCreate, ProjectUpdate, column_values, utcnow

logger = logging.getLogger(__name__)


def list_projects(session: Session) -> List[Project]:
    """All projects, newest first."""
    return list(session.exec(select(Project).order_by(Project.created_at.desc())).all())


def get_project(session: Session, project_id: str) -> Optional[Project]:
    return session.get(Project, project_id)


def create_project(session: Session, payload: ProjectCreate) -> Project:
    project = Project(**column_values(payload))
    session.add(project)
    session.commit()
    session.refresh(project)
    logger.info(f"Project created: {project.id} ({project.name})")
    return project


def update_project(session: Session, project_id: str, payload: ProjectUpdate) -> Optional[Project]:
    """Write the supplied fields only. Returns None if the project does not exist."""
    project = session.get(Project, project_id)
    if project is None:
        return None

    for key, value in column_values(payload, exclude_unset=True).items():
        setattr(project, key, value)
    project.updated_at = utcnow()

    session.add(project)
    session.commit()
    session.refresh(project)
    return project


def delete_project(session: Session, project_id: str) -> bool:
    project = session.get(Project, project_id)
    if project is None:
        return False
    session.delete(project)
    session.commit()
    logger.info(f"Project deleted: {project_id}")
    return True
