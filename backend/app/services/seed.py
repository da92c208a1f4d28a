# Default agent roster, inserted once on a cold start with an empty agent table

import logging

from sqlalchemy import func
from sqlmodel import Session, select

from app.models import Agent

logger = logging.getLogger(__name__)

DEFAULT_AGENTS = [
    # Trinity Framework
    {"agent_id": "THEO-5001", "name": "THEO", "type": "frontend", "port": 5001},
    {"agent_id": "MARCUS-5002", "name": "Marcus", "type": "backend", "port": 5002},
    {"agent_id": "ALEX-5003", "name": "Alex", "type": "fullstack", "port": 5003},
    {"agent_id": "QUINN-5004", "name": "Quinn", "type": "qa", "port": 5004},
    {"agent_id": "ACI-5005", "name": "ACI", "type": "orchestration", "port": 5005},

    # PowerLine Agents
    {"agent_id": "DAVID-6001", "name": "David", "type": "backend", "port": 6001},
    {"agent_id": "ELENA-6002", "name": "Elena", "type": "backend", "port": 6002},
    {"agent_id": "FRANK-6003", "name": "Frank", "type": "frontend", "port": 6003},
    {"agent_id": "GRACE-6004", "name": "Grace", "type": "fullstack", "port": 6004},
    {"agent_id": "HENRY-6005", "name": "Henry", "type": "fullstack", "port": 6005},
    {"agent_id": "IRIS-6006", "name": "Iris", "type": "devops", "port": 6006},
    {"agent_id": "JACK-6007", "name": "Jack", "type": "frontend", "port": 6007},
    {"agent_id": "KELLY-6008", "name": "Kelly", "type": "frontend", "port": 6008},
    {"agent_id": "LIAM-6009", "name": "Liam", "type": "frontend", "port": 6009},
    {"agent_id": "MAYA-6010", "name": "Maya", "type": "frontend", "port": 6010},
    {"agent_id": "NOAH-6011", "name": "Noah", "type": "qa", "port": 6011},
    {"agent_id": "OLIVIA-6012", "name": "Olivia", "type": "design", "port": 6012},
]


def seed_default_agents(session: Session) -> int:
    """Insert the default roster if no agents exist. Returns how many were inserted."""
    existing = session.exec(select(func.count()).select_from(Agent)).one()
    if existing:
        return 0

    logger.info("Initializing default agents...")
    session.add_all([Agent(**entry) for entry in DEFAULT_AGENTS])
    session.commit()
    logger.info(f"Default agents initialized ({len(DEFAULT_AGENTS)})")
    return len(DEFAULT_AGENTS)
