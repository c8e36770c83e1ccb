"""
Seed the local database with an admin user, four sample reps and their tags.

Usage:
  ADMIN_PASSWORD=... python scripts/seed.py

This script is idempotent: running it multiple times will upsert the same
records based on unique fields (email for users, id for reps, uid for tags).
"""

import os

from taptrack.config import settings
from taptrack.db import SessionLocal, Base, engine
from taptrack.models.models import Rep, Tag, TagType, User
from taptrack.auth.security import get_password_hash


ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@example.com")

REPS = [
    {"id": 1, "name": "Rep One", "phone": "555-111-1111", "email": "rep1@example.com", "title": "Project Manager", "company": "Swany Roofing"},
    {"id": 2, "name": "Rep Two", "phone": "555-222-2222", "email": "rep2@example.com", "title": "Sales Rep", "company": "Swany Roofing"},
    {"id": 3, "name": "Rep Three", "phone": "555-333-3333", "email": "rep3@example.com", "title": "Sales Rep", "company": "Swany Roofing"},
    {"id": 4, "name": "Rep Four", "phone": "555-444-4444", "email": "rep4@example.com", "title": "Sales Rep", "company": "Swany Roofing"},
]


def ensure_admin(session, email: str, password: str) -> User:
    user = session.query(User).filter(User.email == email).first()
    if user:
        return user
    user = User(email=email, password_hash=get_password_hash(password), name="Admin", role="SUPER_ADMIN")
    session.add(user)
    session.flush()
    return user


def ensure_rep(session, data: dict) -> Rep:
    rep = session.get(Rep, data["id"])
    if rep is None:
        rep = Rep(**data)
        session.add(rep)
    else:
        for key, value in data.items():
            setattr(rep, key, value)
    session.flush()
    return rep


def ensure_tag(session, rep: Rep) -> Tag:
    uid = f"test-rep-{rep.id}"
    tag = session.query(Tag).filter(Tag.uid == uid).first()
    if tag:
        return tag
    tag = Tag(
        uid=uid,
        label=f"{rep.name} House Card",
        type=TagType.REP.value,
        rep_id=rep.id,
        notes="38mm NTAG216 wet inlay - test phase",
    )
    session.add(tag)
    session.flush()
    return tag


def main() -> None:
    Base.metadata.create_all(bind=engine)
    password = os.getenv("ADMIN_PASSWORD", "changeme123!")
    session = SessionLocal()
    try:
        ensure_admin(session, ADMIN_EMAIL, password)
        print(f"Admin user: {ADMIN_EMAIL}")
        for data in REPS:
            rep = ensure_rep(session, data)
            ensure_tag(session, rep)
            print(f"Rep #{rep.id}: {rep.name} -> {settings.public_base_url.rstrip('/')}/tap/{rep.id}")
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


if __name__ == "__main__":
    main()
