import asyncio
from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from campus_portal import database
from campus_portal.main import app
from campus_portal.utils.auth import create_access_token


def run(coro):
    return asyncio.run(coro)


def auth_header(user, role):
    token = create_access_token({"sub": str(user["_id"]), "role": role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def db(monkeypatch):
    mock_db = AsyncMongoMockClient()["campus_portal_test"]
    monkeypatch.setattr(database, "db", mock_db)
    return mock_db


@pytest.fixture
def client(db):
    # No context manager: the lifespan would try to reach a real MongoDB
    return TestClient(app)


@pytest.fixture
def recruiter(db):
    doc = {
        "org_name": "Acme Systems",
        "contact_email": "hr@acme.example",
        "contact_name": "Priya Rao",
        "category": "Product",
        "participation_type": "On-Campus",
        "sector": "IT",
    }
    run(db.recruiters.insert_one(doc))
    return doc


@pytest.fixture
def other_recruiter(db):
    doc = {
        "org_name": "Globex Consulting",
        "contact_email": "jobs@globex.example",
        "category": "Consulting",
        "participation_type": "Virtual",
    }
    run(db.recruiters.insert_one(doc))
    return doc


@pytest.fixture
def student(db):
    doc = {
        "name": "Arjun Mehta",
        "email": "arjun@college.example",
        "branch": "CSE",
        "course": "BTech",
        "applied_jobs": [],
    }
    run(db.students.insert_one(doc))
    return doc


@pytest.fixture
def recruiter_headers(recruiter):
    return auth_header(recruiter, "recruiter")


@pytest.fixture
def other_recruiter_headers(other_recruiter):
    return auth_header(other_recruiter, "recruiter")


@pytest.fixture
def student_headers(student):
    return auth_header(student, "student")


@pytest.fixture
def make_job(db):
    def _make_job(owner, **overrides):
        doc = {
            "company_id": owner["_id"],
            "job_title": "Software Engineer",
            "job_description": "Backend services",
            "job_type": "Full-time",
            "job_category": "Tech",
            "branches_eligible": ["CSE", "ECE"],
            "courses_eligible": ["BTech"],
            "job_deadline": datetime.utcnow() + timedelta(days=7),
            "job_status": "Open",
            "applicants": [],
        }
        doc.update(overrides)
        run(db.jobs.insert_one(doc))
        return doc

    return _make_job


def find_job(db, job_id):
    return run(db.jobs.find_one({"_id": job_id}))


class CollectionProxy:
    """A mock collection with some methods swapped out."""

    def __init__(self, collection, overrides):
        self._collection = collection
        self._overrides = overrides

    def __getattr__(self, name):
        if name in self._overrides:
            return self._overrides[name]
        return getattr(self._collection, name)


class DatabaseProxy:
    def __init__(self, database, overrides):
        self._database = database
        self._overrides = overrides

    def __getattr__(self, name):
        return self[name]

    def __getitem__(self, name):
        return CollectionProxy(self._database[name], self._overrides.get(name, {}))


def raising(error):
    def _raise(*args, **kwargs):
        raise error

    return _raise


@pytest.fixture
def patch_store(db, monkeypatch):
    """patch_store(module, {"jobs": {"find": ...}}) swaps collection methods seen by `module`."""

    def _patch(module, overrides):
        proxy = DatabaseProxy(db, overrides)
        monkeypatch.setattr(module, "get_db", lambda: proxy)
        return proxy

    return _patch
