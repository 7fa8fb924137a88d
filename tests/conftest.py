import os
import tempfile
from datetime import date, timedelta
from types import SimpleNamespace

import pytest

# La configuración se lee al importar el paquete
_tmpdir = tempfile.mkdtemp(prefix="golf_handicap_")
os.environ["DATABASE_URL"] = f"sqlite:///{_tmpdir}/test.db"

from fastapi.testclient import TestClient  # noqa: E402

from golf_handicap.db import Base, engine  # noqa: E402
from golf_handicap.main import app  # noqa: E402


def make_round(score, rating=72.0, slope=113, day=None, **extra):
    return SimpleNamespace(
        score=score,
        rating=rating,
        slope=slope,
        date=day or date.today(),
        **extra,
    )


@pytest.fixture
def client():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def player(client):
    res = client.post("/api/players", json={"name": "Seve", "favorite_course": "Pedreña"})
    assert res.status_code == 200
    return res.json()


@pytest.fixture
def days_ago():
    return lambda n: (date.today() - timedelta(days=n)).isoformat()
