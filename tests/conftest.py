import pytest
from fastapi.testclient import TestClient

from config import Settings
from helpers import FIXED_NOW
from main import create_app
from repository import BookingRepository
from storage import JsonFileMirror


@pytest.fixture
def data_file(tmp_path):
    return str(tmp_path / "data" / "bookings.json")


@pytest.fixture
def mirror(data_file):
    return JsonFileMirror(data_file)


@pytest.fixture
def repo(mirror):
    return BookingRepository(mirror, clock=lambda: FIXED_NOW)


@pytest.fixture
def client(data_file):
    app = create_app(Settings(data_file=data_file))
    with TestClient(app) as c:
        yield c
