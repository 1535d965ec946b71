import pytest

from app import create_app
from models import Customer, User, db


@pytest.fixture
def app():
    app = create_app({
        "TESTING": True,
        "SECRET_KEY": "testsecret",
        "SQLALCHEMY_DATABASE_URI": "sqlite://",
        "CACHE_TYPE": "SimpleCache",
    })
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def customer(app):
    c = Customer(id="c1", name="Delba de Oliveira", email="delba@oliveira.com")
    db.session.add(c)
    db.session.commit()
    return c.id


@pytest.fixture
def user(app):
    u = User(email="user@nextmail.com", name="User", is_confirmed=True)
    u.set_password("123456")
    db.session.add(u)
    db.session.commit()
    return u.email


class RecordingRevalidator:
    def __init__(self):
        self.paths = []

    def revalidate_path(self, path):
        self.paths.append(path)


@pytest.fixture
def revalidator():
    return RecordingRevalidator()
