# tests/conftest.py

from datetime import datetime

import pytest
from flask import g
from werkzeug.security import generate_password_hash

from caltrail import create_app, db
from caltrail.models.food import Food
from caltrail.models.meal import MealEntry
from caltrail.models.user import Role, User
from caltrail.services.auth import issue_token

TEST_SECRET = "test-secret-key-that-is-long-enough-for-tokens"


@pytest.fixture
def app():
    app = create_app({
        "TESTING": True,
        "SECRET_KEY": TEST_SECRET,
        "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
        "USDA_API_KEY": "test-key",
    })

    # client requests run inside the fixture's app context and share its `g`;
    # drop the user Flask-Login cached there so each request authenticates afresh
    @app.before_request
    def _reset_login_user():
        g.pop("_login_user", None)

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def _user(name, email, role=Role.USER, nutritionist=None, password="secret123"):
    u = User(
        name=name,
        email=email,
        password=generate_password_hash(password),
        role=role,
        assigned_nutritionist_id=nutritionist.id if nutritionist else None,
    )
    db.session.add(u)
    db.session.commit()
    return u


@pytest.fixture
def admin(app):
    return _user("Admin", "admin@x.com", Role.ADMIN)


@pytest.fixture
def nutritionist(app):
    return _user("Nina", "nina@x.com", Role.NUTRITIONIST)


@pytest.fixture
def other_nutritionist(app):
    return _user("Otto", "otto@x.com", Role.NUTRITIONIST)


@pytest.fixture
def user(app, nutritionist):
    # assigned to `nutritionist`
    return _user("Ursula", "ursula@x.com", nutritionist=nutritionist)


@pytest.fixture
def other_user(app):
    return _user("Ulrich", "ulrich@x.com")


@pytest.fixture
def chicken(app):
    f = Food(name="Chicken Breast", calories=165, protein=31, fat=3.6, carbs=0, fiber=0)
    db.session.add(f)
    db.session.commit()
    return f


@pytest.fixture
def rice(app):
    f = Food(name="Brown Rice", calories=112, protein=2.6, fat=0.9, carbs=23, fiber=1.8)
    db.session.add(f)
    db.session.commit()
    return f


@pytest.fixture
def lunch(app, user, chicken, rice):
    """150 g chicken + 200 g rice for `user` at lunch on 2024-01-15."""
    when = datetime(2024, 1, 15, 12, 30)
    entries = [
        MealEntry(user_id=user.id, food_id=chicken.id, quantity=150, date=when, meal_type="lunch"),
        MealEntry(user_id=user.id, food_id=rice.id, quantity=200, date=when, meal_type="lunch"),
    ]
    db.session.add_all(entries)
    db.session.commit()
    return entries


def auth_headers(user):
    return {"Authorization": f"Bearer {issue_token(user)}"}
