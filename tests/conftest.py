from datetime import date

import pytest
from flask import template_rendered

from locallibrary import create_app, db
from locallibrary.config import TestingConfig
from locallibrary.models import Author, Book, BookInstance, Genre


@pytest.fixture
def app(tmp_path):
    app = create_app(TestingConfig, SQLALCHEMY_DATABASE_URI=f"sqlite:///{tmp_path / 'test.db'}")
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def runner(app):
    return app.test_cli_runner()


@pytest.fixture
def rendered(app):
    """Record (template name, context) for every template rendered during a test."""
    recorded = []

    def record(sender, template, context, **extra):
        recorded.append((template.name, context))

    template_rendered.connect(record, app)
    yield recorded
    template_rendered.disconnect(record, app)


@pytest.fixture
def library(app):
    """Two authors, four genres, three books and five copies (two available).

    Returns the ids of everything it created, keyed by a short name.
    """
    with app.app_context():
        herbert = Author(first_name="Frank", family_name="Herbert", date_of_birth=date(1920, 10, 8))
        le_guin = Author(first_name="Ursula", family_name="Le Guin")
        scifi = Genre(name="Science Fiction")
        fantasy = Genre(name="Fantasy")
        poetry = Genre(name="French Poetry")
        horror = Genre(name="Horror")

        messiah = Book(title="Dune Messiah", author=herbert, summary="The sequel to Dune, set twelve years later.",
                       isbn="9780441172696", genre=[scifi])
        earthsea = Book(title="A Wizard of Earthsea", author=le_guin, summary="A young wizard learns the cost of power.",
                        isbn="9780547773742", genre=[fantasy])
        lathe = Book(title="The Lathe of Heaven", author=le_guin, summary="A man whose dreams change reality.",
                     isbn="9781416556961", genre=[scifi, fantasy])

        copies = [
            BookInstance(book=messiah, imprint="Ace, 1987.", status="Available"),
            BookInstance(book=messiah, imprint="Ace, 2008.", status="Loaned", due_back=date(2026, 11, 1)),
            BookInstance(book=earthsea, imprint="Parnassus, 1968.", status="Available"),
            BookInstance(book=earthsea, imprint="Puffin, 1971.", status="Maintenance"),
            BookInstance(book=earthsea, imprint="Bantam, 1975.", status="Reserved"),
        ]

        db.session.add_all([herbert, le_guin, scifi, fantasy, poetry, horror, messiah, earthsea, lathe] + copies)
        db.session.commit()

        return {
            'herbert': herbert.id,
            'le_guin': le_guin.id,
            'scifi': scifi.id,
            'fantasy': fantasy.id,
            'poetry': poetry.id,
            'horror': horror.id,
            'messiah': messiah.id,
            'earthsea': earthsea.id,
            'lathe': lathe.id,
        }


@pytest.fixture
def context_of(rendered):
    """Look up the context of the last render of a template."""

    def lookup(template_name):
        for name, context in reversed(rendered):
            if name == template_name:
                return context
        raise AssertionError(f"{template_name} was not rendered; got {[name for name, _ in rendered]}")

    return lookup
