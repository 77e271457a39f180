from datetime import date

import click
from dateutil.parser import parse as dateparse

from . import db
from .models import Author, Book, BookInstance, Genre

SAMPLE_AUTHORS = [
    ("Patrick", "Rothfuss", "1973-06-06", None),
    ("Ben", "Bova", "1932-11-08", None),
    ("Isaac", "Asimov", "1920-01-02", "1992-04-06"),
    ("Bob", "Billings", None, None),
    ("Jim", "Jones", "1971-12-16", None),
]

SAMPLE_GENRES = ["Fantasy", "Science Fiction", "French Poetry"]

# title, summary, isbn, author index, genre indexes
SAMPLE_BOOKS = [
    ("The Name of the Wind (The Kingkiller Chronicle, #1)",
     "I have stolen princesses back from sleeping barrow kings. I burned down the town of Trebon.",
     "9781473211896", 0, [0]),
    ("The Wise Man's Fear (The Kingkiller Chronicle, #2)",
     "Picking up the tale of Kvothe Kingkiller once again, we follow him into exile.",
     "9788401352836", 0, [0]),
    ("Apes and Angels",
     "Humankind headed out to the stars not for conquest, nor exploration, nor even for curiosity.",
     "9780765379528", 1, [1]),
    ("Death Wave",
     "In Ben Bova's previous novel New Earth, Jordan Kell led the first human mission beyond the solar system.",
     "9780765379504", 1, [1]),
    ("Test Book 1", "Summary of test book 1", "ISBN111111", 4, [0, 1]),
]

# book index, imprint, status, due back
SAMPLE_INSTANCES = [
    (0, "London Gollancz, 2014.", "Available", None),
    (1, "Gollancz, 2011.", "Loaned", "2026-11-02"),
    (2, "Gollancz, 2015.", "Available", None),
    (3, "New York Tom Doherty Associates, 2016.", "Maintenance", None),
    (3, "New York Tom Doherty Associates, 2016.", "Loaned", "2026-11-20"),
]


def _date(value):
    return dateparse(value).date() if value else None


def seed_sample_data():
    """Insert the sample catalog. Returns False when the store already holds authors."""
    if Author.query.first():
        return False

    authors = [Author(first_name=first, family_name=family, date_of_birth=_date(born), date_of_death=_date(died))
               for first, family, born, died in SAMPLE_AUTHORS]
    genres = [Genre(name=name) for name in SAMPLE_GENRES]
    books = [Book(title=title, summary=summary, isbn=isbn, author=authors[a], genre=[genres[g] for g in gs])
             for title, summary, isbn, a, gs in SAMPLE_BOOKS]
    instances = [BookInstance(book=books[b], imprint=imprint, status=status, due_back=_date(due) or date.today())
                 for b, imprint, status, due in SAMPLE_INSTANCES]

    db.session.add_all(authors + genres + books + instances)
    db.session.commit()
    return True


def register_commands(app):
    @app.cli.command("init-db")
    @click.option("--drop", is_flag=True, help="Drop existing tables first.")
    def init_db(drop):
        """Create the catalog tables."""
        if drop:
            db.drop_all()
        db.create_all()
        click.echo("Initialized the database.")

    @app.cli.command("seed-db")
    def seed_db():
        """Create tables and add sample data (for dev only)."""
        db.create_all()
        if seed_sample_data():
            click.echo("Seeded the database with sample data.")
        else:
            click.echo("Database already has data.")
