import sqlite3
from datetime import date

from sqlalchemy import event
from sqlalchemy.engine import Engine

from . import db

BOOK_INSTANCE_STATUSES = ("Available", "Maintenance", "Loaned", "Reserved")


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores foreign keys (and ON DELETE CASCADE) unless asked per connection
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


book_genre = db.Table(
    'book_genre',
    db.Column('book_id', db.Integer, db.ForeignKey('books.id', ondelete='CASCADE'), primary_key=True),
    db.Column('genre_id', db.Integer, db.ForeignKey('genres.id'), primary_key=True),
)


class Author(db.Model):
    __tablename__ = 'authors'
    id = db.Column(db.Integer, primary_key=True)
    first_name = db.Column(db.String(100), nullable=False)
    family_name = db.Column(db.String(100), nullable=False, index=True)
    date_of_birth = db.Column(db.Date)
    date_of_death = db.Column(db.Date)

    books = db.relationship('Book', back_populates='author')

    @property
    def name(self):
        # Empty when either part is missing, so templates never show ", Jane"
        if self.first_name and self.family_name:
            return f"{self.family_name}, {self.first_name}"
        return ""

    @property
    def lifespan(self):
        born = self.date_of_birth.strftime("%b %d, %Y") if self.date_of_birth else ""
        died = self.date_of_death.strftime("%b %d, %Y") if self.date_of_death else ""
        if not born and not died:
            return ""
        return f"{born} - {died}"

    @property
    def url(self):
        return f"/catalog/author/{self.id}"


class Genre(db.Model):
    __tablename__ = 'genres'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False, unique=True, index=True)

    books = db.relationship('Book', secondary=book_genre, back_populates='genre')

    @property
    def url(self):
        return f"/catalog/genre/{self.id}"


class Book(db.Model):
    __tablename__ = 'books'
    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(250), nullable=False, index=True)
    author_id = db.Column(db.Integer, db.ForeignKey('authors.id'), nullable=False)
    summary = db.Column(db.Text, nullable=False)
    isbn = db.Column(db.String(32), nullable=False)

    author = db.relationship('Author', back_populates='books')
    genre = db.relationship('Genre', secondary=book_genre, back_populates='books', order_by='Genre.name')
    instances = db.relationship('BookInstance', back_populates='book')

    @property
    def url(self):
        return f"/catalog/book/{self.id}"


class BookInstance(db.Model):
    __tablename__ = 'book_instances'
    id = db.Column(db.Integer, primary_key=True)
    book_id = db.Column(db.Integer, db.ForeignKey('books.id'), nullable=False, index=True)
    imprint = db.Column(db.String(250), nullable=False)
    status = db.Column(db.Enum(*BOOK_INSTANCE_STATUSES, name='book_instance_status'),
                       nullable=False, default="Maintenance")
    due_back = db.Column(db.Date, default=date.today)

    book = db.relationship('Book', back_populates='instances')

    @property
    def url(self):
        return f"/catalog/bookinstance/{self.id}"

    @property
    def due_back_formatted(self):
        return self.due_back.strftime("%b %d, %Y") if self.due_back else ""
