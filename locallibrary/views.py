import logging

from flask import Blueprint, abort, redirect, render_template, request, url_for
from sqlalchemy import delete, exists, func, select
from sqlalchemy.orm import joinedload, load_only, selectinload

from . import db
from .forms import BookCandidate, BookForm, genre_choices
from .models import Author, Book, BookInstance, Genre, book_genre

logger = logging.getLogger(__name__)

bp = Blueprint('catalog', __name__, url_prefix='/catalog')


# --- Helpers ---
def _count(model, *criteria):
    stmt = select(func.count()).select_from(model)
    if criteria:
        stmt = stmt.where(*criteria)
    return stmt.scalar_subquery()


def _authors_and_genres():
    authors = Author.query.order_by(Author.family_name, Author.first_name).all()
    genres = Genre.query.order_by(Genre.name).all()
    return authors, genres


def _render_book_form(title, book, errors=None):
    authors, genres = _authors_and_genres()
    return render_template('book_form.html', title=title, authors=authors,
                           genres=genre_choices(genres, book.genre), book=book,
                           errors=errors or [])


def _apply_candidate(book, candidate):
    book.title = candidate.title
    book.author_id = int(candidate.author)
    book.summary = candidate.summary
    book.isbn = candidate.isbn
    ids = candidate.genre_ids
    book.genre = Genre.query.filter(Genre.id.in_(ids)).all() if ids else []
    return book


def _get_book_or_404(book_id, *options):
    book = db.session.get(Book, book_id, options=options or None)
    if book is None:
        logger.warning("Book %s not found", book_id)
        abort(404, description="Book not found")
    return book


# --- Dashboard ---
@bp.route('/')
def index():
    # One round trip: all five counts succeed or the request fails
    counts = db.session.execute(select(
        _count(Book).label('book_count'),
        _count(BookInstance).label('book_instance_count'),
        _count(BookInstance, BookInstance.status == "Available").label('book_instance_available_count'),
        _count(Author).label('author_count'),
        _count(Genre).label('genre_count'),
    )).one()

    return render_template('index.html', title="Local Library Home", **counts._asdict())


# --- Books ---
@bp.route('/books')
def book_list():
    books = (Book.query
             .options(load_only(Book.title, Book.author_id), joinedload(Book.author))
             .order_by(Book.title)
             .all())
    return render_template('book_list.html', title="Book List", book_list=books)


@bp.route('/book/<int:book_id>')
def book_detail(book_id):
    book = _get_book_or_404(book_id, joinedload(Book.author), selectinload(Book.genre))
    instances = BookInstance.query.filter_by(book_id=book_id).all()
    return render_template('book_detail.html', title=book.title, book=book, bookinstances=instances)


@bp.route('/book/create', methods=['GET', 'POST'])
def book_create():
    form = BookForm()
    if form.is_submitted():
        valid = form.validate()
        candidate = form.to_candidate()
        if not valid:
            return _render_book_form("Create Book", candidate, form.error_list())

        book = _apply_candidate(Book(), candidate)
        db.session.add(book)
        db.session.commit()
        logger.info("Created book %s (%s)", book.id, book.title)
        return redirect(book.url)

    return _render_book_form("Create Book", BookCandidate())


@bp.route('/book/<int:book_id>/delete', methods=['GET', 'POST'])
def book_delete(book_id):
    if request.method == 'POST':
        # Delete only while no copy references the book, in a single statement;
        # genre links go with it through ON DELETE CASCADE
        referenced = exists().where(BookInstance.book_id == book_id)
        result = db.session.execute(
            delete(Book).where(Book.id == book_id, ~referenced),
            execution_options={'synchronize_session': False},
        )
        if result.rowcount == 1:
            # No-op where the cascade ran; clears links on backends without foreign keys
            db.session.execute(delete(book_genre).where(book_genre.c.book_id == book_id))
            db.session.commit()
            logger.info("Deleted book %s", book_id)
            return redirect(url_for('catalog.book_list'))
        db.session.rollback()

    book = db.session.get(Book, book_id)
    if book is None:
        return redirect(url_for('catalog.book_list'))

    instances = BookInstance.query.filter_by(book_id=book_id).all()
    if request.method == 'POST':
        logger.info("Refused to delete book %s: %d copies still reference it", book_id, len(instances))
    return render_template('book_delete.html', title="Delete Book", book=book, instances=instances)


@bp.route('/book/<int:book_id>/update', methods=['GET', 'POST'])
def book_update(book_id):
    form = BookForm()
    if form.is_submitted():
        valid = form.validate()
        candidate = form.to_candidate(book_id=book_id)
        if not valid:
            return _render_book_form("Update Book", candidate, form.error_list())

        book = _apply_candidate(_get_book_or_404(book_id), candidate)
        db.session.commit()
        logger.info("Updated book %s (%s)", book.id, book.title)
        return redirect(book.url)

    book = _get_book_or_404(book_id, selectinload(Book.genre))
    return _render_book_form("Update Book", BookCandidate.from_book(book))
