from collections import namedtuple
from dataclasses import dataclass, field
from typing import List, Optional

import bleach
from flask_wtf import FlaskForm
from markupsafe import Markup
from wtforms import SelectMultipleField, StringField, TextAreaField
from wtforms.validators import DataRequired, Length, Regexp

TITLE_REQUIRED = "Title of the book must be specified"
AUTHOR_REQUIRED = "Author must not be empty."
AUTHOR_UNKNOWN = "Author must be chosen from the list."
SUMMARY_TOO_SHORT = "Summary must be atleast 10 chacacter long"
ISBN_REQUIRED = "ISBN must not be empty"

SUMMARY_MIN_LENGTH = 10


# Pairs a genre with whether its checkbox starts ticked on the book form.
GenreChoice = namedtuple('GenreChoice', ['genre', 'checked'])


def normalize_genre(value):
    """Coerce the submitted genre value into a list of ids.

    Missing -> [], a single value -> [value], a list is returned unchanged.
    """
    if value is None:
        return []
    if isinstance(value, list):
        return value
    if isinstance(value, tuple):
        return list(value)
    return [value]


def strip_whitespace(value):
    return value.strip() if isinstance(value, str) else value


def escape(value):
    """Neutralise markup so the value is safe to store and redisplay."""
    if not value:
        return value or ""
    return bleach.clean(value, tags=set(), attributes={}, strip=False)


def unescape(value):
    """Undo the stored escaping once; Jinja autoescaping re-applies it on render."""
    return Markup(value or "").unescape()


def genre_choices(genres, selected_ids):
    selected = {str(genre_id) for genre_id in selected_ids}
    return [GenreChoice(genre, str(genre.id) in selected) for genre in genres]


@dataclass
class BookCandidate:
    """A book built from form input (or from a stored book for editing)."""

    title: str = ""
    author: str = ""
    summary: str = ""
    isbn: str = ""
    genre: List[str] = field(default_factory=list)
    id: Optional[int] = None

    @classmethod
    def from_book(cls, book):
        return cls(
            title=book.title,
            author=str(book.author_id) if book.author_id is not None else "",
            summary=book.summary,
            isbn=book.isbn,
            genre=[str(g.id) for g in book.genre],
            id=book.id,
        )

    @property
    def genre_ids(self):
        return [int(g) for g in self.genre if str(g).isdecimal()]

    @property
    def url(self):
        return f"/catalog/book/{self.id}" if self.id is not None else None


class BookForm(FlaskForm):
    title = StringField('Title', default="", filters=[strip_whitespace],
                        validators=[DataRequired(message=TITLE_REQUIRED)])
    author = StringField('Author', default="", filters=[strip_whitespace],
                         validators=[DataRequired(message=AUTHOR_REQUIRED), Regexp(r"^\d+$", message=AUTHOR_UNKNOWN)])
    summary = TextAreaField('Summary', default="", filters=[strip_whitespace],
                            validators=[Length(min=SUMMARY_MIN_LENGTH, message=SUMMARY_TOO_SHORT)])
    isbn = StringField('ISBN', default="", filters=[strip_whitespace],
                       validators=[DataRequired(message=ISBN_REQUIRED)])
    genre = SelectMultipleField('Genre', choices=[], validate_choice=False)

    def to_candidate(self, book_id=None):
        """Build the candidate from trimmed, escaped input, valid or not."""
        return BookCandidate(
            title=escape(self.title.data),
            author=escape(self.author.data),
            summary=escape(self.summary.data),
            isbn=escape(self.isbn.data),
            genre=[escape(g) for g in normalize_genre(self.genre.data)],
            id=book_id,
        )

    def error_list(self):
        """Flatten field errors into [{'field': ..., 'message': ...}] in form order."""
        errors = []
        for name, messages in self.errors.items():
            for message in messages:
                errors.append({'field': name, 'message': message})
        return errors
