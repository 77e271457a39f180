"""
locallibrary: book pages of a local library catalog (Flask + SQLAlchemy)

Features:
- Dashboard with catalog counts
- Book list, detail, create, update and delete pages
- Server-side validation and sanitisation of book forms (Flask-WTF, bleach)
- CSRF protection and security headers (Flask-Talisman)

Run:
  flask --app locallibrary seed-db
  flask --app locallibrary run
  then open http://127.0.0.1:5000/catalog/
"""

import logging

from flask import Flask, redirect, url_for
from flask_sqlalchemy import SQLAlchemy
from flask_talisman import Talisman
from flask_wtf import CSRFProtect

db = SQLAlchemy()
csrf = CSRFProtect()
talisman = Talisman()


def create_app(config_object=None, **overrides):
    from .cli import register_commands
    from .config import Config
    from .errors import register_error_handlers
    from .forms import unescape
    from .views import bp as catalog_bp

    app = Flask(__name__, template_folder="templates")
    app.config.from_object(config_object or Config)
    app.config.update(overrides)

    logging.basicConfig(
        level=app.config.get('LOG_LEVEL', "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    db.init_app(app)
    csrf.init_app(app)
    talisman.init_app(
        app,
        force_https=app.config['FORCE_HTTPS'],
        session_cookie_secure=app.config['FORCE_HTTPS'],
        content_security_policy=app.config['CONTENT_SECURITY_POLICY'],
    )

    app.add_template_filter(unescape, "unescaped")
    app.register_blueprint(catalog_bp)
    register_error_handlers(app)
    register_commands(app)

    @app.route('/')
    def home():
        return redirect(url_for('catalog.index'))

    return app
