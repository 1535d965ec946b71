import logging
import os

from flask import Flask, request, redirect, url_for, jsonify
from flask_login import LoginManager, login_required, logout_user

import actions
from models import db, Invoice, User
from revalidate import cache, PathRevalidator, VIEW_KEY, INVOICES_PATH
from store import SqlInvoiceStore

# -------------------------
# Config & helpers
# -------------------------

def make_db_uri() -> str:
    url = os.environ.get("DATABASE_URL")
    if url and url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql://", 1)
    return url or "sqlite:///local.db"

def make_secret_key() -> str:
    return os.environ.get("SECRET_KEY", "dev-secret-key")

def make_engine_options(uri: str) -> dict:
    # SQLite gets its own pool from Flask-SQLAlchemy
    if uri.startswith("sqlite"):
        return {}
    return {
        "pool_pre_ping": True,
        "pool_size": int(os.environ.get("DB_POOL_SIZE", "5")),
        "max_overflow": int(os.environ.get("DB_MAX_OVERFLOW", "5")),
    }

def configure_logging() -> None:
    level = os.environ.get("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

login_manager = LoginManager()
login_manager.login_view = "login"

@login_manager.user_loader
def load_user(user_id):
    return db.session.get(User, int(user_id))

# -------------------------
# App / DB init
# -------------------------

def create_app(config=None) -> Flask:
    configure_logging()
    app = Flask(__name__)
    app.config["SQLALCHEMY_DATABASE_URI"] = make_db_uri()
    app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False
    app.config["CACHE_TYPE"] = os.environ.get("CACHE_TYPE", "SimpleCache")
    app.config["CACHE_DEFAULT_TIMEOUT"] = int(os.environ.get("CACHE_DEFAULT_TIMEOUT", "300"))
    app.secret_key = make_secret_key()
    if config:
        app.config.update(config)
    app.config.setdefault(
        "SQLALCHEMY_ENGINE_OPTIONS",
        make_engine_options(app.config["SQLALCHEMY_DATABASE_URI"]),
    )

    db.init_app(app)
    cache.init_app(app)
    login_manager.init_app(app)

    register_routes(app)
    register_commands(app)
    return app

def invoice_store():
    return SqlInvoiceStore(db.session)

def respond(outcome):
    """Turn a handler outcome into an HTTP response."""
    if isinstance(outcome, actions.Success):
        if outcome.navigate_to:
            return redirect(outcome.navigate_to)
        return "", 204
    status = 422 if isinstance(outcome, actions.ValidationFailed) else 500
    return jsonify(actions.as_state(outcome)), status

# -------------------------
# Routes
# -------------------------

def register_routes(app):

    @app.route("/login", methods=["GET", "POST"])
    def login():
        if request.method == "GET":
            return jsonify({"message": None})
        message = actions.authenticate(None, request.form)
        if message is not None:
            return jsonify({"message": message}), 401
        return redirect(url_for("list_invoices"))

    @app.route("/logout")
    @login_required
    def logout():
        logout_user()
        return redirect(url_for("login"))

    @app.route(INVOICES_PATH)
    @login_required
    @cache.cached(key_prefix=VIEW_KEY)
    def list_invoices():
        invoices = Invoice.query.order_by(Invoice.date.desc(), Invoice.id).all()
        return {"invoices": [i.to_dict() for i in invoices]}

    @app.route(INVOICES_PATH + "/create", methods=["POST"])
    @login_required
    def create_invoice():
        outcome = actions.create_invoice(None, request.form, invoice_store(), PathRevalidator())
        return respond(outcome)

    @app.route(INVOICES_PATH + "/<invoice_id>/edit", methods=["POST"])
    @login_required
    def update_invoice(invoice_id):
        outcome = actions.update_invoice(
            invoice_id, None, request.form, invoice_store(), PathRevalidator()
        )
        return respond(outcome)

    @app.route(INVOICES_PATH + "/<invoice_id>/delete", methods=["POST"])
    @login_required
    def delete_invoice(invoice_id):
        outcome = actions.delete_invoice(invoice_id, invoice_store(), PathRevalidator())
        return respond(outcome)

    @app.route("/healthz")
    def healthz():
        return jsonify({"status": "ok"}), 200

# -------------------------
# CLI helpers
# -------------------------

def register_commands(app):

    @app.cli.command("init-db")
    def init_db():
        """Create the customers, invoices and users tables."""
        db.create_all()
        print("Database tables created.")

    @app.cli.command("create-user")
    def create_user():
        """Create a confirmed user from env USER_EMAIL / USER_PASSWORD / USER_NAME."""
        email = os.environ.get("USER_EMAIL")
        password = os.environ.get("USER_PASSWORD")
        if not email or not password:
            print("Set USER_EMAIL and USER_PASSWORD env vars before running this command.")
            return
        email = email.strip().lower()
        if User.query.filter_by(email=email).first():
            print("User already exists.")
            return
        u = User(email=email, name=os.environ.get("USER_NAME", ""), is_confirmed=True)
        u.set_password(password)
        db.session.add(u)
        db.session.commit()
        print(f"User created: {email}")

# -------------------------
# App entry (dev)
# -------------------------
if __name__ == "__main__":
    port = int(os.environ.get("PORT", "8000"))
    create_app().run(host="0.0.0.0", port=port, debug=True)
