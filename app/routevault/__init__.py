import logging

from dotenv import load_dotenv
from flask import Flask

from app.routevault.config import check_secret_key, load_config
from app.routevault.errors import register_error_handlers
from app.routevault.ratelimit import init_rate_limits
from app.routevault.security import install_response_headers
from app.routevault.seed import seed_document
from app.routevault.store import init_store
from app.routevault.routes import bp as routes_bp
from app.routevault.auth import bp as auth_bp, load_current_user
from app.routevault.admin import bp as admin_bp
from app.routevault.modules.submissions.api import bp as submissions_bp


def create_app() -> Flask:
    load_dotenv()
    app = Flask(__name__)
    app.config.from_mapping(load_config())
    app.json.sort_keys = False

    # Startup guardrail: no signing secret, no boot.
    check_secret_key(app.config.get("SECRET_KEY"))

    store = init_store(app)
    if not store.exists():
        if app.config["ADMIN_PASSWORD"] == "change-me":
            app.logger.warning("ADMIN_PASSWORD not set; seeding developer %r with the default password.", app.config["ADMIN_USERNAME"])
        try:
            current = store.read_strict()
        except Exception:
            app.logger.exception("Store document %s unreadable; skipping seed", store.key)
        else:
            doc = seed_document(
                current,
                admin_username=app.config["ADMIN_USERNAME"],
                admin_password=app.config["ADMIN_PASSWORD"],
                hash_method=app.config["PASSWORD_HASH_METHOD"],
                location_names=app.config["SEED_LOCATIONS"],
            )
            if store.write(doc):
                app.logger.info("Store initialized (key=%s). Developer: %s", store.key, app.config["ADMIN_USERNAME"])

    app.before_request(load_current_user)
    init_rate_limits(app)
    install_response_headers(app)
    register_error_handlers(app)

    app.register_blueprint(routes_bp)
    app.register_blueprint(auth_bp, url_prefix="/api")
    app.register_blueprint(submissions_bp, url_prefix="/api")
    app.register_blueprint(admin_bp, url_prefix="/api")

    # Startup logging
    logging.getLogger(__name__).info("create_app() complete; app ready to serve")

    return app
