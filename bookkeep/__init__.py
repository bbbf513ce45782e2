import os

from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix

from config import Config, engine_options_for
from extensions import db, bcrypt, login_manager, migrate, babel, csrf
from logging_setup import setup_logging


def create_app(config_class=None):
    base_dir = os.path.dirname(os.path.abspath(__file__))
    project_root = os.path.abspath(os.path.join(base_dir, '..'))
    app = Flask(
        __name__,
        template_folder=os.path.join(project_root, 'templates'),
        static_folder=os.path.join(project_root, 'static'),
        static_url_path='/static',
    )

    # Honor reverse proxy headers (scheme/host behind a load balancer)
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1, x_prefix=1)

    app.config.from_object(config_class or Config)
    app.config.setdefault('WTF_CSRF_SECRET_KEY', app.config['SECRET_KEY'])
    app.config['SQLALCHEMY_ENGINE_OPTIONS'] = engine_options_for(app.config['SQLALCHEMY_DATABASE_URI'])

    setup_logging(app)

    db.init_app(app)
    bcrypt.init_app(app)
    login_manager.init_app(app)
    migrate.init_app(app, db)
    babel.init_app(app)
    csrf.init_app(app)

    login_manager.login_view = 'main.login'
    login_manager.login_message_category = 'warning'
    from models import User

    @login_manager.user_loader
    def load_user(user_id):
        try:
            return db.session.get(User, int(user_id))
        except (TypeError, ValueError):
            return None

    from services.formatting import register_filters
    register_filters(app)

    from routes.common import register_context
    register_context(app)

    from routes.main import bp as main_bp
    from routes.sales import bp as sales_bp
    from routes.purchases import bp as purchases_bp
    from routes.invoices import bp as invoices_bp
    from routes.purchase_orders import bp as purchase_orders_bp
    from routes.journal import bp as journal_bp
    from routes.contacts import bp as contacts_bp
    from routes.categories import bp as categories_bp
    from routes.items import bp as items_bp
    from routes.accounts import bp as accounts_bp
    from routes.reports import bp as reports_bp
    for bp in (main_bp, sales_bp, purchases_bp, invoices_bp, purchase_orders_bp, journal_bp,
               contacts_bp, categories_bp, items_bp, accounts_bp, reports_bp):
        app.register_blueprint(bp)

    from bookkeep.commands import register_commands
    register_commands(app)

    # Ensure tables exist on startup (useful for local SQLite runs)
    with app.app_context():
        db.create_all()

    app.logger.info('BookKeep app created (db=%s)', app.config['SQLALCHEMY_DATABASE_URI'].split('@')[-1])
    return app
