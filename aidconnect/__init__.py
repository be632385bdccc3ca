"""Flask application factory."""
from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager

from config import Config

db = SQLAlchemy()
login_manager = LoginManager()


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)
    app.logger.setLevel(app.config.get('LOG_LEVEL', 'INFO'))

    db.init_app(app)
    login_manager.init_app(app)

    from aidconnect.errors import AidConnectError
    from aidconnect.services.record_store import create_record_store
    from aidconnect.services.session_gate import load_account, current_role, current_username

    app.extensions['record_store'] = create_record_store(app)

    @login_manager.user_loader
    def load_user(account_id):
        return load_account(account_id)

    @app.errorhandler(AidConnectError)
    def handle_error(error):
        return jsonify({'success': False, 'error': error.message}), error.status_code

    from aidconnect.routes.auth import auth_bp
    from aidconnect.routes.requests import requests_bp
    from aidconnect.routes.ngo import ngo_bp
    from aidconnect.routes.admin import admin_bp

    app.register_blueprint(auth_bp, url_prefix='/auth')
    app.register_blueprint(requests_bp, url_prefix='/requests')
    app.register_blueprint(ngo_bp, url_prefix='/ngo')
    app.register_blueprint(admin_bp, url_prefix='/admin')

    @app.route('/')
    def index():
        return jsonify({'role': current_role(), 'username': current_username()})

    if app.config['RECORD_STORE_BACKEND'] == 'sql':
        with app.app_context():
            db.create_all()

    return app
