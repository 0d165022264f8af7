# File: lexistack_app/modules/auth/routes.py
import hmac
import logging

from flask import current_app, jsonify
from flask_login import current_user, login_required, login_user, logout_user

from lexistack_app.core.error_handlers import ValidationError, error_response, success_response
from lexistack_app.extensions import login_manager
from lexistack_app.models import AdminUser

from . import auth_bp
from .forms import LoginForm

logger = logging.getLogger(__name__)


@login_manager.user_loader
def load_user(user_id):
    return AdminUser.load(user_id)


@login_manager.unauthorized_handler
def unauthorized():
    return error_response('Authentication required', 'UNAUTHENTICATED', 401)


@auth_bp.route('/login', methods=['POST'])
def login():
    form = LoginForm()
    if not form.validate_on_submit():
        raise ValidationError('Invalid login request', errors=form.errors)

    expected = str(current_app.config.get('ADMIN_PASSCODE', ''))
    if not hmac.compare_digest(form.passcode.data.encode('utf-8'), expected.encode('utf-8')):
        logger.warning("Đăng nhập quản trị thất bại")
        return error_response('Mã quản trị không đúng.', 'INVALID_PASSCODE', 401)

    login_user(AdminUser(), remember=form.remember_me.data)
    logger.info("Quản trị viên đã đăng nhập")
    return jsonify(success_response({'user': current_user.get_id()}, 'Đăng nhập thành công!'))


@auth_bp.route('/logout', methods=['POST'])
@login_required
def logout():
    logout_user()
    return jsonify(success_response(message='Đã đăng xuất.'))


@auth_bp.route('/me', methods=['GET'])
def me():
    return jsonify(success_response({
        'authenticated': current_user.is_authenticated,
        'user': current_user.get_id() if current_user.is_authenticated else None,
    }))
