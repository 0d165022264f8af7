# File: lexistack_app/modules/auth/forms.py
# Form đăng nhập trang quản trị bằng mã passcode.

from flask_wtf import FlaskForm
from wtforms import BooleanField, PasswordField
from wtforms.validators import DataRequired


class LoginForm(FlaskForm):
    """
    Form đăng nhập quản trị.
    """
    passcode = PasswordField('Mã quản trị', validators=[DataRequired(message="Vui lòng nhập mã quản trị.")])
    remember_me = BooleanField('Ghi nhớ đăng nhập')
