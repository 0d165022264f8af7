# lexistack_app/modules/content/forms.py
# Form cho trang quản trị nội dung: nhập file JSON và cấu hình màn chơi Defense.

from flask_wtf import FlaskForm
from flask_wtf.file import FileAllowed
from wtforms import IntegerField, MultipleFileField, SelectField, StringField
from wtforms.validators import DataRequired, Length, NumberRange, Optional

from lexistack_app.modules.learning.config import DefenseGameConfig

from .logics.validators import DEFENSE_SOURCE_TYPES


class ImportForm(FlaskForm):
    """Batch upload of JSON documents."""
    files = MultipleFileField('File JSON',
                              validators=[FileAllowed(['json'], 'Chỉ chấp nhận file .json')])


class DefenseConfigForm(FlaskForm):
    """
    Form tạo hoặc sửa một màn chơi Defense.
    Field names follow the stored document keys.
    """
    title = StringField('Tiêu đề', validators=[DataRequired(message='Required'), Length(max=255)])
    type = SelectField('Loại nguồn câu hỏi',
                       choices=[(value, value.capitalize()) for value in DEFENSE_SOURCE_TYPES],
                       validators=[DataRequired(message='Required')])
    source_id = StringField('Bộ nguồn', name='sourceId', validators=[DataRequired(message='Required')])
    enemy_count = IntegerField('Tổng số kẻ địch', name='enemyCount',
                               default=DefenseGameConfig.DEFAULT_ENEMY_COUNT,
                               validators=[DataRequired(), NumberRange(min=5, max=100)])
    spawn_rate = IntegerField('Tốc độ xuất hiện (ms)', name='spawnRate',
                              default=DefenseGameConfig.DEFAULT_SPAWN_RATE,
                              validators=[DataRequired(), NumberRange(min=500, max=10000)])
    difficulty = SelectField('Độ khó mặc định',
                             choices=[(name, name) for name in DefenseGameConfig.DIFFICULTIES],
                             default=DefenseGameConfig.DEFAULT_DIFFICULTY,
                             validators=[Optional()])
    tags = StringField('Thẻ (cách nhau bởi dấu phẩy)', validators=[Optional(), Length(max=255)])

    def to_document(self, set_id: str) -> dict:
        return {
            'id': set_id,
            'title': self.title.data,
            'type': self.type.data,
            'sourceId': self.source_id.data,
            'enemyCount': self.enemy_count.data,
            'spawnRate': self.spawn_rate.data,
            'difficulty': self.difficulty.data or DefenseGameConfig.DEFAULT_DIFFICULTY,
            'tags': [t.strip() for t in (self.tags.data or '').split(',') if t.strip()],
        }
