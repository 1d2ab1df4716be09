import logging

from werkzeug.exceptions import BadRequest, NotFound

from community import db
from community.models import Semester
from community.utils.decorators import assert_owner, optional_str

logger = logging.getLogger(__name__)


def _validate(data, partial=False):
    for field, label in (('title', '제목'), ('description', '설명')):
        if partial and field not in data:
            continue
        value = data.get(field)
        if not isinstance(value, str) or not value.strip():
            raise BadRequest(f'{label}을 입력해주세요.')
    if len(data.get('title') or '') > 200:
        raise BadRequest('제목은 200자 이하여야 합니다.')
    optional_str(data, 'imageUrl', '이미지 경로는 문자열이어야 합니다.')


def list_semesters():
    return Semester.query.order_by(Semester.created_at.desc(), Semester.id.desc()).all()


def list_basic_info():
    return [{
        "id": s.id,
        "title": s.title,
        "description": s.description,
        "imageUrl": s.image_url,
    } for s in Semester.query.order_by(Semester.created_at.desc(), Semester.id.desc()).all()]


def get_one(semester_id):
    semester = db.session.get(Semester, semester_id)
    if semester is None:
        raise NotFound(f'Semester with id {semester_id} not found')
    return semester


def create(data, acting_user_id):
    _validate(data)
    semester = Semester(
        author_id=acting_user_id,
        title=data['title'].strip(),
        description=data['description'],
        image_url=data.get('imageUrl'),
    )
    db.session.add(semester)
    db.session.commit()
    logger.info(f"Semester {semester.id} created by user {acting_user_id}")
    return semester


def update(semester_id, data, acting_user_id):
    semester = get_one(semester_id)
    assert_owner(semester.author_id, acting_user_id, '본인의 글만 수정할 수 있습니다.')
    _validate(data, partial=True)
    if 'title' in data:
        semester.title = data['title'].strip()
    if 'description' in data:
        semester.description = data['description']
    if 'imageUrl' in data:
        semester.image_url = data['imageUrl']
    db.session.commit()
    return semester


def remove(semester_id, acting_user_id):
    semester = get_one(semester_id)
    assert_owner(semester.author_id, acting_user_id, '본인의 글만 삭제할 수 있습니다.')
    db.session.delete(semester)
    db.session.commit()
    logger.info(f"Semester {semester_id} deleted by user {acting_user_id}")
    return {"message": f"Semester with id {semester_id} deleted."}
