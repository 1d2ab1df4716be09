import logging

from werkzeug.exceptions import BadRequest, Conflict, NotFound

from community import db
from community.models import Member
from community.utils.decorators import assert_owner, optional_str

logger = logging.getLogger(__name__)

NAME_MAX_LENGTH = 50


def _validate(data, partial=False):
    if not partial or 'name' in data:
        name = data.get('name')
        if not isinstance(name, str) or not name.strip():
            raise BadRequest('이름을 입력해주세요.')
        if len(name) > NAME_MAX_LENGTH:
            raise BadRequest(f'이름은 {NAME_MAX_LENGTH}자 이하여야 합니다.')
    if not partial or 'introduction' in data:
        introduction = data.get('introduction')
        if not isinstance(introduction, str) or not introduction.strip():
            raise BadRequest('소개를 입력해주세요.')
    optional_str(data, 'imageUrl', '이미지 경로는 문자열이어야 합니다.')


def list_members():
    return Member.query.order_by(Member.id.asc()).all()


def list_basic_info():
    return [{
        "id": m.id,
        "name": m.name,
        "imageUrl": m.image_url,
        "introduction": m.introduction,
        "user_id": m.user_id,
    } for m in Member.query.order_by(Member.id.asc()).all()]


def get_one(member_id):
    member = db.session.get(Member, member_id)
    if member is None:
        raise NotFound(f'Member with id {member_id} not found')
    return member


def serialize(member):
    data = member.to_dict()
    data["user"] = member.user.to_summary() if member.user else None
    return data


def create(data, acting_user_id):
    _validate(data)
    if Member.query.filter_by(user_id=acting_user_id).first():
        raise Conflict('이미 멤버 프로필이 존재합니다.')
    member = Member(
        user_id=acting_user_id,
        name=data['name'].strip(),
        introduction=data['introduction'],
        image_url=data.get('imageUrl'),
    )
    db.session.add(member)
    db.session.commit()
    logger.info(f"Member profile {member.id} created for user {acting_user_id}")
    return member


def update(member_id, data, acting_user_id):
    member = get_one(member_id)
    assert_owner(member.user_id, acting_user_id, '본인의 프로필만 수정할 수 있습니다.')
    _validate(data, partial=True)
    if 'name' in data:
        member.name = data['name'].strip()
    if 'introduction' in data:
        member.introduction = data['introduction']
    if 'imageUrl' in data:
        member.image_url = data['imageUrl']
    db.session.commit()
    return member


def remove(member_id, acting_user_id):
    member = get_one(member_id)
    assert_owner(member.user_id, acting_user_id, '본인의 프로필만 삭제할 수 있습니다.')
    db.session.delete(member)
    db.session.commit()
    logger.info(f"Member profile {member_id} deleted by user {acting_user_id}")
    return {"message": f"Member with id {member_id} deleted."}
