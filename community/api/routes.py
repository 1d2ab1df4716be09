from flask import Blueprint, current_app, jsonify, request, send_from_directory
from flask_login import login_required, current_user

from community.services import (
    post_service,
    comment_service,
    message_service,
    member_service,
    semester_service,
    user_service,
    upload_service,
)
from community.utils.decorators import get_json_body, parse_int_arg

api_bp = Blueprint('api', __name__)


# --- Posts ---

@api_bp.route('/posts/all', methods=['GET'])
def get_posts():
    posts = post_service.list_posts(user_id=parse_int_arg('userId'))
    return jsonify([p.to_dict() for p in posts]), 200


@api_bp.route('/posts/info', methods=['GET'])
def get_posts_info():
    return jsonify(post_service.list_basic_info()), 200


@api_bp.route('/posts/search', methods=['GET'])
def search_posts():
    posts = post_service.search(request.args.get('keyword', ''))
    return jsonify([p.to_dict() for p in posts]), 200


@api_bp.route('/posts/<int:post_id>', methods=['GET'])
def get_post(post_id):
    return jsonify(post_service.view(post_id).to_dict()), 200


@api_bp.route('/posts/<int:post_id>/view', methods=['PATCH'])
def increment_post_views(post_id):
    return jsonify(post_service.increment_views(post_id).to_dict()), 200


@api_bp.route('/posts', methods=['POST'])
@login_required
def create_post():
    post = post_service.create(get_json_body(), current_user.id)
    return jsonify(post.to_dict()), 201


@api_bp.route('/posts/<int:post_id>', methods=['PATCH'])
@login_required
def update_post(post_id):
    post = post_service.update(post_id, get_json_body(), current_user.id)
    return jsonify(post.to_dict()), 200


@api_bp.route('/posts/<int:post_id>', methods=['DELETE'])
@login_required
def delete_post(post_id):
    return jsonify(post_service.remove(post_id, current_user.id)), 200


# --- Comments ---

@api_bp.route('/comments', methods=['GET'])
def get_comments_for_post():
    comments = comment_service.list_by_post(parse_int_arg('postId', required=True))
    return jsonify([c.to_dict() for c in comments]), 200


@api_bp.route('/comments/all', methods=['GET'])
def get_all_comments():
    return jsonify([c.to_dict() for c in comment_service.list_all()]), 200


@api_bp.route('/comments/search', methods=['GET'])
def search_comments():
    comments = comment_service.search(request.args.get('keyword', ''))
    return jsonify([c.to_dict() for c in comments]), 200


@api_bp.route('/comments/<int:comment_id>', methods=['GET'])
def get_comment(comment_id):
    return jsonify(comment_service.get_one(comment_id).to_dict()), 200


@api_bp.route('/comments', methods=['POST'])
@login_required
def create_comment():
    comment = comment_service.create(get_json_body(), current_user.id)
    return jsonify(comment.to_dict()), 201


@api_bp.route('/comments/<int:comment_id>', methods=['PATCH'])
@login_required
def update_comment(comment_id):
    comment = comment_service.update(comment_id, get_json_body(), current_user.id)
    return jsonify(comment.to_dict()), 200


@api_bp.route('/comments/<int:comment_id>/like', methods=['PATCH'])
@login_required
def toggle_comment_like(comment_id):
    comment = comment_service.toggle_like(comment_id, current_user.id)
    return jsonify(comment.to_dict()), 200


@api_bp.route('/comments/<int:comment_id>', methods=['DELETE'])
@login_required
def delete_comment(comment_id):
    return jsonify(comment_service.remove(comment_id, current_user.id)), 200


# --- Messages ---

@api_bp.route('/messages/all', methods=['GET'])
@login_required
def get_messages():
    messages = message_service.list_for_user(current_user.id)
    return jsonify([m.to_dict() for m in messages]), 200


@api_bp.route('/messages/<int:message_id>', methods=['GET'])
@login_required
def get_message(message_id):
    return jsonify(message_service.get_one(message_id, current_user.id).to_dict()), 200


@api_bp.route('/messages', methods=['POST'])
@login_required
def create_message():
    message = message_service.create(get_json_body(), current_user.id)
    return jsonify(message.to_dict()), 201


@api_bp.route('/messages/<int:message_id>', methods=['PATCH'])
@login_required
def update_message(message_id):
    message = message_service.update(message_id, get_json_body(), current_user.id)
    return jsonify(message.to_dict()), 200


@api_bp.route('/messages/<int:message_id>', methods=['DELETE'])
@login_required
def delete_message(message_id):
    return jsonify(message_service.remove(message_id, current_user.id)), 200


# --- Members ---

@api_bp.route('/members', methods=['GET'])
@api_bp.route('/members/all', methods=['GET'])
def get_members():
    return jsonify([member_service.serialize(m) for m in member_service.list_members()]), 200


@api_bp.route('/members/info', methods=['GET'])
def get_members_info():
    return jsonify(member_service.list_basic_info()), 200


@api_bp.route('/members/<int:member_id>', methods=['GET'])
def get_member(member_id):
    return jsonify(member_service.serialize(member_service.get_one(member_id))), 200


@api_bp.route('/members', methods=['POST'])
@login_required
def create_member():
    member = member_service.create(get_json_body(), current_user.id)
    return jsonify(member_service.serialize(member)), 201


@api_bp.route('/members/<int:member_id>', methods=['PATCH'])
@login_required
def update_member(member_id):
    member = member_service.update(member_id, get_json_body(), current_user.id)
    return jsonify(member_service.serialize(member)), 200


@api_bp.route('/members/<int:member_id>', methods=['DELETE'])
@login_required
def delete_member(member_id):
    return jsonify(member_service.remove(member_id, current_user.id)), 200


# --- Semester ---

@api_bp.route('/semester/all', methods=['GET'])
def get_semesters():
    return jsonify([s.to_dict() for s in semester_service.list_semesters()]), 200


@api_bp.route('/semester/info', methods=['GET'])
def get_semesters_info():
    return jsonify(semester_service.list_basic_info()), 200


@api_bp.route('/semester/<int:semester_id>', methods=['GET'])
def get_semester(semester_id):
    return jsonify(semester_service.get_one(semester_id).to_dict()), 200


@api_bp.route('/semester', methods=['POST'])
@login_required
def create_semester():
    semester = semester_service.create(get_json_body(), current_user.id)
    return jsonify(semester.to_dict()), 201


@api_bp.route('/semester/<int:semester_id>', methods=['PATCH'])
@login_required
def update_semester(semester_id):
    semester = semester_service.update(semester_id, get_json_body(), current_user.id)
    return jsonify(semester.to_dict()), 200


@api_bp.route('/semester/<int:semester_id>', methods=['DELETE'])
@login_required
def delete_semester(semester_id):
    return jsonify(semester_service.remove(semester_id, current_user.id)), 200


# --- Users ---

@api_bp.route('/user/all', methods=['GET'])
def get_users():
    return jsonify([u.to_dict() for u in user_service.list_users()]), 200


@api_bp.route('/user/info', methods=['GET'])
def get_users_info():
    return jsonify(user_service.list_basic_info()), 200


@api_bp.route('/user/<int:user_id>', methods=['GET'])
def get_user(user_id):
    return jsonify(user_service.get_one(user_id).to_dict()), 200


@api_bp.route('/user/<int:user_id>', methods=['PATCH'])
@login_required
def update_user(user_id):
    user = user_service.update(user_id, get_json_body(), current_user.id)
    return jsonify(user.to_dict()), 200


# --- Uploads ---

@api_bp.route('/upload/image', methods=['POST'])
@login_required
def upload_image():
    path = upload_service.save_image(request.files.get('file'))
    return jsonify({"success": True, "path": path, "message": "파일이 업로드되었습니다."}), 201


@api_bp.route('/uploads/<path:filename>', methods=['GET'])
def serve_upload(filename):
    return send_from_directory(current_app.config['UPLOAD_FOLDER'], filename)
