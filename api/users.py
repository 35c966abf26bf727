from __future__ import annotations

from flask import Blueprint, request, jsonify, g, abort, current_app

from models.schemas.user import ChangePasswordSchema, AccountUpdateSchema, UserOutSchema
from utils.decorators import jwt_required
from utils.exceptions import ValidationError

bp = Blueprint("users", __name__)

change_password_schema = ChangePasswordSchema()
account_update_schema = AccountUpdateSchema()
user_out_schema = UserOutSchema()


def _json_body() -> dict:
    payload = request.get_json(silent=True) or {}
    return payload if isinstance(payload, dict) else {}


def _replace_image(field: str, folder: str, attr: str, label: str):
    image = request.files.get(field)
    if image is None or not image.filename:
        raise ValidationError(f"{label} file is missing")

    url = current_app.extensions["media_uploader"].upload(image, folder)
    user = g.current_user
    setattr(user, attr, url)
    user.save()
    return user


@bp.post("/change-password")
@jwt_required()
def change_password():
    """
    Change the current user's password.
    ---
    tags:
      - Users
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             oldPassword: { type: string }
             newPassword: { type: string }
    responses:
      200: { description: Password changed }
      400: { description: Invalid old password }
      401: { description: Unauthorized }
    """
    data = change_password_schema.load(_json_body())
    user = g.current_user
    if not user.is_password_correct(data["old_password"]):
        raise ValidationError("Invalid old password")

    user.set_password(data["new_password"])
    user.save()
    return jsonify({"data": {}, "message": "Password changed successfully"}), 200

@bp.get("/current-user")
@jwt_required()
def current_user():
    """
    Get current user info.
    ---
    tags:
      - Users
    security:
      - Bearer: []
    responses:
      200: { description: OK }
      401: { description: Unauthorized }
    """
    return jsonify(
        {
            "data": user_out_schema.dump(g.current_user),
            "message": "Current user fetched successfully",
        }
    ), 200

@bp.patch("/update-account")
@jwt_required()
def update_account():
    """
    Update fullname and email of the current user. Both are required.
    ---
    tags:
      - Users
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             fullname: { type: string }
             email: { type: string }
    responses:
      200: { description: Updated }
      400: { description: Missing fields }
      409: { description: Email already in use }
    """
    payload = _json_body()
    if any(not isinstance(payload.get(f), str) or not payload[f].strip() for f in ("fullname", "email")):
        raise ValidationError("All fields are required")
    data = account_update_schema.load(payload)

    user = g.current_user
    owner = current_app.extensions["identity_store"].find_one(email=data["email"])
    if owner is not None and owner.id != user.id:
        abort(409, description="Email already in use")

    user.fullname = data["fullname"]
    user.email = data["email"]
    user.save()
    return jsonify(
        {
            "data": user_out_schema.dump(user),
            "message": "Account details updated successfully",
        }
    ), 200

@bp.patch("/avatar")
@jwt_required()
def update_avatar():
    """
    Replace the current user's avatar.
    ---
    tags:
      - Users
    security:
      - Bearer: []
    consumes:
      - multipart/form-data
    parameters:
      - { in: formData, name: avatar, type: file, required: true }
    responses:
      200: { description: Avatar updated }
      400: { description: Missing file or upload failure }
    """
    user = _replace_image("avatar", "avatars", "avatar", "Avatar")
    return jsonify(
        {
            "data": user_out_schema.dump(user),
            "message": "Avatar image updated successfully",
        }
    ), 200

@bp.patch("/cover-image")
@jwt_required()
def update_cover_image():
    """
    Replace the current user's cover image.
    ---
    tags:
      - Users
    security:
      - Bearer: []
    consumes:
      - multipart/form-data
    parameters:
      - { in: formData, name: coverImage, type: file, required: true }
    responses:
      200: { description: Cover image updated }
      400: { description: Missing file or upload failure }
    """
    user = _replace_image("coverImage", "covers", "cover_image", "Cover image")
    return jsonify(
        {
            "data": user_out_schema.dump(user),
            "message": "Cover image updated successfully",
        }
    ), 200
