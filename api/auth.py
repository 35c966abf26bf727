"""
Authentication blueprint:
- POST /users/register       (multipart: fields + avatar, optional coverImage)
- POST /users/login
- POST /users/logout
- POST /users/refresh-token

Token issuance, rotation and revocation live in utils.session_tokens; this
module only moves tokens between HTTP (cookies/body) and the token manager.
"""
from __future__ import annotations

from flask import Blueprint, request, jsonify, g, abort, current_app

from models import storage
from models.user import User
from models.schemas.user import UserRegisterSchema, UserLoginSchema, UserOutSchema
from utils.decorators import jwt_required
from utils.exceptions import Unauthorized, ValidationError
from .cookies import REFRESH_COOKIE, set_session_cookies, clear_session_cookies

REGISTER_FIELDS = ("fullname", "username", "email", "password")

bp = Blueprint("auth", __name__)

user_register_schema = UserRegisterSchema()
user_login_schema = UserLoginSchema()
user_out_schema = UserOutSchema()


@bp.post("/register")
def register():
    """
    Register a new user.
    ---
    tags:
      - Auth
    consumes:
      - multipart/form-data
    parameters:
      - { in: formData, name: fullname, type: string, required: true }
      - { in: formData, name: username, type: string, required: true }
      - { in: formData, name: email, type: string, required: true }
      - { in: formData, name: password, type: string, required: true }
      - { in: formData, name: avatar, type: file, required: true }
      - { in: formData, name: coverImage, type: file, required: false }
    responses:
      201:
        description: Created
      400:
        description: Missing fields or avatar
      409:
        description: Username or email already taken
    """
    form = request.form
    if any(not (form.get(field) or "").strip() for field in REGISTER_FIELDS):
        raise ValidationError("All fields are required.")
    data = user_register_schema.load(form.to_dict())

    store = current_app.extensions["identity_store"]
    if store.find_by_login(username=data["username"], email=data["email"]):
        abort(409, description="User with email or username already exists")

    avatar_file = request.files.get("avatar")
    if avatar_file is None or not avatar_file.filename:
        raise ValidationError("Avatar file is required.")

    uploader = current_app.extensions["media_uploader"]
    avatar_url = uploader.upload(avatar_file, "avatars")
    cover_file = request.files.get("coverImage")
    cover_url = uploader.upload(cover_file, "covers") if cover_file and cover_file.filename else ""

    user = User(
        fullname=data["fullname"],
        username=data["username"],
        email=data["email"],
        avatar=avatar_url,
        cover_image=cover_url,
    )
    user.set_password(data["password"])
    storage.new(user)
    storage.save()

    return jsonify(
        {
            "data": user_out_schema.dump(user),
            "message": "User registered successfully",
        }
    ), 201

@bp.post("/login")
def login():
    """
    Login with username or email; returns tokens and sets session cookies.
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             username: { type: string }
             email: { type: string }
             password: { type: string }
    responses:
      200:
        description: OK (returns tokens)
      400:
        description: Neither username nor email given
      401:
        description: Invalid credentials
      404:
        description: User does not exist
    """
    payload = request.get_json(silent=True) or {}
    data = user_login_schema.load(payload)
    if not data.get("username") and not data.get("email"):
        raise ValidationError("username or email is required")

    store = current_app.extensions["identity_store"]
    user = store.find_by_login(username=data.get("username"), email=data.get("email"))
    if not user:
        abort(404, description="User does not exist")
    if not user.is_password_correct(data.get("password")):
        raise Unauthorized("Invalid user credentials")

    pair = current_app.extensions["session_tokens"].issue(user.id)

    response = jsonify(
        {
            "data": {"user": user_out_schema.dump(user), **pair.to_dict()},
            "message": "User logged in successfully",
        }
    )
    set_session_cookies(response, pair)
    return response, 200

@bp.post("/logout")
@jwt_required()
def logout():
    """
    Logout: revokes the current refresh token and clears session cookies.
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      200:
        description: Logged out
      401:
        description: Unauthorized
    """
    current_app.extensions["session_tokens"].revoke(g.current_user.id)
    response = jsonify({"data": {}, "message": "User logged out successfully"})
    clear_session_cookies(response)
    return response, 200

@bp.post("/refresh-token")
def refresh():
    """
    Exchange the refresh token (cookie or body) for a new token pair.
    The presented refresh token stops working once this succeeds.
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             refreshToken: { type: string }
    responses:
      200:
        description: New tokens
      401:
        description: Invalid, expired or already used refresh token
    """
    payload = request.get_json(silent=True) or {}
    if not isinstance(payload, dict):
        payload = {}
    token = request.cookies.get(REFRESH_COOKIE) or payload.get("refreshToken")
    if not isinstance(token, str) or not token.strip():
        raise Unauthorized("unauthorized request")

    pair = current_app.extensions["session_tokens"].rotate(token)

    response = jsonify({"data": pair.to_dict(), "message": "Access token refreshed"})
    set_session_cookies(response, pair)
    return response, 200
