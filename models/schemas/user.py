from marshmallow import Schema, fields, pre_load, validates, validate, ValidationError, EXCLUDE


def _norm(v):
    return v.strip().lower() if isinstance(v, str) else v


def _strip(v):
    return v.strip() if isinstance(v, str) else v


class UserRegisterSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    fullname = fields.String(required=True, validate=validate.Length(min=1, max=255))
    username = fields.String(required=True, validate=validate.Length(min=1, max=64))
    email = fields.Email(required=True)
    password = fields.String(required=True, load_only=True)

    @pre_load
    def normalize(self, data, **kwargs):
        data = dict(data)
        for key in ("fullname", "username", "email"):
            if key in data:
                data[key] = _strip(data[key])
        for key in ("username", "email"):
            if key in data:
                data[key] = _norm(data[key])
        return data

    @validates("password")
    def validate_password(self, value, **kwargs):
        if len(value) < 8:
            raise ValidationError("Password must be at least 8 characters long.")


class UserLoginSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    username = fields.String(allow_none=True)
    email = fields.String(allow_none=True)
    password = fields.String(load_default=None, allow_none=True)


class ChangePasswordSchema(Schema):
    old_password = fields.String(required=True, data_key="oldPassword", load_only=True)
    new_password = fields.String(required=True, data_key="newPassword", load_only=True)

    @validates("new_password")
    def validate_new_password(self, value, **kwargs):
        if len(value) < 8:
            raise ValidationError("Password must be at least 8 characters long.")


class AccountUpdateSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    fullname = fields.String(allow_none=True)
    email = fields.Email(allow_none=True)

    @pre_load
    def normalize(self, data, **kwargs):
        data = dict(data)
        if "fullname" in data:
            data["fullname"] = _strip(data["fullname"])
        if "email" in data:
            data["email"] = _norm(data["email"])
        return data


class UserOutSchema(Schema):
    id = fields.String(allow_none=False)
    username = fields.String()
    email = fields.String()
    fullname = fields.String()
    avatar = fields.String()
    cover_image = fields.String(data_key="coverImage")
    created_at = fields.DateTime()
    updated_at = fields.DateTime()
