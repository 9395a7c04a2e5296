"""User account endpoints: session lifecycle, self-service and channel profiles."""

from __future__ import annotations

from typing import Any

from flask import Blueprint, g, request

from vidstream.api.deps import (
    REFRESH_COOKIE,
    api_response,
    auth_service,
    channel_service,
    clear_auth_cookies,
    current_user_id,
    identity_service,
    optional_auth,
    require_auth,
    set_auth_cookies,
    timing,
)
from vidstream.api.uploads import staged_files
from vidstream.schemas import (
    ChangePasswordSchema,
    ChannelProfileSchema,
    LoginResponseSchema,
    LoginSchema,
    RefreshTokenSchema,
    RegisterSchema,
    TokenPairSchema,
    UpdateAccountSchema,
    UserSchema,
)
from vidstream.services.auth.dto import ChangePasswordIn, LoginIn, RefreshIn, RegisterIn
from vidstream.services.identity.dto import UpdateAccountIn

bp = Blueprint("users", __name__)

register_schema = RegisterSchema()
login_schema = LoginSchema()
refresh_schema = RefreshTokenSchema()
change_password_schema = ChangePasswordSchema()
update_account_schema = UpdateAccountSchema()
user_schema = UserSchema()
login_response_schema = LoginResponseSchema()
token_pair_schema = TokenPairSchema()
channel_schema = ChannelProfileSchema()


def _payload() -> Any:
    """JSON body when present, form fields otherwise."""
    return request.get_json(silent=True) or request.form


# ------------------------------ Session -------------------------------------


@bp.post("/register")
@timing
def register():
    """Create an account from form fields plus ``avatar``/``coverImage`` files."""

    data = register_schema.load(request.form)
    with staged_files("avatar", "coverImage") as files:
        user = auth_service().register(
            RegisterIn(
                full_name=data["full_name"],
                email=data["email"],
                username=data["username"],
                password=data["password"],
                avatar_path=files["avatar"],
                cover_image_path=files["coverImage"],
            )
        )
    return api_response(user_schema.dump(user), "User registered successfully", status=201)


@bp.post("/login")
@timing
def login():
    """Verify credentials, set session cookies and return the token pair."""

    data = login_schema.load(_payload())
    result = auth_service().login(
        LoginIn(username=data["username"], email=data["email"], password=data["password"])
    )
    body = login_response_schema.dump(
        {
            "user": result.user,
            "access_token": result.tokens.access_token,
            "refresh_token": result.tokens.refresh_token,
        }
    )
    response = api_response(body, "User logged in successfully")
    return set_auth_cookies(response, result.tokens)


@bp.post("/logout")
@require_auth
@timing
def logout():
    auth_service().logout(current_user_id())
    return clear_auth_cookies(api_response({}, "User logged out"))


@bp.post("/refresh-token")
@timing
def refresh_token():
    """Rotate the refresh token (cookie first, then body)."""

    data = refresh_schema.load(_payload())
    presented = request.cookies.get(REFRESH_COOKIE) or data["refresh_token"]
    tokens = auth_service().refresh(RefreshIn(refresh_token=presented))
    response = api_response(token_pair_schema.dump(tokens), "Access token refreshed")
    return set_auth_cookies(response, tokens)


@bp.post("/change-password")
@require_auth
@timing
def change_password():
    data = change_password_schema.load(_payload())
    auth_service().change_password(
        ChangePasswordIn(
            user_id=current_user_id(),
            old_password=data["old_password"],
            new_password=data["new_password"],
        )
    )
    return api_response({}, "Password changed successfully")


# ---------------------------- Self-service ----------------------------------


@bp.get("/current-user")
@require_auth
@timing
def current_user():
    user = identity_service().get_user(current_user_id())
    return api_response(user_schema.dump(user), "User fetched successfully")


@bp.patch("/update-account")
@require_auth
@timing
def update_account():
    data = update_account_schema.load(_payload())
    user = identity_service().update_account(
        current_user_id(),
        UpdateAccountIn(full_name=data["full_name"], email=data["email"]),
    )
    return api_response(user_schema.dump(user), "Account details updated successfully")


@bp.patch("/avatar")
@require_auth
@timing
def update_avatar():
    with staged_files("avatar") as files:
        user = identity_service().update_avatar(current_user_id(), files["avatar"])
    return api_response(user_schema.dump(user), "Avatar image updated successfully")


@bp.patch("/cover-image")
@require_auth
@timing
def update_cover_image():
    with staged_files("coverImage") as files:
        user = identity_service().update_cover_image(current_user_id(), files["coverImage"])
    return api_response(user_schema.dump(user), "Cover image updated successfully")


# ------------------------------ Channels ------------------------------------


@bp.get("/c/<username>")
@optional_auth
@timing
def channel_profile(username: str):
    """Public channel profile; ``isSubscribed`` reflects the caller when signed in."""

    profile = channel_service().get_channel_profile(username, viewer_id=g.current_user_id)
    return api_response(channel_schema.dump(profile), "User channel fetched successfully")
