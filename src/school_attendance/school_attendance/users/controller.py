from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import json_body, json_error, make_guard, server_error
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, NotFoundError, ValidationError


def register(app: Flask, container: Container) -> None:
    requires = make_guard(container.auth_service)

    @app.route("/api/user/register", methods=["POST"], endpoint="user_register")
    def user_register():
        data = json_body()
        try:
            user = container.user_service.register(
                name=data.get("name"),
                email=data.get("email"),
                password=data.get("password"),
            )
            return jsonify({"success": True, "user": user.public_view()}), 201
        except ValidationError as e:
            return json_error(str(e), 400)
        except Exception as e:
            return server_error("Register error", e)

    @app.route("/api/user/create", methods=["POST"], endpoint="user_create")
    @requires("user.create")
    def user_create():
        data = json_body()
        try:
            user = container.user_service.register(
                name=data.get("name"),
                email=data.get("email"),
                password=data.get("password"),
                role=data.get("role") or Role.FACULTY.value,
            )
            return jsonify({"success": True, "user": user.public_view()}), 201
        except ValidationError as e:
            return json_error(str(e), 400)
        except Exception as e:
            return server_error("Create user error", e)

    @app.route("/api/user/login", methods=["POST"], endpoint="user_login")
    def user_login():
        data = json_body()
        try:
            result = container.auth_service.login(data.get("email"), data.get("password"))
            return jsonify({"success": True, "token": result.token, "user": result.user.public_view()})
        except AuthenticationError as e:
            return json_error(str(e), 401)
        except Exception as e:
            return server_error("Login error", e)

    @app.route("/api/user/list", methods=["GET"], endpoint="user_list")
    @requires("user.list")
    def user_list():
        try:
            users = container.user_service.list_users()
            return jsonify({"success": True, "users": [u.public_view() for u in users]})
        except Exception as e:
            return server_error("List users error", e)

    @app.route("/api/user/update/<int:user_id>", methods=["PUT"], endpoint="user_update")
    @requires("user.update")
    def user_update(user_id: int):
        try:
            user = container.user_service.update_user(user_id, json_body())
            return jsonify({"success": True, "user": user.public_view()})
        except ValidationError as e:
            return json_error(str(e), 400)
        except NotFoundError as e:
            return json_error(str(e), 404)
        except Exception as e:
            return server_error("Update user error", e)

    @app.route("/api/user/delete/<int:user_id>", methods=["DELETE"], endpoint="user_delete")
    @requires("user.delete")
    def user_delete(user_id: int):
        try:
            container.user_service.delete_user(user_id)
            return jsonify({"success": True, "message": "User deleted"})
        except ValidationError as e:
            return json_error(str(e), 400)
        except NotFoundError as e:
            return json_error(str(e), 404)
        except Exception as e:
            return server_error("Delete user error", e)
