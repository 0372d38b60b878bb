from __future__ import annotations

from dataclasses import asdict

from flask import Flask, jsonify, request

from ..common.http import json_body, json_error, make_guard, server_error
from ..container import Container
from ..core.exceptions import NotFoundError, ValidationError
from .model import Student


def _to_json(student: Student) -> dict:
    data = asdict(student)
    data["_id"] = data.pop("student_id")
    return data


def register(app: Flask, container: Container) -> None:
    requires = make_guard(container.auth_service)

    @app.route("/api/student/add", methods=["POST"], endpoint="student_add")
    @requires("student.add")
    def student_add():
        data = json_body()
        try:
            student = container.student_service.add_student(
                name=data.get("name"),
                register=data.get("register"),
                department=data.get("department"),
                year=data.get("year"),
                section=data.get("section"),
                semester=data.get("semester"),
                phone=data.get("phone"),
                email=data.get("email"),
            )
            return jsonify({"success": True, "student": _to_json(student)}), 201
        except ValidationError as e:
            return json_error(str(e), 400)
        except Exception as e:
            return server_error("Add student error", e)

    @app.route("/api/student/list", methods=["GET"], endpoint="student_list")
    @requires("student.list")
    def student_list():
        try:
            students = container.student_service.list_students(
                department=request.args.get("department"),
                year=request.args.get("year"),
                section=request.args.get("section"),
            )
            return jsonify({"success": True, "students": [_to_json(s) for s in students]})
        except Exception as e:
            return server_error("List students error", e)

    @app.route("/api/student/update/<int:student_id>", methods=["PUT"], endpoint="student_update")
    @requires("student.update")
    def student_update(student_id: int):
        try:
            student = container.student_service.update_student(student_id, json_body())
            return jsonify({"success": True, "student": _to_json(student)})
        except ValidationError as e:
            return json_error(str(e), 400)
        except NotFoundError as e:
            return json_error(str(e), 404)
        except Exception as e:
            return server_error("Update student error", e)

    @app.route("/api/student/delete/<int:student_id>", methods=["DELETE"], endpoint="student_delete")
    @requires("student.delete")
    def student_delete(student_id: int):
        try:
            container.student_service.delete_student(student_id)
            return jsonify({"success": True, "message": "Student deleted"})
        except NotFoundError as e:
            return json_error(str(e), 404)
        except Exception as e:
            return server_error("Delete student error", e)
