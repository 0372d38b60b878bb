from __future__ import annotations

import csv
import io

from flask import Flask, g, jsonify, request

from ..common.http import json_body, json_error, make_guard, server_error
from ..container import Container
from ..core.enums import PeriodSlot
from ..core.exceptions import NotFoundError, ValidationError
from ..reports.service import CLASS_REPORT_FIELDS
from .model import StudentStatusRow


def _status_row_json(row: StudentStatusRow) -> dict:
    return {
        "studentId": row.student_id,
        "name": row.name,
        "register": row.register,
        "periodsStatus": [s.value if isinstance(s, PeriodSlot) else s for s in row.periods_status],
    }


def register(app: Flask, container: Container) -> None:
    requires = make_guard(container.auth_service)

    def _class_report_args() -> dict:
        return {
            "from_date": request.args.get("fromDate"),
            "to_date": request.args.get("toDate"),
            "department": request.args.get("department"),
            "year": request.args.get("year"),
            "section": request.args.get("section"),
        }

    def _lookup(label: str):
        args = request.args
        try:
            rows = container.attendance_service.lookup(
                department=args.get("department"),
                year=args.get("year"),
                section=args.get("section"),
                semester=args.get("semester"),
                date=args.get("date"),
            )
        except ValidationError as e:
            return json_error(str(e), 400)
        except Exception as e:
            return server_error(label, e)

        if rows is None:
            return jsonify({"success": False, "message": "No record found"})
        return jsonify({"success": True, "students": [_status_row_json(r) for r in rows]})

    @app.route("/api/attendance/mark", methods=["POST"], endpoint="attendance_mark")
    @requires("attendance.mark")
    def attendance_mark():
        data = json_body()
        try:
            container.attendance_service.mark_attendance(
                department=data.get("department"),
                year=data.get("year"),
                section=data.get("section"),
                semester=data.get("semester"),
                date=data.get("date"),
                students=data.get("students"),
                faculty_id=g.current_user.user_id,
            )
            return jsonify({"success": True, "message": "Attendance saved/updated successfully."})
        except ValidationError as e:
            return json_error(str(e), 400)
        except Exception as e:
            return server_error("Mark attendance error", e)

    @app.route("/api/attendance/view", methods=["GET"], endpoint="attendance_view")
    @requires("attendance.view")
    def attendance_view():
        return _lookup("View attendance error")

    @app.route("/api/attendance/fetch", methods=["GET"], endpoint="attendance_fetch")
    @requires("attendance.view")
    def attendance_fetch():
        return _lookup("Fetch attendance error")

    @app.route("/api/attendance/report/class", methods=["GET"], endpoint="attendance_class_report")
    @requires("attendance.report")
    def attendance_class_report():
        try:
            data = container.report_service.report_for_class(**_class_report_args())
            return jsonify({"success": True, "data": data})
        except ValidationError as e:
            return json_error(str(e), 400)
        except NotFoundError as e:
            return json_error(str(e), 404)
        except Exception as e:
            return server_error("Class report error", e)

    @app.route("/api/attendance/report/class.csv", methods=["GET"], endpoint="attendance_class_report_csv")
    @requires("attendance.report")
    def attendance_class_report_csv():
        try:
            data = container.report_service.report_for_class(**_class_report_args())
        except ValidationError as e:
            return json_error(str(e), 400)
        except NotFoundError as e:
            return json_error(str(e), 404)
        except Exception as e:
            return server_error("Class report export error", e)

        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=CLASS_REPORT_FIELDS)
        writer.writeheader()
        for row in data:
            writer.writerow({**row, "percentage": f"{row['percentage']:.2f}"})

        filename = f"attendance_{request.args.get('fromDate')}_{request.args.get('toDate')}.csv"
        return app.response_class(
            out.getvalue().encode("utf-8-sig"),
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    @app.route("/api/attendance/report/student/<student_id>", methods=["GET"], endpoint="attendance_student_report")
    @requires("attendance.report")
    def attendance_student_report(student_id: str):
        try:
            data = container.report_service.report_for_student(student_id)
            return jsonify({"success": True, "data": data})
        except NotFoundError as e:
            return json_error(str(e), 404)
        except Exception as e:
            return server_error("Student report error", e)

    @app.route("/api/attendance/notify", methods=["POST"], endpoint="attendance_notify")
    @requires("attendance.notify")
    def attendance_notify():
        data = json_body()
        try:
            result = container.notification_service.notify_parent(data.get("studentId"), data.get("message"))
        except ValidationError as e:
            return json_error(str(e), 400)
        except NotFoundError as e:
            return json_error(str(e), 404)
        except Exception as e:
            return server_error("Send message error", e)

        if result.success:
            return jsonify({"success": True, "message": "Message sent to parent"})
        return json_error(result.error or "SMS delivery failed", 500)
