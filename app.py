# app.py
"""
Flask backend for the criteria matrix.
Stores formulas (rows), criteria (columns) and their cell values in SQL,
and derives scatter-plot geometry from four chosen criteria.
"""

import logging

from flask import Flask, jsonify, request
from flask_cors import CORS
from pydantic import ValidationError as SchemaError
from werkzeug.exceptions import HTTPException

import auth
import coordinates
import table_service
from config import Config
from errors import MatrixError, ValidationError
from models import db
from schemas import (
    AnnotationUpdate,
    CellUpdate,
    ColumnCreate,
    ImportRequest,
    LoginRequest,
    PlotRequest,
    RowCreate,
    RowRename,
)


def create_app(config=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if config:
        app.config.update(config)
    app.json.sort_keys = app.config["JSON_SORT_KEYS"]

    logging.basicConfig(
        level=app.config["LOG_LEVEL"],
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app.logger.setLevel(app.config["LOG_LEVEL"])

    CORS(app, origins=app.config["CORS_ORIGINS"], supports_credentials=True)
    db.init_app(app)

    # Create tables if not exist
    with app.app_context():
        db.create_all()

    auth.init_auth(app)
    register_error_handlers(app)
    register_routes(app)
    return app


# ----------------- Helpers -----------------
def parse_body(schema):
    payload = request.get_json(silent=True)
    try:
        return schema.model_validate(payload if payload is not None else {})
    except SchemaError as e:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) or "body" for err in e.errors())
        raise ValidationError(f"Invalid request body: {fields}")


def message(text, **extra):
    return jsonify({"message": text, **extra})


# ----------------- Error handling -----------------
def register_error_handlers(app):
    @app.errorhandler(MatrixError)
    def handle_matrix_error(e):
        db.session.rollback()
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return jsonify({"error": e.description}), e.code

    @app.errorhandler(Exception)
    def handle_unexpected(e):
        db.session.rollback()
        app.logger.exception("Unhandled error on %s %s", request.method, request.path)
        return jsonify({"error": "Internal server error"}), 500


# ----------------- Routes -----------------
def register_routes(app):
    @app.route("/")
    def index():
        return """
        <h1>Criteria Matrix Backend</h1>
        <p>Endpoints:</p>
        <ul>
            <li>GET /table, GET /export, POST /import</li>
            <li>POST /column, DELETE /column/&lt;column_name&gt;</li>
            <li>POST /row, PUT /row/&lt;row_name&gt;/name, DELETE /row/&lt;row_name&gt;</li>
            <li>PUT /cell, PUT /annotation</li>
            <li>POST /plot</li>
            <li>POST /auth/login, POST /auth/logout, GET /auth/verify</li>
        </ul>
        """

    @app.route("/health", methods=["GET"])
    def health():
        return jsonify({"status": "ok"})

    @app.route("/table", methods=["GET"])
    def get_table():
        """
        GET /table
        Returns {columns: [...], rows: [{name, annotation, attributes}]}.
        """
        return jsonify(table_service.table_snapshot())

    @app.route("/column", methods=["POST"])
    def add_column():
        """
        POST /column
        Body: { "column_name": "Cost" }
        Creates the column and an "NA" cell for every existing row.
        """
        body = parse_body(ColumnCreate)
        table_service.add_column(body.column_name)
        return message("Criteria added")

    @app.route("/row", methods=["POST"])
    @app.route("/add_row", methods=["POST"])
    def add_row():
        """
        POST /row
        Body: { "name": "F1", "annotation": "optional" }
        Creates the row and an "NA" cell for every existing column.
        """
        body = parse_body(RowCreate)
        table_service.add_row(body.name, body.annotation or "")
        return message("Formula added")

    @app.route("/cell", methods=["PUT"])
    def update_cell():
        """
        PUT /cell
        Body: { "row_id": "<row name>", "column_name": "Cost", "value": "4.5" }
        """
        body = parse_body(CellUpdate)
        outcome = table_service.set_cell(body.row_id, body.column_name, body.value)
        if outcome == "created":
            return message("Cell created and updated")
        return message("Cell updated")

    @app.route("/annotation", methods=["PUT"])
    def update_annotation():
        """
        PUT /annotation
        Body: { "row_id": "<row name>", "annotation": "free text" }
        """
        body = parse_body(AnnotationUpdate)
        table_service.set_annotation(body.row_id, body.annotation or "")
        return message("Annotation updated")

    @app.route("/row/<path:row_name>/name", methods=["PUT"])
    def rename_row(row_name):
        body = parse_body(RowRename)
        table_service.rename_row(row_name, body.new_name)
        return message("Formula renamed")

    @app.route("/column/<path:column_name>", methods=["DELETE"])
    def delete_column(column_name):
        table_service.delete_column(column_name)
        return message("Criteria deleted")

    @app.route("/row/<path:row_name>", methods=["DELETE"])
    def delete_row(row_name):
        table_service.delete_row(row_name)
        return message("Formula deleted")

    @app.route("/export", methods=["GET"])
    def export_table():
        """
        GET /export
        Returns { "data": <table>, "timestamp": ISO8601, "version": "1.0" }.
        """
        return jsonify(table_service.export_snapshot())

    @app.route("/import", methods=["POST"])
    def import_table():
        """
        POST /import
        Body: { "data": { "columns": [...], "rows": [...] } }
        Merges into the existing table; nothing is deleted.
        """
        body = parse_body(ImportRequest)
        data = body.data.model_dump() if body.data is not None else None
        summary = table_service.import_snapshot(data)
        return message("Data imported", summary=summary.to_dict())

    @app.route("/plot", methods=["POST"])
    def plot():
        """
        POST /plot
        Body: { "axes": {"xPositive", "xNegative", "yPositive", "yNegative"}, "rows": optional }
        Projects the supplied rows, or the stored table, onto the chosen axes.
        """
        body = parse_body(PlotRequest)
        if body.rows is not None:
            rows = [r.model_dump() for r in body.rows]
        else:
            rows = table_service.table_snapshot()["rows"]
        axes = coordinates.AxisAssignment.from_dict(body.axes.model_dump())
        return jsonify(coordinates.project(rows, axes).to_dict())

    # ----------------- Auth -----------------
    @app.route("/auth/login", methods=["POST"], endpoint="auth_login")
    def login():
        body = parse_body(LoginRequest)
        username, token = auth.login(body.password)
        return jsonify({"success": True, "token": token, "username": username})

    @app.route("/auth/logout", methods=["POST"], endpoint="auth_logout")
    def logout():
        auth.logout()
        return jsonify({"success": True})

    @app.route("/auth/verify", methods=["GET"], endpoint="auth_verify")
    def verify():
        username = auth.current_user()
        if username is None and not app.config["AUTH_ENABLED"]:
            username = app.config["ADMIN_USERNAME"]
        if username is None:
            return jsonify({"authenticated": False, "username": None}), 401
        return jsonify({"authenticated": True, "username": username})


if __name__ == "__main__":
    app = create_app()
    app.run(debug=True, host="0.0.0.0", port=app.config["PORT"])
