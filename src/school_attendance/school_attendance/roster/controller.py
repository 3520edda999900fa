from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import api_endpoint
from ..core.enums import Capability
from ..container import Container


def register(app: Flask, container: Container) -> None:
    parents = container.parent_service

    @app.route("/api/parents", methods=["GET"], endpoint="list_parents")
    @api_endpoint(Capability.MANAGE_PARENTS)
    def list_parents(actor):
        return jsonify([p.to_dict() for p in parents.list_parents()]), 200

    @app.route("/api/parents/count", methods=["GET"], endpoint="count_parents")
    @api_endpoint(Capability.MANAGE_PARENTS)
    def count_parents(actor):
        return jsonify({"count": parents.count_parents()}), 200

    @app.route("/api/parents/<parent_id>", methods=["GET"], endpoint="get_parent")
    @api_endpoint(Capability.MANAGE_PARENTS)
    def get_parent(parent_id, actor):
        return jsonify(parents.get_with_children(parent_id).to_dict()), 200

    @app.route("/api/parents/create-with-children", methods=["POST"], endpoint="create_parent_with_children")
    @api_endpoint(Capability.MANAGE_PARENTS)
    def create_parent_with_children(actor):
        payload = request.get_json(silent=True) or {}
        created = parents.create_with_children(
            name=payload.get("name"),
            email=payload.get("email"),
            phone=payload.get("phone"),
            children=payload.get("children") or [],
        )
        return jsonify({"message": "Parent created successfully", "parent": created.to_dict()}), 201

    @app.route("/api/parents/<parent_id>/add-child", methods=["POST"], endpoint="add_child_to_parent")
    @api_endpoint(Capability.MANAGE_PARENTS)
    def add_child_to_parent(parent_id, actor):
        payload = request.get_json(silent=True) or {}
        updated = parents.add_child(parent_id=parent_id, student_id=payload.get("studentId"))
        return jsonify({"message": "Child added successfully", "parent": updated.to_dict()}), 200
