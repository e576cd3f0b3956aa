"""API routes for chart auditing and communication dispatch."""

import logging
from functools import wraps

from flask import Blueprint, jsonify, request, current_app
from pypdf.errors import PdfReadError

from audit_src.models import AuditInputError, AuditNotFoundError
from audit_src.pdf_text import extract_pdf_text

logger = logging.getLogger(__name__)

api_bp = Blueprint("api", __name__)


def check_api_key(f):
    """Decorator to check API key for protected endpoints."""
    @wraps(f)
    def decorated(*args, **kwargs):
        api_key = current_app.config.get("DASHBOARD_API_KEY")

        # If no API key configured, allow all requests (dev mode)
        if not api_key:
            return f(*args, **kwargs)

        # Check key from query param or header
        provided_key = request.args.get("key") or request.headers.get("X-API-Key")

        if provided_key != api_key:
            return jsonify({"error": "Invalid or missing API key"}), 401

        return f(*args, **kwargs)

    return decorated


def _document_from_request() -> tuple[str | None, str | None]:
    """Chart text and file name from form fields or an uploaded PDF."""
    text = request.form.get("pdfText")
    file_name = request.form.get("nombreArchivo")

    upload = request.files.get("pdf")
    if not text and upload is not None:
        text = extract_pdf_text(upload.read())
        file_name = file_name or upload.filename

    return text, file_name


@api_bp.route("/auditar-pdf", methods=["POST"])
@check_api_key
def audit_pdf():
    """Audit a chart and persist the result.

    Form fields: pdfText + nombreArchivo, or a multipart "pdf" file.
    """
    try:
        text, file_name = _document_from_request()
        processed = current_app.audit_service.process(text, file_name)
    except AuditInputError as e:
        return jsonify({"error": str(e)}), 400
    except PdfReadError as e:
        return jsonify({"error": f"No se pudo leer el PDF: {e}"}), 400
    except Exception as e:
        logger.exception("Audit request failed")
        return jsonify({"error": "Error interno del servidor", "details": str(e)}), 500

    return jsonify(processed.to_dict())


@api_bp.route("/auditorias/<audit_id>", methods=["GET"])
@check_api_key
def get_audit(audit_id):
    """Stored audit record."""
    audit = current_app.audit_store.get_audit(audit_id)
    if audit is None:
        return jsonify({"error": f"Auditoría {audit_id} no encontrada"}), 404
    return jsonify(audit.to_dict())


@api_bp.route("/auditorias/<audit_id>/comunicaciones/enviadas", methods=["GET"])
@check_api_key
def dispatched_communications(audit_id):
    """Indices of the communications already sent for an audit."""
    records = current_app.audit_store.list_dispatched(audit_id)
    return jsonify({
        "auditoriaId": audit_id,
        "enviadas": [r.index for r in records],
        "detalle": [r.to_dict() for r in records],
    })


@api_bp.route("/auditorias/<audit_id>/comunicaciones/<int:index>/enviar", methods=["POST"])
@check_api_key
def send_communication(audit_id, index):
    """Send one communication of a stored audit, at most once."""
    try:
        result = current_app.dispatcher.dispatch(audit_id, index)
    except AuditNotFoundError as e:
        return jsonify({"error": str(e)}), 404

    if result.already_sent:
        return jsonify(result.to_dict()), 409
    if not result.success:
        return jsonify(result.to_dict()), 502
    return jsonify(result.to_dict())
