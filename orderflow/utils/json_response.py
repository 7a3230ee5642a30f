from flask import jsonify
from ..constants.service_code import HTTP_STATUS_CODES
from .helpers import serialize_document


def prepared_response(status, status_code, message, data=None, errors=None, required_fields=None):
    """
    Standard envelope: ``success``, ``status_code`` and ``message`` are always
    present; ``data``, ``errors`` and ``required_fields`` only when set.
    ``status_code`` is a key of HTTP_STATUS_CODES, e.g. "CREATED".
    """
    code = HTTP_STATUS_CODES[status_code]
    body = {"success": status, "status_code": code, "message": str(message)}

    optional = {
        "data": serialize_document(data),
        "errors": errors,
        "required_fields": required_fields,
    }
    body.update({key: value for key, value in optional.items() if value is not None})

    return jsonify(body), code
