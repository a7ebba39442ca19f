# textscan/main.py
from __future__ import annotations
import logging
import math
import sys
import uuid
from pathlib import Path
from typing import Any, Optional

from flask import Flask, request, jsonify
from flask_cors import CORS
from pydantic import ValidationError
from werkzeug.utils import secure_filename

from textscan.config import Settings
from textscan.errors import InvalidInputError, TextScanError
from textscan.extractors.io_image import ocr_file
from textscan.extractors.orchestrator import Extractor, build_extractor
from textscan.models import ReceiptRecord
from textscan.storage import ComprobanteStore

logger = logging.getLogger(__name__)

ALLOWED_EXTS = {".pdf", ".png", ".jpg", ".jpeg"}


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def create_app(settings: Optional[Settings] = None,
               extractor: Optional[Extractor] = None,
               store: Optional[ComprobanteStore] = None) -> Flask:
    settings = settings or Settings.from_env()
    _configure_logging(settings.log_level)

    app = Flask(__name__)
    CORS(app)

    store = store or ComprobanteStore(settings.db_path)
    store.init()
    extractor = extractor or build_extractor(settings, store=store)
    logger.info("TextScan ready: extractor=%s sequence=%s db=%s",
                extractor.name, settings.sequence_strategy, settings.db_path)

    upload_dir = Path(app.instance_path) / "uploads"
    upload_dir.mkdir(parents=True, exist_ok=True)

    def _save_upload():
        file = request.files.get("file")
        if not file or not getattr(file, "filename", ""):
            return None, _json_err("bad_request", "No se recibió ningún archivo", 400)
        ext = Path(file.filename).suffix.lower()
        if ext not in ALLOWED_EXTS:
            return None, _json_err("unsupported_type", f"Extensión no soportada: {ext}", 415)
        # the checked suffix is kept; secure_filename may drop it for non-ASCII names
        dest = upload_dir / f"{uuid.uuid4().hex}_{secure_filename(Path(file.filename).stem)}{ext}"
        file.save(dest)
        return dest, None

    def _ocr_upload(dest: Path):
        try:
            return ocr_file(dest, lang=settings.ocr_lang, max_pages=settings.max_pages)
        finally:
            dest.unlink(missing_ok=True)

    @app.errorhandler(TextScanError)
    def handle_textscan_error(e: TextScanError):
        if e.status >= 500:
            logger.error("%s: %s", e.code, e)
        return _json_err(e.code, str(e), e.status)

    @app.get("/health")
    def health():
        return jsonify({"ok": True, "service": "textscan", "db": store.ping()}), 200

    @app.post("/ocr")
    def api_ocr():
        dest, err = _save_upload()
        if err:
            return err
        text, info = _ocr_upload(dest)
        if info.get("error"):
            return _json_err("ocr_error", info["error"], 422)
        return jsonify({"ok": True, "text": text, "meta": info})

    @app.post("/report")
    def api_report():
        body: Any = request.get_json(silent=True)
        if not isinstance(body, dict) or "extractedText" not in body:
            raise InvalidInputError("Falta el campo extractedText")
        record = extractor.extract(body["extractedText"])
        return jsonify({"ok": True, "data": record.to_wire()})

    @app.post("/summary")
    def api_summary():
        dest, err = _save_upload()
        if err:
            return err
        text, info = _ocr_upload(dest)
        if info.get("error"):
            return _json_err("ocr_error", info["error"], 422)
        record = extractor.extract(text)
        return jsonify({"ok": True, "text": text, "data": record.to_wire(), "meta": info})

    @app.post("/api/comprobantes")
    def api_save_comprobante():
        body: Any = request.get_json(silent=True)
        if not isinstance(body, dict):
            return _json_err("bad_request", "Faltan campos requeridos", 400)
        try:
            record = ReceiptRecord.model_validate(body)
        except ValidationError as e:
            return _json_err("bad_request", f"Faltan campos requeridos: {e.error_count()} error(es)", 400)
        for key in ("textoOcrOriginal", "imagenPath"):
            if body.get(key) is not None and not isinstance(body[key], str):
                return _json_err("bad_request", f"{key} debe ser texto", 400)
        saved = store.save(
            record,
            ocr_text=body.get("textoOcrOriginal"),
            image_path=body.get("imagenPath"),
            assign_sequence=settings.assign_sequence_on_save,
        )
        return jsonify({
            "ok": True,
            "data": saved.to_wire(),
            "message": "Comprobante guardado exitosamente",
        })

    @app.get("/api/comprobantes")
    def api_list_comprobantes():
        page = request.args.get("page", default=1, type=int) or 1
        limit = request.args.get("limit", default=10, type=int) or 10
        page, limit = max(1, page), max(1, limit)
        items, total = store.list(page, limit)
        return jsonify({
            "ok": True,
            "data": [c.to_wire() for c in items],
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "totalPages": math.ceil(total / limit),
            },
        })

    @app.get("/api/comprobantes/<int:comprobante_id>")
    def api_get_comprobante(comprobante_id: int):
        saved = store.get(comprobante_id)
        if saved is None:
            return _json_err("not_found", "Comprobante no encontrado", 404)
        return jsonify({"ok": True, "data": saved.to_wire()})

    return app


def _json_err(code: str, msg: str, status: int):
    return jsonify({"ok": False, "error": {"code": code, "message": msg}}), status
