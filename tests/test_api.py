import io

from conftest import SAMPLE_RECEIPT
from textscan.config import Settings
from textscan.main import create_app


def test_health(client):
    res = client.get("/health")
    assert res.status_code == 200
    assert res.get_json()["ok"] is True


def test_report_uses_spanish_keys(client):
    res = client.post("/report", json={"extractedText": SAMPLE_RECEIPT})
    assert res.status_code == 200
    data = res.get_json()["data"]
    assert data["titulo"] == "Comprobante de pago"
    assert data["numeroSecuencia"] == "4521"
    assert data["pie"]["documentoComprobante"] == "12345678"
    assert data["receptor"]["fechaCobro"] == "2026-03-15"
    assert data["items"][0]["pago"] == 500.0
    assert data["totales"] == {"subtotal": 500.0, "descuentos": 150.0, "total": 500.0}


def test_report_rejects_missing_or_non_text(client):
    res = client.post("/report", json={})
    assert res.status_code == 400
    assert res.get_json()["error"]["code"] == "invalid_input"

    res = client.post("/report", json={"extractedText": 12})
    assert res.status_code == 400


def test_save_get_and_list(client):
    report = client.post("/report", json={"extractedText": SAMPLE_RECEIPT}).get_json()["data"]
    body = dict(report, textoOcrOriginal=SAMPLE_RECEIPT)

    res = client.post("/api/comprobantes", json=body)
    assert res.status_code == 200
    saved = res.get_json()["data"]
    assert saved["numeroSecuencia"] == "20260315001"
    assert saved["comprobanteData"]["emisor"]["ruc"] == "1703684785001"

    res = client.get(f"/api/comprobantes/{saved['id']}")
    assert res.status_code == 200
    fetched = res.get_json()["data"]
    assert fetched["comprobanteData"] == dict(report, numeroSecuencia="20260315001")
    assert fetched["textoOcrOriginal"] == SAMPLE_RECEIPT

    res = client.get("/api/comprobantes?page=1&limit=10")
    payload = res.get_json()
    assert payload["pagination"] == {"page": 1, "limit": 10, "total": 1, "totalPages": 1}
    assert payload["data"][0]["id"] == saved["id"]


def test_save_rejects_incomplete_record(client):
    res = client.post("/api/comprobantes", json={"titulo": "Comprobante de pago"})
    assert res.status_code == 400
    assert res.get_json()["ok"] is False


def test_get_unknown_comprobante(client):
    res = client.get("/api/comprobantes/999")
    assert res.status_code == 404
    assert res.get_json()["error"]["message"] == "Comprobante no encontrado"


def test_ocr_requires_file(client):
    assert client.post("/ocr").status_code == 400


def test_ocr_rejects_unsupported_type(client):
    res = client.post("/ocr", data={"file": (io.BytesIO(b"hola"), "notas.txt")},
                      content_type="multipart/form-data")
    assert res.status_code == 415


def test_summary_runs_ocr_then_extraction(client, monkeypatch):
    monkeypatch.setattr(
        "textscan.main.ocr_file",
        lambda p, **kw: ("Secuencia: 7\nTotal $90", {"engine": "fake"}),
    )
    res = client.post("/summary", data={"file": (io.BytesIO(b"png"), "recibo.png")},
                      content_type="multipart/form-data")
    assert res.status_code == 200
    payload = res.get_json()
    assert payload["text"].startswith("Secuencia: 7")
    assert payload["data"]["numeroSecuencia"] == "7"
    assert payload["data"]["totales"]["total"] == 90.0


def test_ocr_failure_is_reported(client, monkeypatch):
    monkeypatch.setattr(
        "textscan.main.ocr_file",
        lambda p, **kw: ("", {"engine": "pytesseract", "error": "ocr_error:boom"}),
    )
    res = client.post("/ocr", data={"file": (io.BytesIO(b"png"), "recibo.png")},
                      content_type="multipart/form-data")
    assert res.status_code == 422
    assert res.get_json()["error"]["code"] == "ocr_error"


def test_report_rejects_non_object_body(client):
    res = client.post("/report", json=["extractedText"])
    assert res.status_code == 400
    assert res.get_json()["error"]["code"] == "invalid_input"


def test_save_rejects_non_text_ocr_without_writing(client, store):
    report = client.post("/report", json={"extractedText": SAMPLE_RECEIPT}).get_json()["data"]
    res = client.post("/api/comprobantes", json=dict(report, textoOcrOriginal=123))
    assert res.status_code == 400
    assert res.get_json()["error"]["code"] == "bad_request"

    res = client.post("/api/comprobantes", json=dict(report, imagenPath=["a.png"]))
    assert res.status_code == 400
    assert store.list()[1] == 0


def test_saved_comprobantes_get_consecutive_numbers(client):
    report = client.post("/report", json={"extractedText": SAMPLE_RECEIPT}).get_json()["data"]
    numbers = [
        client.post("/api/comprobantes", json=report).get_json()["data"]["numeroSecuencia"]
        for _ in range(2)
    ]
    assert numbers == ["20260315001", "20260315002"]


def test_save_keeps_record_number_when_assignment_disabled(tmp_path, rules, store):
    settings = Settings(db_path=str(tmp_path / "textscan.db"), assign_sequence_on_save=False)
    client = create_app(settings=settings, extractor=rules, store=store).test_client()
    report = client.post("/report", json={"extractedText": SAMPLE_RECEIPT}).get_json()["data"]
    res = client.post("/api/comprobantes", json=report)
    assert res.get_json()["data"]["numeroSecuencia"] == "4521"


def test_non_ascii_pdf_name_is_read_as_pdf(client, monkeypatch):
    seen = []

    def fake_pdf_ocr(p, **kw):
        seen.append((p, p.exists()))
        return "Total $90", {"engine": "fake"}

    monkeypatch.setattr("textscan.extractors.io_image.pdf_ocr_text", fake_pdf_ocr)
    res = client.post("/ocr", data={"file": (io.BytesIO(b"%PDF-1.4"), "收据.pdf")},
                      content_type="multipart/form-data")
    assert res.status_code == 200
    assert res.get_json()["text"] == "Total $90"
    [(path, existed)] = seen
    assert path.suffix == ".pdf"
    assert existed


def test_uploads_are_removed_and_never_shared(client, monkeypatch):
    seen = []

    def fake_ocr(p, **kw):
        seen.append(p)
        return "Secuencia: 7", {"engine": "fake"}

    monkeypatch.setattr("textscan.main.ocr_file", fake_ocr)
    for _ in range(2):
        res = client.post("/summary", data={"file": (io.BytesIO(b"png"), "recibo.png")},
                          content_type="multipart/form-data")
        assert res.status_code == 200
    assert seen[0] != seen[1]
    assert not any(p.exists() for p in seen)
