from __future__ import annotations
from datetime import datetime
from types import SimpleNamespace

import pytest

from textscan.config import Settings
from textscan.extractors.rules import RuleBasedExtractor
from textscan.extractors.sequence import FixedClock
from textscan.main import create_app
from textscan.storage import ComprobanteStore

FROZEN = datetime(2026, 3, 15, 10, 30, 0)

SAMPLE_RECEIPT = """RECIBO DE PAGO
Secuencia: 4521
Comprobante: 12345678
Tel: 099-480-1234
CI: 1712345678
Valor arriendo $500.00
Descuento $150.00
Total pagado: 350.00 USD
"""


@pytest.fixture
def clock():
    return FixedClock(FROZEN)


@pytest.fixture
def fixed_sequence():
    return lambda: "000123"


@pytest.fixture
def rules(clock, fixed_sequence):
    return RuleBasedExtractor(clock=clock, sequence_generator=fixed_sequence)


@pytest.fixture
def store(tmp_path, clock):
    s = ComprobanteStore(str(tmp_path / "textscan.db"), clock=clock)
    s.init()
    return s


class FakeCompletions:
    def __init__(self, parsed=None, exc=None, refusal=None):
        self.parsed = parsed
        self.exc = exc
        self.refusal = refusal
        self.calls = []

    def parse(self, **kwargs):
        self.calls.append(kwargs)
        if self.exc is not None:
            raise self.exc
        message = SimpleNamespace(parsed=self.parsed, refusal=self.refusal)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class FakeOpenAI:
    def __init__(self, **kwargs):
        self.completions = FakeCompletions(**kwargs)
        self.chat = SimpleNamespace(completions=self.completions)


@pytest.fixture
def fake_openai():
    return FakeOpenAI


@pytest.fixture
def app(tmp_path, rules, store):
    settings = Settings(db_path=str(tmp_path / "textscan.db"))
    app = create_app(settings=settings, extractor=rules, store=store)
    app.config.update(TESTING=True)
    return app


@pytest.fixture
def client(app):
    return app.test_client()
