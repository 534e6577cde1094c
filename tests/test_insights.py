from datetime import date, timedelta

import pytest

import diamond_ledger.insights as insights
from diamond_ledger.records import Expense, Month, MonthlyCommission, Operator, Sale


class _FakeResponse:
    def __init__(self, text):
        self.text = text


class _FakeGenAI:
    """Stands in for the google.generativeai module."""

    def __init__(self, text="Análise pronta.", error=None):
        self.text = text
        self.error = error
        self.configured_key = None
        self.model_name = None
        self.prompts = []

    def configure(self, api_key):
        self.configured_key = api_key

    def GenerativeModel(self, model_name):  # noqa: N802
        self.model_name = model_name
        return self

    def generate_content(self, prompt):
        if self.error is not None:
            raise self.error
        self.prompts.append(prompt)
        return _FakeResponse(self.text)


@pytest.fixture
def snapshot() -> insights.InsightSnapshot:
    start = date(2025, 1, 1)
    return insights.InsightSnapshot(
        sales=[
            Sale(id=str(i), date=start + timedelta(days=i), quantity=i + 1)
            for i in range(40)
        ],
        commissions=[
            MonthlyCommission("c1", Month.JAN, 2025, Operator.MPESA, 5500.0),
            MonthlyCommission("c2", Month.JAN, 2025, Operator.EMOLA, 3200.0),
        ],
        expenses=[
            Expense(str(i), start + timedelta(days=i), "d", "Transporte", float(i))
            for i in range(15)
        ],
    )


def test_missing_key_returns_fixed_message(snapshot, monkeypatch) -> None:
    fake = _FakeGenAI()
    monkeypatch.setattr(insights, "genai", fake)

    assert insights.generate_insights(snapshot, "") == insights.MISSING_KEY_MESSAGE
    assert fake.configured_key is None


def test_successful_call_returns_model_text(snapshot, monkeypatch) -> None:
    fake = _FakeGenAI()
    monkeypatch.setattr(insights, "genai", fake)

    text = insights.generate_insights(snapshot, "secret", model="gemini-test")

    assert text == "Análise pronta."
    assert fake.configured_key == "secret"
    assert fake.model_name == "gemini-test"
    assert len(fake.prompts) == 1


def test_client_failure_returns_fallback(snapshot, monkeypatch, caplog) -> None:
    monkeypatch.setattr(insights, "genai", _FakeGenAI(error=RuntimeError("quota")))

    assert insights.generate_insights(snapshot, "secret") == insights.FAILURE_MESSAGE
    assert any("Gemini request failed" in r.getMessage() for r in caplog.records)


def test_empty_response_returns_fallback(snapshot, monkeypatch) -> None:
    monkeypatch.setattr(insights, "genai", _FakeGenAI(text=""))
    assert insights.generate_insights(snapshot, "secret") == insights.EMPTY_RESPONSE_MESSAGE


def test_prompt_limits_recent_records(snapshot) -> None:
    """Only the 30 most recent sales and 10 most recent expenses are sent."""
    prompt = insights.build_prompt(snapshot)

    assert prompt.count("Qtd:") == 30
    assert "Data:2025-01-10," not in prompt
    assert "Data:2025-02-09," in prompt
    assert prompt.count("Categoria:") == 10
    assert prompt.count("Operadora:") == 2
    # net profit of the last sale: 40 units * 45
    assert "LucroLíq:1800.0" in prompt
