import base64
import json

from fastapi.testclient import TestClient

from app.core.errors import UpstreamError
from app.core.settings import Settings
from app.main import create_app
from app.services.gemini_service import GeminiService


class _FakeGeminiService:
    def __init__(self, text: str = "", error: Exception | None = None):
        self.text = text
        self.error = error
        self.calls = []

    async def generate_completion(self, messages, model):
        self.calls.append({"messages": messages, "model": model})
        if self.error is not None:
            raise self.error
        return self.text


def _client(fake: _FakeGeminiService) -> TestClient:
    app = create_app()

    # Lazy import to avoid importing the real GeminiService
    import app.dependencies as deps

    app.dependency_overrides[deps.get_gemini_service] = lambda: fake
    return TestClient(app)


def _body(**overrides):
    body = {
        "messages": [{"role": "user", "content": "Show me revenue by quarter"}],
        "model": "gemini-2.5-flash",
    }
    body.update(overrides)
    return body


CHART = {
    "chartType": "bar",
    "config": {"title": "Revenue", "description": "Quarterly revenue"},
    "data": [{"quarter": "Q1", "revenue": 100}, {"quarter": "Q2", "revenue": 120}],
    "chartConfig": {"revenue": {"label": "Revenue"}},
}


def test_finance_happy_path():
    fake = _FakeGeminiService(
        text=json.dumps({"explanation": "Revenue grew.", "chartData": CHART})
    )
    client = _client(fake)

    r = client.post("/api/finance", json=_body())

    assert r.status_code == 200
    assert r.json() == {"content": "Revenue grew.", "chartData": CHART}
    assert r.headers["content-type"].startswith("application/json")
    assert r.headers["cache-control"] == "no-cache"

    assert len(fake.calls) == 1
    assert fake.calls[0]["model"] == "gemini-2.5-flash"


def test_finance_null_chart_data():
    fake = _FakeGeminiService(text='{"explanation": "No chart needed.", "chartData": null}')

    r = _client(fake).post("/api/finance", json=_body())

    assert r.status_code == 200
    assert r.json() == {"content": "No chart needed.", "chartData": None}


def test_finance_malformed_chart_data_passes_through():
    chart = {"chartType": "donut", "config": 7, "data": "oops", "extra": [1, 2]}
    fake = _FakeGeminiService(text=json.dumps({"explanation": "X", "chartData": chart}))

    r = _client(fake).post("/api/finance", json=_body())

    assert r.status_code == 200
    assert r.json() == {"content": "X", "chartData": chart}


def test_finance_invalid_json_fallback():
    fake = _FakeGeminiService(text="Sure! Here is your chart: {")

    r = _client(fake).post("/api/finance", json=_body())

    assert r.status_code == 200
    assert r.json() == {
        "content": "Failed to generate a valid response. Please try again.",
        "chartData": None,
    }


def test_finance_missing_key_fallback():
    fake = _FakeGeminiService(text='{"explanation": "only half"}')

    r = _client(fake).post("/api/finance", json=_body())

    assert r.status_code == 200
    assert r.json() == {
        "content": "The response structure was invalid. Please try again.",
        "chartData": None,
    }


def test_finance_messages_required():
    client = _client(_FakeGeminiService())

    for body in (
        {"model": "gemini-2.5-flash"},
        _body(messages="hello"),
        _body(messages={"role": "user", "content": "hi"}),
        _body(messages=[{"role": "robot", "content": "hi"}]),
    ):
        r = client.post("/api/finance", json=body)
        assert r.status_code == 400
        assert r.json() == {"error": "Messages array is required"}


def test_finance_model_required():
    client = _client(_FakeGeminiService())

    for body in ({"messages": []}, _body(model="")):
        r = client.post("/api/finance", json=body)
        assert r.status_code == 400
        assert r.json() == {"error": "Model selection is required"}


def test_finance_messages_checked_before_model():
    r = _client(_FakeGeminiService()).post("/api/finance", json={})
    assert r.status_code == 400
    assert r.json() == {"error": "Messages array is required"}


def test_finance_no_file_data():
    fake = _FakeGeminiService()
    body = _body(fileData={"base64": "", "mediaType": "text/csv", "isText": True})

    r = _client(fake).post("/api/finance", json=body)

    assert r.status_code == 400
    assert r.json() == {"error": "No file data"}
    assert fake.calls == []


def test_finance_undecodable_file():
    body = _body(
        fileData={
            "base64": "%%% not base64 %%%",
            "mediaType": "text/plain",
            "isText": True,
            "fileName": "notes.txt",
        }
    )

    r = _client(_FakeGeminiService()).post("/api/finance", json=body)

    assert r.status_code == 400
    assert r.json() == {"error": "Failed to process file content"}


def test_finance_text_attachment_forwarded():
    csv = "quarter,revenue\nQ1,100\nQ2,120"
    fake = _FakeGeminiService(text='{"explanation": "ok", "chartData": null}')
    body = _body(
        fileData={
            "base64": base64.b64encode(csv.encode("utf-8")).decode("ascii"),
            "mediaType": "text/csv",
            "isText": True,
            "fileName": "revenue.csv",
        }
    )

    r = _client(fake).post("/api/finance", json=body)

    assert r.status_code == 200
    last = fake.calls[0]["messages"][-1]
    assert last.role == "user"
    assert "revenue.csv" in last.content
    assert csv in last.content
    assert last.content.endswith("Show me revenue by quarter")


def test_finance_upstream_error():
    fake = _FakeGeminiService(error=UpstreamError("quota exceeded"))

    r = _client(fake).post("/api/finance", json=_body())

    assert r.status_code == 500
    assert r.json() == {"error": "quota exceeded"}


def test_finance_unexpected_error():
    fake = _FakeGeminiService(error=RuntimeError("kaput"))

    r = _client(fake).post("/api/finance", json=_body())

    assert r.status_code == 500
    assert r.json() == {"error": "kaput"}


def test_finance_body_not_json():
    r = _client(_FakeGeminiService()).post(
        "/api/finance",
        content=b"not json",
        headers={"content-type": "application/json"},
    )

    assert r.status_code == 500
    assert "error" in r.json()


def test_finance_missing_api_key():
    app = create_app()

    import app.dependencies as deps

    settings = Settings.model_construct(gemini_api_key=None)
    app.dependency_overrides[deps.get_gemini_service] = lambda: GeminiService(
        settings=settings
    )

    r = TestClient(app).post("/api/finance", json=_body())

    assert r.status_code == 500
    assert r.json() == {"error": "GEMINI_API_KEY is not configured"}


def test_finance_nan_in_chart_data_uses_fallback():
    fake = _FakeGeminiService(text='{"explanation": "x", "chartData": {"data": [{"v": NaN}]}}')

    r = _client(fake).post("/api/finance", json=_body())

    assert r.status_code == 200
    assert r.json() == {
        "content": "Failed to generate a valid response. Please try again.",
        "chartData": None,
    }


def test_finance_overflowing_number_is_serialized_as_null():
    fake = _FakeGeminiService(text='{"explanation": "x", "chartData": {"data": [{"v": 1e400}]}}')

    r = _client(fake).post("/api/finance", json=_body())

    assert r.status_code == 200
    assert r.json() == {"content": "x", "chartData": {"data": [{"v": None}]}}


def test_finance_wrapped_base64_attachment():
    csv = "quarter,revenue\n" + "\n".join(f"Q{i},{i * 10}" for i in range(1, 30))
    fake = _FakeGeminiService(text='{"explanation": "ok", "chartData": null}')
    body = _body(
        fileData={
            "base64": base64.encodebytes(csv.encode("utf-8")).decode("ascii"),
            "mediaType": "text/csv",
            "isText": True,
            "fileName": "revenue.csv",
        }
    )

    r = _client(fake).post("/api/finance", json=body)

    assert r.status_code == 200
    assert csv in fake.calls[0]["messages"][-1].content


def test_finance_false_file_data_is_ignored():
    fake = _FakeGeminiService(text='{"explanation": "ok", "chartData": null}')

    r = _client(fake).post("/api/finance", json=_body(fileData=False))

    assert r.status_code == 200
    assert fake.calls[0]["messages"][-1].content == "Show me revenue by quarter"
