from conftest import FakeDriver, FakeLauncher, FakeLighthouseRunner

from app.features.lighthouse.services.lighthouse_service import LighthouseService


def _lighthouse_client(make_client, translations, report):
    launcher = FakeLauncher(FakeDriver())
    service = LighthouseService(translations, launcher=launcher, runner=FakeLighthouseRunner(report=report))
    return make_client(lighthouse=lambda: service), launcher


def test_lighthouse_report(make_client, translations, lighthouse_report):
    client, launcher = _lighthouse_client(make_client, translations, lighthouse_report)

    response = client.get("/api/lighthouse", params={"url": "example.com", "lang": "en"})

    assert response.status_code == 200
    body = response.json()
    assert body["url"] == "https://example.com"
    assert body["scores"] == {"performance": 56, "accessibility": 90, "bestPractices": 100, "seo": 70}
    assert body["summary"]["averageScore"] == 79
    issue = body["criteria"][0]["issues"][0]
    assert issue["savingsBytes"] == 20481
    assert issue["itemsCount"] == 8
    assert "savings" not in body["criteria"][0]["issues"][1]
    assert launcher.driver.quit_calls == 1


def test_invalid_url_is_a_driver_failure(make_client, translations, lighthouse_report):
    client, launcher = _lighthouse_client(make_client, translations, lighthouse_report)

    response = client.get("/api/lighthouse", params={"url": "not a url", "lang": "en"})

    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "Lighthouse audit failed"
    assert "Invalid URL format" in body["details"]
    assert launcher.launches == 0


def test_missing_url(make_client, translations, lighthouse_report):
    client, _ = _lighthouse_client(make_client, translations, lighthouse_report)

    response = client.get("/api/lighthouse")

    assert response.status_code == 400
    assert response.json() == {"error": "Параметр URL обязателен"}


def test_unavailable_without_driver(client):
    response = client.get("/api/lighthouse", params={"url": "example.com", "lang": "en"})

    assert response.status_code == 503
    assert response.json()["error"] == "Audit service is temporarily unavailable"
