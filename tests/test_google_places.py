import pytest

from leadscout.vendors import google_places


class DummyResponse:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self._payload = payload or {}

    def raise_for_status(self):
        if self.status_code >= 400:
            raise RuntimeError("http error")

    def json(self):
        return self._payload


class DummySession:
    def __init__(self):
        self.calls = []
        self.response = DummyResponse(payload={"status": "OK"})

    def get(self, url, params=None, timeout=None):
        self.calls.append((url, params, timeout))
        return self.response


@pytest.fixture
def session():
    return DummySession()


@pytest.fixture
def client(session):
    return google_places.PlacesClient("key", session=session, timeout=7)


def test_client_requires_api_key():
    with pytest.raises(ValueError):
        google_places.PlacesClient("")


def test_geocode_success(client, session):
    session.response = DummyResponse(payload={"status": "OK", "results": [{"geometry": {}}]})

    results = client.geocode("Charlotte, NC")

    assert results == [{"geometry": {}}]
    url, params, timeout = session.calls[0]
    assert url.endswith("/geocode/json")
    assert params == {"address": "Charlotte, NC", "key": "key"}
    assert timeout == 7


def test_geocode_zero_results_is_empty(client, session):
    session.response = DummyResponse(payload={"status": "ZERO_RESULTS", "results": []})
    assert client.geocode("Nonexistent Place Zzzzz") == []


def test_nearby_search_params(client, session):
    session.response = DummyResponse(payload={"status": "OK", "results": [{"place_id": "a"}]})

    results = client.nearby_search(35.2, -80.8, 16093.4, keyword="plumber")

    assert results == [{"place_id": "a"}]
    url, params, _ = session.calls[0]
    assert "nearbysearch" in url
    assert params["location"] == "35.2,-80.8"
    assert params["radius"] == 16093
    assert params["keyword"] == "plumber"


def test_text_search_with_and_without_location(client, session):
    session.response = DummyResponse(payload={"status": "OK", "results": []})

    client.text_search("plumber near Charlotte, NC", radius_m=100.4)
    client.text_search("plumber", radius_m=100, latitude=1.5, longitude=2.5)

    _, first, _ = session.calls[0]
    _, second, _ = session.calls[1]
    assert first == {"query": "plumber near Charlotte, NC", "radius": 100, "key": "key"}
    assert second["location"] == "1.5,2.5"


def test_search_error_status(client, session):
    session.response = DummyResponse(payload={"status": "REQUEST_DENIED", "error_message": "bad key"})

    with pytest.raises(google_places.GooglePlacesError) as excinfo:
        client.text_search("pizza")

    assert excinfo.value.status == "REQUEST_DENIED"


def test_http_error_propagates(client, session):
    session.response = DummyResponse(status_code=503)
    with pytest.raises(RuntimeError):
        client.geocode("x")


def test_place_details_success(client, session):
    session.response = DummyResponse(payload={"status": "OK", "result": {"name": "Acme"}})

    result = client.place_details("pid")

    assert result["name"] == "Acme"
    _, params, _ = session.calls[0]
    assert params["place_id"] == "pid"
    assert "opening_hours" in params["fields"]
    assert "international_phone_number" in params["fields"]


def test_place_details_error(client, session):
    session.response = DummyResponse(payload={"status": "OVER_QUERY_LIMIT", "error_message": "limit"})
    with pytest.raises(google_places.GooglePlacesError):
        client.place_details("pid")


def test_place_details_without_result_is_error(client, session):
    session.response = DummyResponse(payload={"status": "ZERO_RESULTS"})
    with pytest.raises(google_places.GooglePlacesError):
        client.place_details("pid")


def test_autocomplete_cities(client, session):
    session.response = DummyResponse(payload={"status": "OK", "predictions": [{"description": "Charlotte, NC, USA"}]})

    predictions = client.autocomplete_cities("Char")

    assert predictions[0]["description"] == "Charlotte, NC, USA"
    _, params, _ = session.calls[0]
    assert params["types"] == "(cities)"
    assert params["components"] == "country:us"
