from leadscout.etl import transform
from leadscout.models import CandidateRef, Coordinate, DistancedCandidate


def _item(raw=None, name="Acme Plumbing", distance=2.5):
    candidate = CandidateRef(provider_id="pid", name=name, raw_attributes=raw or {}, strategy="keyword")
    return DistancedCandidate(candidate=candidate, distance_miles=distance)


def test_extract_primary_type():
    assert transform._extract_primary_type(["point_of_interest", "restaurant"]) == "restaurant"
    assert transform._extract_primary_type([]) is None


def test_to_candidate_parses_coordinate():
    candidate = transform.to_candidate(
        {"place_id": "p1", "name": " Acme ", "geometry": {"location": {"lat": 1.5, "lng": "2.5"}}},
        "text",
    )
    assert candidate.provider_id == "p1"
    assert candidate.name == "Acme"
    assert candidate.coordinate == Coordinate(1.5, 2.5)
    assert candidate.strategy == "text"


def test_to_candidate_without_place_id_or_geometry():
    assert transform.to_candidate({"name": "No id"}, "text") is None
    assert transform.to_candidate({"place_id": "p1", "name": "No geo"}, "text").coordinate is None


def test_sanitize_website_rejects_map_provider_links():
    assert transform.sanitize_website("https://acmeplumbing.com") == "https://acmeplumbing.com"
    assert transform.sanitize_website("acmeplumbing.com") == "acmeplumbing.com"
    assert transform.sanitize_website("https://maps.google.com/?cid=123") is None
    assert transform.sanitize_website("https://www.google.com/maps/place/x") is None
    assert transform.sanitize_website("https://g.page/acme") is None
    assert transform.sanitize_website("https://maps.app.goo.gl/abc") is None
    assert transform.sanitize_website("   ") is None
    assert transform.sanitize_website(None) is None


def test_sanitize_website_keeps_sites_hosted_by_the_map_provider():
    assert transform.sanitize_website("https://sites.google.com/view/acme") == "https://sites.google.com/view/acme"
    assert transform.sanitize_website("https://www.google.com/maps/place/x") is None
    assert transform.sanitize_website("https://business.google.com/x") is None


def test_pick_phone_fallback_chain():
    assert transform.pick_phone({"formatted_phone_number": "(704) 555-0100"}) == "(704) 555-0100"
    assert transform.pick_phone({"international_phone_number": "+1 704-555-0100"}) == "+1 704-555-0100"
    assert transform.pick_phone({}) == transform.PHONE_UNAVAILABLE


def test_to_business_normalizes_details():
    details = {
        "name": "Acme Plumbing LLC",
        "formatted_address": "1 Main St, Charlotte, NC",
        "formatted_phone_number": "(704) 555-0100",
        "website": "https://acmeplumbing.com",
        "rating": 4.6,
        "user_ratings_total": 120,
        "opening_hours": {"weekday_text": ["Monday: 8 AM - 5 PM", "Tuesday: 8 AM - 5 PM"]},
        "photos": [{}, {}, {}, {}],
        "business_status": "OPERATIONAL",
        "price_level": 2,
        "types": ["point_of_interest", "plumber"],
        "url": "https://maps.google.com/?cid=1",
    }

    business = transform.to_business(details, _item())

    assert business.name == "Acme Plumbing LLC"
    assert business.category == "plumber"
    assert business.address == "1 Main St, Charlotte, NC"
    assert business.website == "https://acmeplumbing.com"
    assert business.hours_text == ("Monday: 8 AM - 5 PM", "Tuesday: 8 AM - 5 PM")
    assert business.photos_count == 4
    assert business.price_level == 2
    assert business.distance_miles == 2.5
    assert business.map_url == "https://maps.google.com/?cid=1"
    assert business.enriched is True


def test_to_business_defaults_for_sparse_details():
    raw = {"vicinity": "2 Side St", "business_status": "CLOSED_TEMPORARILY", "types": ["hair_care"]}

    business = transform.to_business({"website": "https://business.google.com/x"}, _item(raw))

    assert business.name == "Acme Plumbing"
    assert business.category == "hair care"
    assert business.address == "2 Side St"
    assert business.phone == transform.PHONE_UNAVAILABLE
    assert business.website is None
    assert business.rating == 0.0
    assert business.review_count == 0
    assert business.hours_text is None
    assert business.photos_count == 0
    assert business.business_status == "CLOSED_TEMPORARILY"
    assert business.map_url == "https://www.google.com/maps/place/?q=place_id:pid"


def test_fallback_business_uses_search_data_and_sentinels():
    raw = {
        "rating": 3.9,
        "user_ratings_total": 40,
        "formatted_address": "3 Elm St",
        "photos": [{}, {}, {}],
        "website": "https://ignored.example",
        "types": ["restaurant"],
    }

    business = transform.fallback_business(_item(raw))

    assert business.phone == transform.PHONE_UNAVAILABLE
    assert business.website is None
    assert business.hours_text is None
    assert business.photos_count == 0
    assert business.rating == 3.9
    assert business.review_count == 40
    assert business.address == "3 Elm St"
    assert business.business_status == transform.DEFAULT_BUSINESS_STATUS
    assert business.enriched is False
