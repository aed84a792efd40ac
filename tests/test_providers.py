from app.core.config import settings
from tests.conftest import auth_headers, provider_payload

BASE = "/api/v1/provider"


def test_register_provider(client):
    response = client.post(f"{BASE}/register", json=provider_payload(license_number="md123abc"))

    assert response.status_code == 201
    data = response.json()
    assert data["verification_status"] == "PENDING"
    assert data["is_active"] is True
    assert data["license_number"] == "MD123ABC"
    assert "password" not in data and "password_hash" not in data


def test_register_duplicate_email(client):
    client.post(f"{BASE}/register", json=provider_payload(1))

    response = client.post(f"{BASE}/register", json=provider_payload(2, email="provider1@example.com"))

    assert response.status_code == 409
    assert response.json()["detail"] == "Email already exists"


def test_register_duplicate_phone_and_license(client):
    client.post(f"{BASE}/register", json=provider_payload(1))

    phone = client.post(f"{BASE}/register", json=provider_payload(2, phone_number="+15550000001"))
    license_ = client.post(f"{BASE}/register", json=provider_payload(3, license_number="MD000001"))

    assert phone.json()["detail"] == "Phone number already exists"
    assert license_.json()["detail"] == "License number already exists"


def test_register_validation(client):
    assert client.post(f"{BASE}/register", json=provider_payload(phone_number="5551234")).status_code == 422
    assert client.post(f"{BASE}/register", json=provider_payload(password="weak", confirm_password="weak")).status_code == 422
    assert client.post(f"{BASE}/register", json=provider_payload(confirm_password="Other@1234")).status_code == 422
    assert client.post(f"{BASE}/register", json=provider_payload(years_of_experience=51)).status_code == 422


def test_get_provider(client, provider):
    response = client.get(f"{BASE}/{provider.id}")

    assert response.status_code == 200
    assert response.json()["email"] == provider.email


def test_get_missing_provider(client):
    response = client.get(f"{BASE}/4040")

    assert response.status_code == 404
    assert response.json()["message"] == "Provider not found with id: 4040"


def test_update_own_profile(client, provider, provider_headers):
    payload = provider_payload(1, specialization="Neurology", years_of_experience=12)
    del payload["password"], payload["confirm_password"]

    response = client.put(f"{BASE}/{provider.id}", json=payload, headers=provider_headers)

    assert response.status_code == 200
    assert response.json()["specialization"] == "Neurology"
    assert response.json()["years_of_experience"] == 12


def test_update_other_profile_forbidden(client, make_provider):
    first = make_provider(1)
    second = make_provider(2)
    payload = provider_payload(1)

    response = client.put(f"{BASE}/{first.id}", json=payload, headers=auth_headers(second))

    assert response.status_code == 403


def test_soft_delete(client, provider, provider_headers):
    response = client.delete(f"{BASE}/{provider.id}", headers=provider_headers)

    assert response.status_code == 200
    assert client.get(f"{BASE}/{provider.id}").json()["is_active"] is False
    # A deactivated account can no longer use its token
    assert client.get(f"{BASE}/me", headers=provider_headers).status_code == 401


def test_list_active_and_search(client, make_provider, db_session):
    make_provider(1, specialization="Cardiology")
    make_provider(2, specialization="Dermatology")
    third = make_provider(3, specialization="Cardiac Surgery", verified=False)

    all_providers = client.get(f"{BASE}/all").json()
    cardio = client.get(f"{BASE}/search", params={"search": "CARDI"}).json()
    pending = client.get(f"{BASE}/search", params={"verification_status": "PENDING"}).json()

    assert all_providers["total_elements"] == 3
    assert cardio["total_elements"] == 2
    assert [p["id"] for p in pending["content"]] == [third.id]

    client.delete(f"{BASE}/{third.id}", headers=auth_headers(third))
    assert client.get(f"{BASE}/active").json()["total_elements"] == 2


def test_list_pagination(client, make_provider):
    for index in range(1, 4):
        make_provider(index)

    page = client.get(f"{BASE}/all", params={"page": 1, "size": 2, "sort_by": "last_name", "sort_dir": "asc"}).json()

    assert page["page"] == 1
    assert page["total_pages"] == 2
    assert [p["last_name"] for p in page["content"]] == ["HouseC"]


def test_list_rejects_unknown_sort_field(client):
    assert client.get(f"{BASE}/all", params={"sort_by": "password_hash"}).status_code == 400


def test_page_size_defaults_and_cap_come_from_settings(client, provider):
    default_page = client.get(f"{BASE}/all").json()
    huge_page = client.get(f"{BASE}/all", params={"size": settings.MAX_PAGE_SIZE + 50}).json()

    assert default_page["size"] == settings.DEFAULT_PAGE_SIZE
    assert huge_page["size"] == settings.MAX_PAGE_SIZE
