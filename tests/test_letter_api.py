import re

from httpx import AsyncClient

from app.models import User

NUMBER_PATTERN = re.compile(r"^\d{3}/IZIN/\d{2}/\d{4}$")


async def test_create_letter(client: AsyncClient, letter_payload: dict):
    response = await client.post("/api/permission-letters", json=letter_payload)

    assert response.status_code == 201
    data = response.json()
    assert NUMBER_PATTERN.match(data["letter_number"])
    assert data["letter_number"].startswith("001/")
    assert data["status"] == "pending"
    assert data["approved_at"] is None
    assert [p["name"] for p in data["participants"]] == ["Andi Pratama", "Budi Santoso"]
    assert data["participants"][0]["class"] == "XI RPL 1"
    assert data["participants"][1]["reason"] == "Kapten tim"


async def test_letter_numbers_increment_within_month(client: AsyncClient, letter_payload: dict):
    first = await client.post("/api/permission-letters", json=letter_payload)
    second = await client.post("/api/permission-letters", json=letter_payload)

    assert first.json()["letter_number"].startswith("001/")
    assert second.json()["letter_number"].startswith("002/")
    assert first.json()["letter_number"][3:] == second.json()["letter_number"][3:]


async def test_create_requires_fields(client: AsyncClient, letter_payload: dict):
    del letter_payload["location"]

    response = await client.post("/api/permission-letters", json=letter_payload)

    assert response.status_code == 400
    assert response.json()["detail"] == "Semua field wajib harus diisi"


async def test_create_requires_participants(client: AsyncClient, letter_payload: dict):
    letter_payload["participants"] = []

    response = await client.post("/api/permission-letters", json=letter_payload)

    assert response.status_code == 400
    assert response.json()["detail"] == "Minimal harus ada satu peserta"


async def test_get_missing_letter(client: AsyncClient):
    response = await client.get("/api/permission-letters/does-not-exist")

    assert response.status_code == 404


async def test_list_letters_paginates_and_filters(client: AsyncClient, letter_payload: dict):
    for activity in ["Lomba Futsal", "Studi Banding", "Lomba Debat"]:
        await client.post("/api/permission-letters", json={**letter_payload, "activity": activity})

    page = await client.get("/api/permission-letters", params={"page": 1, "limit": 2})
    assert page.status_code == 200
    assert len(page.json()["letters"]) == 2
    assert page.json()["pagination"] == {"page": 1, "limit": 2, "total": 3, "totalPages": 2}

    search = await client.get("/api/permission-letters", params={"search": "lomba futsal"})
    assert [letter["activity"] for letter in search.json()["letters"]] == ["Lomba Futsal"]

    pending = await client.get("/api/permission-letters", params={"status": "approved"})
    assert pending.json()["pagination"]["total"] == 0


async def test_approve_sets_approval_fields(approved_letter: dict, approver: User):
    assert approved_letter["status"] == "approved"
    assert approved_letter["approved_at"] is not None
    assert approved_letter["approved_by"] == approver.USER_ID
    assert approved_letter["approver"]["name"] == "Kepala Sekolah"


async def test_back_to_pending_clears_approval(client: AsyncClient, approved_letter: dict):
    response = await client.patch(
        f"/api/permission-letters/{approved_letter['id']}", json={"status": "pending"}
    )

    data = response.json()
    assert data["status"] == "pending"
    assert data["approved_at"] is None
    assert data["approved_by"] is None


async def test_update_replaces_participants(client: AsyncClient, letter_payload: dict):
    created = (await client.post("/api/permission-letters", json=letter_payload)).json()

    response = await client.put(
        f"/api/permission-letters/{created['id']}",
        json={"location": "Aula Sekolah", "participants": [{"name": "Citra Dewi", "class": "X DKV 1"}]},
    )

    data = response.json()
    assert response.status_code == 200
    assert data["location"] == "Aula Sekolah"
    assert data["activity"] == letter_payload["activity"]
    assert [p["name"] for p in data["participants"]] == ["Citra Dewi"]


async def test_delete_letter(client: AsyncClient, letter_payload: dict):
    created = (await client.post("/api/permission-letters", json=letter_payload)).json()

    response = await client.delete(f"/api/permission-letters/{created['id']}")
    assert response.status_code == 200
    assert response.json()["message"] == "Surat berhasil dihapus"

    missing = await client.get(f"/api/permission-letters/{created['id']}")
    assert missing.status_code == 404


async def test_pdf_requires_approval(client: AsyncClient, letter_payload: dict):
    created = (await client.post("/api/permission-letters", json=letter_payload)).json()

    response = await client.get(f"/api/permission-letters/{created['id']}/pdf")

    assert response.status_code == 400


async def test_pdf_for_missing_letter(client: AsyncClient):
    response = await client.get("/api/permission-letters/does-not-exist/pdf")

    assert response.status_code == 404


async def test_pdf_for_approved_letter(client: AsyncClient, approved_letter: dict):
    response = await client.get(f"/api/permission-letters/{approved_letter['id']}/pdf")

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert response.content.startswith(b"%PDF")
    assert "no-store" in response.headers["cache-control"]
    expected_name = f"surat-{approved_letter['letter_number'].replace('/', '-')}.pdf"
    assert expected_name in response.headers["content-disposition"]


async def test_null_participants_keeps_existing(client: AsyncClient, letter_payload: dict):
    created = (await client.post("/api/permission-letters", json=letter_payload)).json()

    response = await client.patch(
        f"/api/permission-letters/{created['id']}",
        json={"activity": "Lomba Futsal Final", "participants": None},
    )

    data = response.json()
    assert response.status_code == 200
    assert data["activity"] == "Lomba Futsal Final"
    assert [p["name"] for p in data["participants"]] == ["Andi Pratama", "Budi Santoso"]

    fetched = (await client.get(f"/api/permission-letters/{created['id']}")).json()
    assert len(fetched["participants"]) == 2
