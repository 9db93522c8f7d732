from __future__ import annotations


def test_clients_crud_and_search(client):
    r = client.post("/clients", json={
        "name": "Joana Prado",
        "phone": "83988880000",
        "email": "joana@exemplo.com",
        "birth_date": "1990-04-12",
        "right_eye": {"spherical": "+1.50", "addition": "+2.00", "co": "22"},
        "left_eye": {"spherical": "+1.25", "addition": "+2.00"},
    })
    assert r.status_code == 201, r.text
    joana = r.json()
    assert joana["right_eye"]["co"] == "22"
    assert joana["left_eye"]["axis"] is None

    r = client.post("/clients", json={"name": "", "phone": "839"})
    assert r.status_code == 422

    r = client.post("/clients", json={"name": "   ", "phone": "839"})
    assert r.status_code == 400

    r = client.get("/clients", params={"q": "JOANA"})
    assert [c["id"] for c in r.json()] == [joana["id"]]

    r = client.get("/clients", params={"q": ""})
    assert r.json() == []

    r = client.put(f"/clients/{joana['id']}", json={"name": "Joana P. Lins", "phone": "83988880000"})
    assert r.status_code == 200
    assert r.json()["name"] == "Joana P. Lins"
    # edição substitui os campos do form
    assert r.json()["email"] is None

    assert client.get("/clients/999").status_code == 404
    assert client.put("/clients/999", json={"name": "X", "phone": "1"}).status_code == 404

    assert client.delete(f"/clients/{joana['id']}").status_code == 204
    assert client.get("/clients").json() == []


def test_agenda_flow(client):
    a = client.post("/clients", json={"name": "Caio", "phone": "83911112222"}).json()["id"]
    b = client.post("/clients", json={"name": "Duda", "phone": "83933334444"}).json()["id"]

    r = client.post("/appointments", json={"client_id": a, "date": "2026-06-01T09:10:00", "notes": "exame de vista"})
    assert r.status_code == 201, r.text
    appt = r.json()
    assert appt["client_name"] == "Caio"

    r = client.post("/appointments", json={"client_id": b, "date": "2026-06-01T09:10:00"})
    assert r.status_code == 409
    assert r.json()["detail"] == "Este horário já está agendado."

    r = client.post("/appointments", json={"client_id": 999, "date": "2026-06-01T09:20:00"})
    assert r.status_code == 404

    client.post("/appointments", json={"client_id": b, "date": "2026-06-01T08:00:00"})
    client.post("/appointments", json={"client_id": b, "date": "2026-06-02T08:00:00"})

    r = client.get("/appointments", params={"date": "2026-06-01"})
    assert r.status_code == 200
    assert [x["client_name"] for x in r.json()] == ["Duda", "Caio"]

    assert client.delete(f"/appointments/{appt['id']}").status_code == 204
    assert client.delete(f"/appointments/{appt['id']}").status_code == 404

    r = client.get("/appointments", params={"date": "2026-06-01"})
    assert [x["client_name"] for x in r.json()] == ["Duda"]

    # agenda pelo dia da loja: 22:00 -03:00 fica no dia 10
    r = client.post("/appointments", json={"client_id": a, "date": "2026-03-10T22:00:00-03:00"})
    assert r.status_code == 201, r.text
    assert r.json()["date"].startswith("2026-03-11T01:00:00")

    assert [x["client_name"] for x in client.get("/appointments", params={"date": "2026-03-10"}).json()] == ["Caio"]
    assert client.get("/appointments", params={"date": "2026-03-11"}).json() == []


def test_profile_upsert(client):
    r = client.get("/profile")
    assert r.status_code == 200
    assert r.json() is None

    r = client.put("/profile", json={"fantasy_name": "Ótica Bela Vista", "contact_phone": "8332221111"})
    assert r.status_code == 200
    assert r.json()["fantasy_name"] == "Ótica Bela Vista"

    r = client.put("/profile", json={"fantasy_name": "Ótica Bela Vista", "cnpj": " 12.345.678/0001-90 "})
    assert r.json()["cnpj"] == "12.345.678/0001-90"
    assert r.json()["contact_phone"] is None

    assert client.get("/profile").json()["cnpj"] == "12.345.678/0001-90"
