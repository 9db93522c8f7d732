from __future__ import annotations

from decimal import Decimal

from freezegun import freeze_time


def _new_client(client, name="robisvaldo", phone="5583987157461"):
    r = client.post("/clients", json={
        "name": name,
        "phone": phone,
        "cpf": "01234567890",
        "address": "rua do barro",
        "right_eye": {"spherical": "-2.00", "axis": "180"},
        "left_eye": {"spherical": "-1.75"},
        "notes": "pagador"
    })
    assert r.status_code == 201, r.text
    return r.json()["id"]


@freeze_time("2026-01-30 15:00:00")
def test_full_flow_sale_payments(client):
    # 1) cria client
    client_id = _new_client(client)

    # 2) próximo número da O.S.
    r = client.get("/sales/next-service-order-number")
    assert r.status_code == 200
    assert r.json() == 701

    # 3) cria sale (form já manda os valores calculados)
    r = client.post("/sales", json={
        "client_id": client_id,
        "service_order_number": 701,
        "items": [{"description": "Lente antirreflexo", "quantity": 1, "unit_price": 80, "total": 80}],
        "frame_value": 20,
        "subtotal": 100,
        "total": 100,
        "paid_amount": 0,
        "pending_amount": 100,
        "payment_method": "cash",
        "delivery_date": "2026-02-10",
    })
    assert r.status_code == 201, r.text
    sale = r.json()
    sale_id = sale["id"]
    assert sale["service_order_number"] == 701
    assert sale["client_name"] == "robisvaldo"
    assert sale["status"] == "pending"
    assert Decimal(sale["total"]) == Decimal("100")

    r = client.get("/sales/next-service-order-number")
    assert r.json() == 702

    # 4) pagamento parcial
    r = client.post(f"/sales/{sale_id}/payments", json={"amount": 60, "payment_method": "pix"})
    assert r.status_code == 201, r.text
    assert r.json()["success"] is True

    r = client.get(f"/sales/{sale_id}")
    body = r.json()
    assert body["status"] == "partial"
    assert Decimal(body["paid_amount"]) == Decimal("60")
    assert Decimal(body["pending_amount"]) == Decimal("40")

    # 5) quita
    r = client.post(f"/sales/{sale_id}/payments", json={"amount": 40, "payment_method": "card", "notes": "final"})
    assert r.status_code == 201, r.text
    second_id = r.json()["payment"]["id"]
    assert r.json()["payment"]["payment_date"].startswith("2026-01-30T15:00:00")

    r = client.get(f"/sales/{sale_id}")
    assert r.json()["status"] == "paid"
    assert Decimal(r.json()["pending_amount"]) == Decimal("0")

    # 6) pagamento acima do pendente
    r = client.post(f"/sales/{sale_id}/payments", json={"amount": 1})
    assert r.status_code == 400

    # 7) estorna o segundo pagamento
    r = client.delete(f"/payments/{second_id}")
    assert r.status_code == 200, r.text
    assert r.json() == {"success": True}

    r = client.get(f"/sales/{sale_id}")
    body = r.json()
    assert body["status"] == "partial"
    assert Decimal(body["paid_amount"]) == Decimal("60")
    assert Decimal(body["pending_amount"]) == Decimal("40")

    r = client.get(f"/sales/{sale_id}/payments")
    assert r.status_code == 200
    assert [p["payment_method"] for p in r.json()] == ["pix"]

    # 8) estatísticas
    r = client.get("/sales/stats")
    stats = r.json()
    assert stats["total_count"] == 1
    assert stats["paid_count"] == 0
    assert Decimal(stats["total_pending"]) == Decimal("40")

    # 9) exclui a venda (com pagamentos)
    r = client.delete(f"/sales/{sale_id}")
    assert r.status_code == 204
    assert client.get(f"/sales/{sale_id}").status_code == 404
    assert client.get(f"/sales/{sale_id}/payments").status_code == 404


def test_sale_validation_and_conflicts(client):
    client_id = _new_client(client)
    item = {"description": "Armação", "quantity": 1, "unit_price": 150}

    r = client.post("/sales", json={"client_id": client_id, "items": []})
    assert r.status_code == 422

    r = client.post("/sales", json={"client_id": client_id, "items": [item], "paid_amount": 200})
    assert r.status_code == 400

    r = client.post("/sales", json={"client_id": 999, "items": [item]})
    assert r.status_code == 404

    r = client.post("/sales", json={"client_id": client_id, "items": [item], "service_order_number": 701})
    assert r.status_code == 201
    r = client.post("/sales", json={"client_id": client_id, "items": [item], "service_order_number": 701})
    assert r.status_code == 409

    r = client.post("/sales/999/payments", json={"amount": 10})
    assert r.status_code == 404
    assert client.delete("/payments/999").status_code == 404


def test_update_sale_endpoint(client):
    client_id = _new_client(client)
    r = client.post("/sales", json={
        "client_id": client_id,
        "items": [{"description": "Lente", "quantity": 2, "unit_price": 50}],
    })
    sale_id = r.json()["id"]

    r = client.patch(f"/sales/{sale_id}", json={"status": "cancelled", "notes": "desistiu"})
    assert r.status_code == 200, r.text
    assert r.json()["status"] == "cancelled"
    assert r.json()["notes"] == "desistiu"

    r = client.patch(f"/sales/{sale_id}", json={"paid_amount": 10, "pending_amount": 10})
    assert r.status_code == 400

    r = client.patch(f"/sales/{sale_id}", json={"paid_amount": 100})
    assert r.status_code == 200
    assert r.json()["status"] == "paid"

    r = client.patch(f"/sales/{sale_id}", json={"status": "bogus"})
    assert r.status_code == 422


def test_list_and_search_sales(client):
    ana = _new_client(client, name="Ana Lima", phone="83900001111")
    bia = _new_client(client, name="Bia Souza", phone="83900002222")
    item = [{"description": "Lente", "quantity": 1, "unit_price": 100}]

    client.post("/sales", json={"client_id": ana, "items": item})
    client.post("/sales", json={"client_id": bia, "items": item, "paid_amount": 100})

    r = client.get("/sales")
    assert [s["service_order_number"] for s in r.json()] == [702, 701]

    r = client.get("/sales", params={"status": "paid"})
    assert [s["client_name"] for s in r.json()] == ["Bia Souza"]

    r = client.get("/sales", params={"client_id": ana})
    assert [s["client_name"] for s in r.json()] == ["Ana Lima"]

    r = client.get("/sales", params={"q": "LIMA"})
    assert [s["service_order_number"] for s in r.json()] == [701]

    r = client.get("/sales", params={"q": "702"})
    assert [s["client_name"] for s in r.json()] == ["Bia Souza"]


def test_receipt_data(client):
    client_id = _new_client(client)
    r = client.post("/sales", json={
        "client_id": client_id,
        "items": [{"description": "Óculos de sol", "quantity": 1, "unit_price": 250}],
        "discount": 50,
        "paid_amount": 100,
    })
    sale_id = r.json()["id"]

    r = client.put("/profile", json={"fantasy_name": "Ótica Central", "cnpj": "12.345.678/0001-90"})
    assert r.status_code == 200, r.text

    r = client.get(f"/api/sales/{sale_id}/receipt-data")
    assert r.status_code == 200
    assert r.headers["access-control-allow-origin"] == "*"
    data = r.json()
    assert data["sale"]["service_order_number"] == 701
    assert Decimal(data["sale"]["total"]) == Decimal("200")
    assert data["client"]["right_eye"]["spherical"] == "-2.00"
    assert data["profile"]["fantasy_name"] == "Ótica Central"

    r = client.get("/api/sales/999/receipt-data")
    assert r.status_code == 404
    assert r.json() == {"error": "Dados não encontrados"}

    # cliente excluído: recibo continua com o nome copiado
    assert client.delete(f"/clients/{client_id}").status_code == 204
    r = client.get(f"/api/sales/{sale_id}/receipt-data")
    assert r.status_code == 200
    assert r.json()["client"] is None
    assert r.json()["sale"]["client_name"] == "robisvaldo"
