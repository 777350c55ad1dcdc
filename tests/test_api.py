from datetime import date

import pytest


BOOK = {"isbn": "978-1", "title": "Systems Design", "publicationYear": 2023}
PATRON = {"enrollmentNumber": "E100", "name": "A. Silva"}


def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["status"] == "ok"
    assert body["version"]


def test_create_book_returns_201_and_camel_case_payload(client):
    response = client.post("/api/livros", json=BOOK)
    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "Book created successfully"
    assert body["book"]["bookId"] > 0
    assert body["book"]["publicationYear"] == 2023


def test_create_book_with_duplicate_isbn_returns_400(client):
    client.post("/api/livros", json=BOOK)
    response = client.post("/api/livros", json={**BOOK, "title": "Another"})
    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert "978-1" in body["message"]


@pytest.mark.parametrize(
    "payload",
    [
        {"isbn": "978-9", "title": "No Year"},
        {"isbn": "978-9", "title": "", "publicationYear": 2000},
        {"isbn": "978-9", "title": "Negative", "publicationYear": -5},
        {"isbn": "", "title": "No ISBN", "publicationYear": 2000},
    ],
)
def test_invalid_book_returns_400(client, payload):
    response = client.post("/api/livros", json=payload)
    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["message"].startswith("Invalid request")


def test_list_and_get_books(client):
    created = client.post("/api/livros", json=BOOK).json()["book"]

    listing = client.get("/api/livros").json()
    assert listing["total"] == 1
    assert listing["books"] == [created]

    response = client.get(f"/api/livros/{created['bookId']}")
    assert response.status_code == 200
    assert response.json()["book"] == created


def test_get_unknown_book_returns_404(client):
    response = client.get("/api/livros/999")
    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "Book not found with id 999"}


def test_non_numeric_id_returns_400(client):
    response = client.get("/api/livros/abc")
    assert response.status_code == 400
    assert response.json()["success"] is False


def test_update_book(client):
    created = client.post("/api/livros", json=BOOK).json()["book"]
    response = client.put(
        f"/api/livros/{created['bookId']}",
        json={**BOOK, "title": "Systems Design, 2nd ed.", "bookId": 555},
    )
    assert response.status_code == 200
    book = response.json()["book"]
    assert book["bookId"] == created["bookId"]
    assert book["title"] == "Systems Design, 2nd ed."


def test_update_book_to_taken_isbn_returns_400(client):
    client.post("/api/livros", json=BOOK)
    other = client.post("/api/livros", json={**BOOK, "isbn": "978-2"}).json()["book"]
    response = client.put(f"/api/livros/{other['bookId']}", json=BOOK)
    assert response.status_code == 400


def test_delete_book(client):
    created = client.post("/api/livros", json=BOOK).json()["book"]
    response = client.delete(f"/api/livros/{created['bookId']}")
    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Book deleted successfully"}
    assert client.get(f"/api/livros/{created['bookId']}").status_code == 404


def test_delete_book_with_copies_returns_400(client, seed):
    created = client.post("/api/livros", json=BOOK).json()["book"]
    seed.copy(created["bookId"], status="available")
    response = client.delete(f"/api/livros/{created['bookId']}")
    assert response.status_code == 400
    assert response.json()["success"] is False


def test_search_books(client):
    client.post("/api/livros", json={**BOOK, "isbn": "1", "title": "Clean Code"})
    client.post("/api/livros", json={**BOOK, "isbn": "2", "title": "Refactoring"})

    body = client.get("/api/livros/buscar", params={"titulo": "clean"}).json()
    assert body["total"] == 1
    assert body["books"][0]["title"] == "Clean Code"

    empty = client.get("/api/livros/buscar", params={"titulo": "gardening"})
    assert empty.status_code == 200
    assert empty.json()["books"] == []


def test_count_book_authors(client, seed):
    created = client.post("/api/livros", json=BOOK).json()["book"]
    seed.link_author(created["bookId"], seed.author("Ada"))
    body = client.get(f"/api/livros/{created['bookId']}/autores").json()
    assert body == {"success": True, "bookId": created["bookId"], "totalAuthors": 1}


def test_create_patron_and_count_active_loans(client):
    response = client.post("/api/usuarios", json=PATRON)
    assert response.status_code == 201
    patron = response.json()["patron"]
    assert patron["enrollmentNumber"] == "E100"
    assert patron["email"] is None

    body = client.get(f"/api/usuarios/{patron['patronId']}/emprestimos-ativos").json()
    assert body == {"success": True, "patronId": patron["patronId"], "activeLoans": 0}


@pytest.mark.parametrize("email", ["nope", "a..b@example.com", ".a@example.com", "a@b..com", "a@-x.com"])
def test_create_patron_with_invalid_email_returns_400(client, email):
    response = client.post("/api/usuarios", json={**PATRON, "email": email})
    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert "email" in body["message"]
    assert client.get("/api/usuarios").json()["total"] == 0


def test_patron_crud(client):
    patron = client.post("/api/usuarios", json=PATRON).json()["patron"]
    patron_id = patron["patronId"]

    assert client.get("/api/usuarios").json()["total"] == 1

    updated = client.put(f"/api/usuarios/{patron_id}", json={**PATRON, "phone": "555-0100"})
    assert updated.status_code == 200
    assert updated.json()["patron"]["phone"] == "555-0100"

    assert client.delete(f"/api/usuarios/{patron_id}").status_code == 200
    assert client.get(f"/api/usuarios/{patron_id}").status_code == 404


def test_return_loan_with_date(client, seed):
    loan_id = seed.loan_for("Dune", "Ana", date(2025, 6, 1), date(2025, 6, 10))

    response = client.post(f"/api/emprestimos/{loan_id}/devolver", json={"returnDate": "2025-06-12"})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "Return registered successfully"
    assert body["loanId"] == loan_id
    assert body["returnDate"] == "2025-06-12"
    assert body["fineGenerated"] is True
    assert body["fineAmount"] == pytest.approx(5.0)
    assert body["fineMessage"] == "Fine of 5.00 generated for late return."


def test_return_loan_without_body_uses_today(client, seed):
    loan_id = seed.loan_for("Dune", "Ana", date(2025, 6, 1), date(2025, 6, 30))

    body = client.post(f"/api/emprestimos/{loan_id}/devolver").json()

    assert body["returnDate"] == "2025-06-15"
    assert body["fineGenerated"] is False
    assert body["fineAmount"] == 0


def test_second_return_returns_400(client, seed):
    loan_id = seed.loan_for("Dune", "Ana", date(2025, 6, 1), date(2025, 6, 30))
    client.post(f"/api/emprestimos/{loan_id}/devolver")

    response = client.post(f"/api/emprestimos/{loan_id}/devolver")

    assert response.status_code == 400
    assert response.json()["success"] is False


def test_active_loans_and_loan_detail(client, seed):
    loan_id = seed.loan_for("Dune", "Ana", date(2025, 6, 1), date(2025, 6, 10))

    active = client.get("/api/emprestimos/ativos").json()
    assert active["total"] == 1
    assert active["loans"][0] == {
        "loanId": loan_id,
        "patronName": "Ana",
        "bookTitle": "Dune",
        "loanDate": "2025-06-01",
        "dueDate": "2025-06-10",
        "status": "ACTIVE",
    }

    detail = client.get(f"/api/emprestimos/{loan_id}").json()["loan"]
    assert detail["fine"] is None

    client.post(f"/api/emprestimos/{loan_id}/devolver")
    detail = client.get(f"/api/emprestimos/{loan_id}").json()["loan"]
    assert detail["status"] == "RETURNED"
    assert detail["actualReturnDate"] == "2025-06-15"
    assert detail["fine"]["amount"] == pytest.approx(12.5)
    assert client.get("/api/emprestimos/ativos").json()["total"] == 0


def test_unknown_loan_returns_404(client):
    response = client.get("/api/emprestimos/404")
    assert response.status_code == 404
    assert response.json()["message"] == "Loan not found with id 404"


def test_search_without_title_returns_400(client):
    client.post("/api/livros", json=BOOK)
    response = client.get("/api/livros/buscar")
    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert "titulo" in body["message"]


TOO_LARGE_ID = 2 ** 63


@pytest.mark.parametrize(
    "method, path",
    [
        ("GET", f"/api/livros/{TOO_LARGE_ID}"),
        ("DELETE", f"/api/livros/{TOO_LARGE_ID}"),
        ("GET", f"/api/livros/{TOO_LARGE_ID}/autores"),
        ("GET", f"/api/usuarios/{TOO_LARGE_ID}"),
        ("GET", f"/api/usuarios/{TOO_LARGE_ID}/emprestimos-ativos"),
        ("GET", f"/api/emprestimos/{TOO_LARGE_ID}"),
    ],
)
def test_id_beyond_integer_range_returns_404(client, method, path):
    response = client.request(method, path)
    assert response.status_code == 404
    assert response.json()["success"] is False


def test_update_with_id_beyond_integer_range_returns_404(client):
    response = client.put(f"/api/livros/{TOO_LARGE_ID}", json=BOOK)
    assert response.status_code == 404


def test_return_with_id_beyond_integer_range_returns_400(client):
    response = client.post(f"/api/emprestimos/{TOO_LARGE_ID}/devolver")
    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert "not found" in body["message"]
