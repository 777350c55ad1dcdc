"""Library Circulation API client.

A thin wrapper around the HTTP API served by ``library_api``.  It uses
the ``requests`` library and mirrors the server's resources:

* books: :meth:`create_book`, :meth:`list_books`, :meth:`get_book`,
  :meth:`search_books`, :meth:`update_book`, :meth:`delete_book`,
  :meth:`count_book_authors`;
* patrons: :meth:`create_patron`, :meth:`list_patrons`,
  :meth:`get_patron`, :meth:`update_patron`, :meth:`delete_patron`,
  :meth:`count_active_loans`;
* loans: :meth:`return_loan`, :meth:`list_active_loans`,
  :meth:`get_loan`.

Every method returns a tuple ``(data, error)``.  On success ``data``
holds the relevant part of the response envelope and ``error`` is
``None``; on failure ``data`` is ``None`` (or an empty list) and
``error`` is a dictionary with ``status_code`` and ``message`` taken
from the server's failure envelope.  Nothing is retried; a caller that
wants to retry should only do so for 5xx errors.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

import requests


logger = logging.getLogger(__name__)

Result = Tuple[Optional[Any], Optional[Dict[str, Any]]]


class LibraryAPIClient:
    """Client for the library circulation API."""

    def __init__(
        self,
        *,
        base_url: str,
        session: Optional[requests.Session] = None,
        timeout: float = 15,
    ) -> None:
        """Initialise the API client.

        Args:
            base_url: Base URL including the API prefix, e.g.
                ``http://localhost:8080/api``.
            session: Optional requests session.  If not supplied a
                session will be created automatically.
            timeout: Seconds to wait for each response.
        """
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    # ------------------------------------------------------------------
    # Low level HTTP helpers
    # ------------------------------------------------------------------
    def _request(
        self, method: str, path: str, *, params: Dict[str, Any] | None = None,
        json_body: Any | None = None
    ) -> Result:
        """Perform an HTTP request and unwrap the response envelope.

        Returns:
            A tuple ``(envelope, error)``.  ``envelope`` is the decoded
            JSON body of a successful response.
        """
        url = f"{self.base_url}{path}"
        try:
            logger.debug("Sending %s request to %s", method, url)
            response = self.session.request(
                method=method,
                url=url,
                params=params,
                json=json_body,
                timeout=self.timeout,
            )
            response.raise_for_status()
            return response.json(), None
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else None
            message = ""
            if exc.response is not None:
                try:
                    message = exc.response.json().get("message", "")
                except ValueError:
                    message = exc.response.text
            if not message:
                message = str(exc)
            logger.error("API request failed (%s): %s", status, message)
            return None, {"status_code": status, "message": message}
        except requests.RequestException as exc:
            logger.error("API request failed: %s", exc)
            return None, {"status_code": None, "message": str(exc)}

    def _get_key(self, method: str, path: str, key: str, **kwargs: Any) -> Result:
        data, error = self._request(method, path, **kwargs)
        if error:
            return None, error
        return data.get(key), None

    def _get_list(self, path: str, key: str, **kwargs: Any) -> Tuple[List[Dict[str, Any]], Optional[Dict[str, Any]]]:
        data, error = self._request("GET", path, **kwargs)
        if error:
            return [], error
        return data.get(key, []), None

    # ------------------------------------------------------------------
    # Books
    # ------------------------------------------------------------------
    def create_book(self, book: Dict[str, Any]) -> Result:
        """Create a book from ``{"isbn", "title", "publicationYear"}``."""
        return self._get_key("POST", "/livros", "book", json_body=book)

    def list_books(self) -> Tuple[List[Dict[str, Any]], Optional[Dict[str, Any]]]:
        return self._get_list("/livros", "books")

    def search_books(self, title: str) -> Tuple[List[Dict[str, Any]], Optional[Dict[str, Any]]]:
        return self._get_list("/livros/buscar", "books", params={"titulo": title})

    def get_book(self, book_id: int) -> Result:
        return self._get_key("GET", f"/livros/{book_id}", "book")

    def update_book(self, book_id: int, book: Dict[str, Any]) -> Result:
        return self._get_key("PUT", f"/livros/{book_id}", "book", json_body=book)

    def delete_book(self, book_id: int) -> Tuple[bool, Optional[Dict[str, Any]]]:
        data, error = self._request("DELETE", f"/livros/{book_id}")
        return error is None, error

    def count_book_authors(self, book_id: int) -> Result:
        return self._get_key("GET", f"/livros/{book_id}/autores", "totalAuthors")

    # ------------------------------------------------------------------
    # Patrons
    # ------------------------------------------------------------------
    def create_patron(self, patron: Dict[str, Any]) -> Result:
        return self._get_key("POST", "/usuarios", "patron", json_body=patron)

    def list_patrons(self) -> Tuple[List[Dict[str, Any]], Optional[Dict[str, Any]]]:
        return self._get_list("/usuarios", "patrons")

    def get_patron(self, patron_id: int) -> Result:
        return self._get_key("GET", f"/usuarios/{patron_id}", "patron")

    def update_patron(self, patron_id: int, patron: Dict[str, Any]) -> Result:
        return self._get_key("PUT", f"/usuarios/{patron_id}", "patron", json_body=patron)

    def delete_patron(self, patron_id: int) -> Tuple[bool, Optional[Dict[str, Any]]]:
        data, error = self._request("DELETE", f"/usuarios/{patron_id}")
        return error is None, error

    def count_active_loans(self, patron_id: int) -> Result:
        return self._get_key("GET", f"/usuarios/{patron_id}/emprestimos-ativos", "activeLoans")

    # ------------------------------------------------------------------
    # Loans
    # ------------------------------------------------------------------
    def return_loan(self, loan_id: int, return_date: Optional[date] = None) -> Result:
        """Register the return of a loan.

        Returns the whole envelope, which carries ``loanId``,
        ``returnDate``, ``fineGenerated``, ``fineAmount`` and
        ``fineMessage``.
        """
        body = {"returnDate": return_date.isoformat()} if return_date else None
        return self._request("POST", f"/emprestimos/{loan_id}/devolver", json_body=body)

    def list_active_loans(self) -> Tuple[List[Dict[str, Any]], Optional[Dict[str, Any]]]:
        return self._get_list("/emprestimos/ativos", "loans")

    def get_loan(self, loan_id: int) -> Result:
        return self._get_key("GET", f"/emprestimos/{loan_id}", "loan")
