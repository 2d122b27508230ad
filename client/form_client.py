from typing import List, Optional, Sequence
from urllib.parse import quote

import requests

from backend.models.coercion import fix_form_instance, fix_form_template
from backend.models.forms import FormInstance, FormTemplate

class FormServerClient:
    """
    Stateless client for the form server REST API.
    Nothing is cached: every call is one HTTP request.
    Records come back as the same typed models the server stores, repaired
    with defaults where the response is malformed.
    Not-found answers become None/False; other HTTP errors raise requests.HTTPError.
    """

    def __init__(self, host: str, port: int, timeout_seconds: float = 5, session: Optional[requests.Session] = None):
        self.base_url = f"http://{host}:{port}"
        self.timeout = timeout_seconds
        self.http = session or requests.Session()

    def _url(self, *parts: str) -> str:
        return self.base_url + "".join("/" + quote(p, safe="") for p in parts)

    def list_all_forms(self) -> List[str]:
        r = self.http.get(self._url("forms"), timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def get_form(self, name: str) -> Optional[FormTemplate]:
        r = self.http.get(self._url("forms", name), timeout=self.timeout)
        if r.status_code == 404:
            return None
        r.raise_for_status()
        return fix_form_template(r.json())

    def create(self, name: str, contents: Sequence[str]) -> Optional[str]:
        r = self.http.post(
            self._url("instances"),
            json={"form": name, "contents": list(contents)},
            timeout=self.timeout,
        )
        if r.status_code == 400:
            return None
        r.raise_for_status()
        return r.text

    def get_instance(self, instance_id: str) -> Optional[FormInstance]:
        r = self.http.get(self._url("instances", instance_id), timeout=self.timeout)
        if r.status_code == 404:
            return None
        r.raise_for_status()
        return fix_form_instance(r.json())

    def replace(self, instance_id: str, new_contents: Sequence[str]) -> bool:
        r = self.http.patch(
            self._url("instances", instance_id),
            json={"contents": list(new_contents)},
            timeout=self.timeout,
        )
        if r.status_code in (400, 404):
            return False
        r.raise_for_status()
        return True

    def remove(self, instance_id: str) -> bool:
        r = self.http.delete(self._url("instances", instance_id), timeout=self.timeout)
        if r.status_code == 404:
            return False
        r.raise_for_status()
        return True

def access_server(host: str, port: int) -> FormServerClient:
    return FormServerClient(host, port)
