import unittest
from unittest import mock

import requests

from client.form_client import FormServerClient, access_server

FORM = {
    "name": "form1",
    "image": "form1.png",
    "slots": [{"description": "slot #1", "location": {"w": 10, "h": 5, "x": 5, "y": 40}}],
}

def response(status=200, json_body=None, text=""):
    r = mock.Mock(spec=requests.Response)
    r.status_code = status
    r.json.return_value = json_body
    r.text = text
    if status >= 400:
        r.raise_for_status.side_effect = requests.HTTPError(f"{status} error")
    return r

class TestFormServerClient(unittest.TestCase):
    def setUp(self):
        self.http = mock.Mock(spec=requests.Session)
        self.client = FormServerClient("pabst.ceas.uwm.edu", 4040, session=self.http)

    def test_access_server_builds_base_url(self):
        self.assertEqual(access_server("localhost", 56018).base_url, "http://localhost:56018")

    def test_list_all_forms(self):
        self.http.get.return_value = response(json_body=["form1", "form2"])
        self.assertEqual(self.client.list_all_forms(), ["form1", "form2"])
        self.http.get.assert_called_once_with("http://pabst.ceas.uwm.edu:4040/forms", timeout=5)

    def test_get_form(self):
        self.http.get.return_value = response(json_body=FORM)
        form = self.client.get_form("form1")
        self.assertEqual(form.model_dump(exclude_none=True), FORM)
        self.assertEqual(form.slots[0].location.y, 40)
        self.http.get.assert_called_once_with("http://pabst.ceas.uwm.edu:4040/forms/form1", timeout=5)

    def test_get_form_quotes_name(self):
        self.http.get.return_value = response(json_body=FORM)
        self.client.get_form("part one /part two")
        self.http.get.assert_called_once_with(
            "http://pabst.ceas.uwm.edu:4040/forms/part%20one%20%2Fpart%20two", timeout=5
        )

    def test_get_form_missing(self):
        self.http.get.return_value = response(status=404)
        self.assertIsNone(self.client.get_form("nope"))

    def test_malformed_records_are_repaired(self):
        self.http.get.return_value = response(json_body={"name": "form1", "slots": [{"location": {"x": "left"}}]})
        form = self.client.get_form("form1")
        self.assertEqual(form.image, "")
        self.assertEqual(form.slots[0].description, "")
        self.assertEqual(form.slots[0].location.x, 0)

        self.http.get.return_value = response(json_body={"id": "abc", "contents": ["x", 3]})
        inst = self.client.get_instance("abc")
        self.assertEqual((inst.id, inst.form, inst.contents), ("abc", "", ["x", "3"]))

    def test_create(self):
        self.http.post.return_value = response(text="new-id")
        self.assertEqual(self.client.create("form1", ("a", "b")), "new-id")
        self.http.post.assert_called_once_with(
            "http://pabst.ceas.uwm.edu:4040/instances",
            json={"form": "form1", "contents": ["a", "b"]},
            timeout=5,
        )

    def test_create_rejected(self):
        self.http.post.return_value = response(status=400)
        self.assertIsNone(self.client.create("form1", []))

    def test_get_instance(self):
        inst = {"id": "abc", "form": "form1", "contents": ["x"]}
        self.http.get.return_value = response(json_body=inst)
        self.assertEqual(self.client.get_instance("abc").model_dump(), inst)
        self.http.get.return_value = response(status=404)
        self.assertIsNone(self.client.get_instance("zzz"))

    def test_replace(self):
        self.http.patch.return_value = response(json_body=True)
        self.assertTrue(self.client.replace("abc", ["y"]))
        self.http.patch.assert_called_once_with(
            "http://pabst.ceas.uwm.edu:4040/instances/abc", json={"contents": ["y"]}, timeout=5
        )
        self.http.patch.return_value = response(status=400)
        self.assertFalse(self.client.replace("abc", []))
        self.http.patch.return_value = response(status=404)
        self.assertFalse(self.client.replace("zzz", ["y"]))

    def test_remove(self):
        self.http.delete.return_value = response(json_body=True)
        self.assertTrue(self.client.remove("abc"))
        self.http.delete.assert_called_once_with("http://pabst.ceas.uwm.edu:4040/instances/abc", timeout=5)
        self.http.delete.return_value = response(status=404)
        self.assertFalse(self.client.remove("abc"))

    def test_server_error_raises(self):
        self.http.get.return_value = response(status=500)
        with self.assertRaises(requests.HTTPError):
            self.client.list_all_forms()

if __name__ == "__main__":
    unittest.main()
