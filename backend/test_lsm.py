"""Tests for the LSM triple-store client and the security read service."""

from datetime import datetime

import pytest
import requests

from reqdef.lsm import (
    LSMSecurityManagerService,
    LSMServerError,
    LSMTripleStore,
    Observation,
    Reading,
    SecurityQueryError,
    Sensor,
)
from reqdef.lsm.security import iri, literal

HOST = "http://lsm.example.org/server"
GRAPH = "http://lsm.deri.ie/OpenIoT/demo#"


class FakeResponse:
    def __init__(self, status_code=200, text="", payload=None):
        self.status_code = status_code
        self.text = text
        self._payload = payload

    def json(self):
        if self._payload is None:
            raise ValueError("no JSON body")
        return self._payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


class FakeSession:
    """Records every request and answers with queued responses."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def _next(self):
        return self.responses.pop(0) if self.responses else FakeResponse()

    def post(self, url, **kwargs):
        self.calls.append(("POST", url, kwargs))
        return self._next()

    def get(self, url, **kwargs):
        self.calls.append(("GET", url, kwargs))
        return self._next()


def sparql_result(*rows):
    return FakeResponse(payload={"results": {"bindings": [
        {name: {"type": "uri", "value": value} for name, value in row.items()}
        for row in rows
    ]}})


class TestTripleStore:
    def test_urls_get_trailing_slash(self):
        store = LSMTripleStore(HOST, session=FakeSession())

        assert store.rdf_servlet_url == HOST + "/rdfservlet"
        assert store.object_servlet_url == HOST + "/objservlet"
        assert store.upload_url == HOST + "/upload"

    def test_sensor_delete(self):
        session = FakeSession(FakeResponse(text="Sensor deleted\nextra"))
        store = LSMTripleStore(HOST, session=session)

        message = store.sensor_delete("http://lsm/sensor/1", GRAPH, "client", "tok")

        method, url, kwargs = session.calls[0]
        assert (method, url) == ("POST", HOST + "/rdfservlet")
        assert kwargs["headers"]["api"] == "3"
        assert kwargs["headers"]["apiType"] == "delete"
        assert kwargs["headers"]["graphURL"] == GRAPH
        assert kwargs["headers"]["clientId"] == "client"
        assert kwargs["headers"]["token"] == "tok"
        assert kwargs["json"] == {"sensorURL": "http://lsm/sensor/1"}
        assert message == "Sensor deleted"

    def test_delete_all_readings_without_window(self):
        session = FakeSession()
        LSMTripleStore(HOST, session=session).delete_all_readings("s", GRAPH, "c", "t")

        headers = session.calls[0][2]["headers"]
        assert headers["api"] == "4"
        assert "dateOperator" not in headers

    def test_delete_all_readings_with_window(self):
        session = FakeSession()
        LSMTripleStore(HOST, session=session).delete_all_readings(
            "s", GRAPH, "c", "t",
            date_operator="between",
            from_time=datetime(2013, 1, 1),
            to_time=datetime(2013, 2, 1),
        )

        headers = session.calls[0][2]["headers"]
        assert headers["api"] == "delete"
        assert headers["dateOperator"] == "between"
        assert headers["fromTime"] == "2013-01-01T00:00:00"
        assert headers["toTime"] == "2013-02-01T00:00:00"

    def test_get_sensor_by_id(self):
        session = FakeSession(FakeResponse(payload={
            "id": "http://lsm/sensor/1", "name": "Weather", "sensor_type": "weather",
        }))

        sensor = LSMTripleStore(HOST, session=session).get_sensor_by_id("http://lsm/sensor/1", GRAPH, "c", "t")

        assert session.calls[0][2]["headers"]["api"] == "5"
        assert (sensor.id, sensor.name) == ("http://lsm/sensor/1", "Weather")

    def test_sensor_add_assigns_id(self):
        session = FakeSession()
        store = LSMTripleStore(HOST, session=session)

        sensor_id = store.sensor_add(Sensor(name="Weather", sensor_type="weather"), "c", "t")

        method, url, kwargs = session.calls[0]
        assert url == HOST + "/objservlet"
        assert kwargs["headers"]["api"] == "21"
        assert kwargs["json"]["id"] == sensor_id
        assert sensor_id

    def test_sensor_add_keeps_existing_id(self):
        store = LSMTripleStore(HOST, session=FakeSession())
        assert store.sensor_add(Sensor(id="s1", name="n", sensor_type="t"), "c", "t") == "s1"

    def test_sensor_data_update(self):
        session = FakeSession()
        observation = Observation(
            sensor_id="s1",
            time=datetime(2013, 5, 1, 12, 0),
            readings=[Reading(property_type="Temperature", value=21.5, unit="C")],
        )

        LSMTripleStore(HOST, session=session).sensor_data_update(observation, "c", "t")

        kwargs = session.calls[0][2]
        assert kwargs["headers"]["api"] == "22"
        assert kwargs["json"]["readings"][0]["value"] == 21.5

    def test_push_rdf(self):
        session = FakeSession()

        assert LSMTripleStore(HOST, session=session).push_rdf(GRAPH, "<a> <b> <c> .", "c", "t") is True
        assert session.calls[0][2]["json"] == {"graphURL": GRAPH, "triples": "<a> <b> <c> ."}
        assert session.calls[0][2]["headers"]["api"] == "23"

    def test_delete_triples_defaults_to_all(self):
        session = FakeSession()
        LSMTripleStore(HOST, session=session).delete_triples(GRAPH, "c", "t")

        assert session.calls[0][2]["json"]["triples"] == "all"
        assert session.calls[0][2]["headers"]["api"] == "24"

    def test_update_triples(self):
        session = FakeSession(FakeResponse(text="updated"))

        message = LSMTripleStore(HOST, session=session).update_triples(GRAPH, "new", "old", "c", "t")

        kwargs = session.calls[0][2]
        assert kwargs["headers"]["operator"] == "delete"
        assert kwargs["headers"]["project"] == "openiot"
        assert kwargs["json"] == {"delete": "old", "update": "new"}
        assert message == "updated"

    def test_upload_schema(self):
        session = FakeSession(FakeResponse(text="uploaded"))

        message = LSMTripleStore(HOST, session=session).upload_schema("<rdf:RDF/>", "schema.rdf", "c", "t")

        method, url, kwargs = session.calls[0]
        assert url == HOST + "/upload"
        assert kwargs["headers"]["fileName"] == "schema.rdf"
        assert kwargs["headers"]["Content-Type"] == "application/rdf+xml"
        assert kwargs["data"] == b"<rdf:RDF/>"
        assert message == "uploaded"

    def test_non_ok_status_raises(self):
        session = FakeSession(FakeResponse(status_code=500, text="boom"))

        with pytest.raises(LSMServerError) as excinfo:
            LSMTripleStore(HOST, session=session).push_rdf(GRAPH, "", "c", "t")

        assert excinfo.value.status_code == 500
        assert excinfo.value.operation == "pushRDF"
        assert excinfo.value.body == "boom"


class TestSecurityService:
    def service(self, *responses):
        session = FakeSession(*responses)
        service = LSMSecurityManagerService(
            sparql_endpoint="http://lsm.example.org/sparql",
            graph_url="http://lsm.deri.ie/OpenIoT/OAuth#",
            instances_prefix="http://lsm.deri.ie/resource/",
            session=session,
        )
        return service, session

    def test_select_builds_query(self):
        service, session = self.service(sparql_result({"userId": "u1"}))

        rows = service.select("?userId ?p ?o", "?userId")

        method, url, kwargs = session.calls[0]
        assert (method, url) == ("GET", "http://lsm.example.org/sparql")
        assert kwargs["params"]["query"].startswith("select ?userId from <http://lsm.deri.ie/OpenIoT/OAuth#>")
        assert rows == [{"userId": "u1"}]

    def test_user_by_username(self):
        service, session = self.service(
            sparql_result({"nick": "Alice", "mbox": "alice@example.org", "pass": "secret"}),
            sparql_result({"roleId": "http://lsm.deri.ie/resource/role/admin"}),
        )

        user = service.get_user_by_username("alice")

        assert user.username == "alice"
        assert user.email == "alice@example.org"
        assert user.roles == ["http://lsm.deri.ie/resource/role/admin"]
        assert "<http://lsm.deri.ie/resource/user/alice>" in session.calls[0][2]["params"]["query"]

    def test_user_by_full_url(self):
        service, session = self.service(sparql_result({"pass": "x"}), sparql_result())

        user = service.get_user_by_username("http://lsm.deri.ie/resource/user/bob")

        assert user.username == "bob"

    def test_unknown_user(self):
        service, _ = self.service(sparql_result())
        assert service.get_user_by_username("nobody") is None

    def test_user_id_by_email_escapes_literal(self):
        service, session = self.service(sparql_result({"userId": "u1"}, {"userId": "u2"}))

        assert service.get_user_id_by_email('a"b@example.org') == "u2"
        assert '"a\\"b@example.org"' in session.calls[0][2]["params"]["query"]

    def test_role_and_permission_ids(self):
        service, _ = self.service(
            sparql_result({"roleId": "r1"}, {"roleId": "r2"}),
            sparql_result({"permId": "p1"}),
            sparql_result({"userId": "u1"}),
        )

        assert service.get_all_role_ids() == ["r1", "r2"]
        assert service.get_all_permission_ids() == ["p1"]
        assert service.get_role_user_ids("admin") == ["u1"]

    def test_services_are_filtered(self):
        rows = (
            {"service": "http://lsm.deri.ie/resource/service/1", "name": "Service Manager"},
            {"service": "http://lsm.deri.ie/resource/service/2", "name": "Request Definition"},
            {"service": "http://lsm.deri.ie/resource/service/7", "name": "HTTP"},
        )
        service, _ = self.service(sparql_result(*rows), sparql_result(*rows))

        assert [s.id for s in service.get_all_registered_services()] == [1, 2, 7]
        assert [(s.id, s.name) for s in service.get_all_services()] == [(2, "Request Definition")]

    def test_next_service_id(self):
        service, _ = self.service(
            sparql_result({"service": "http://x/service/3"}, {"service": "http://x/service/9"}),
            sparql_result(),
        )

        assert service.next_service_id() == 10
        assert service.next_service_id() == 1

    def test_bad_service_iri(self):
        service, _ = self.service(sparql_result({"service": "http://x/service/abc"}))
        with pytest.raises(SecurityQueryError):
            service.get_all_registered_services()

    def test_http_failure(self):
        service, _ = self.service(FakeResponse(status_code=503))
        with pytest.raises(SecurityQueryError):
            service.get_all_user_ids()

    def test_malformed_results(self):
        service, _ = self.service(FakeResponse(payload={"head": {}}))
        with pytest.raises(SecurityQueryError):
            service.get_all_user_ids()


class TestQueryTerms:
    def test_iri_rejects_injection(self):
        with pytest.raises(SecurityQueryError):
            iri("http://x/> . ?s ?p ?o")

    def test_literal_escapes(self):
        assert literal('say "hi"\n') == '"say \\"hi\\"\\n"'
