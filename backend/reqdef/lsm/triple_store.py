"""
Thin HTTP client for the LSM (Linked Stream Middleware) server.

Each call is a single POST whose routing lives in request headers
(`api`, `apiType`, `graphURL`, `clientId`, `token`). Payloads are sent
as JSON. There is no retry or batching; non-OK responses raise
LSMServerError.
"""

import logging
import uuid
from datetime import datetime
from typing import Optional

import requests

from reqdef import config
from reqdef.lsm.errors import LSMServerError
from reqdef.lsm.models import Observation, Sensor

logger = logging.getLogger(__name__)


class LSMTripleStore:
    def __init__(
        self,
        server_host: str = config.LSM_SERVER_HOST,
        session: Optional[requests.Session] = None,
        timeout: float = config.LSM_HTTP_TIMEOUT,
    ):
        if not server_host.endswith("/"):
            server_host += "/"
        self.server_host = server_host
        self.rdf_servlet_url = server_host + "rdfservlet"
        self.object_servlet_url = server_host + "objservlet"
        self.upload_url = server_host + "upload"
        self.session = session or requests.Session()
        self.timeout = timeout

    # ---------- helpers ----------

    @staticmethod
    def _headers(client_id: str, token: str, **extra: Optional[str]) -> dict:
        headers = {"clientId": client_id, "token": token, "Connection": "Keep-Alive"}
        headers.update({k: v for k, v in extra.items() if v is not None})
        return headers

    def _post(self, operation: str, url: str, headers: dict, payload=None, data=None) -> requests.Response:
        response = self.session.post(
            url,
            headers=headers,
            json=payload,
            data=data,
            timeout=self.timeout,
        )
        if response.status_code != 200:
            logger.error("[LSM] %s: server returned non-OK code %s", operation, response.status_code)
            raise LSMServerError(operation, response.status_code, response.text)
        return response

    @staticmethod
    def _first_line(response: requests.Response) -> str:
        text = response.text or ""
        return text.splitlines()[0] if text else ""

    # ---------- sensors ----------

    def sensor_delete(self, sensor_url: str, graph_url: str, client_id: str, token: str) -> str:
        headers = self._headers(client_id, token, api="3", apiType="delete", graphURL=graph_url)
        response = self._post("sensorDelete", self.rdf_servlet_url, headers, {"sensorURL": sensor_url})
        message = self._first_line(response)
        logger.info("[LSM] %s", message)
        return message

    def delete_all_readings(
        self,
        sensor_url: str,
        graph_url: str,
        client_id: str,
        token: str,
        date_operator: Optional[str] = None,
        from_time: Optional[datetime] = None,
        to_time: Optional[datetime] = None,
    ) -> str:
        """Delete a sensor's readings, optionally restricted to a time window."""
        if date_operator is None:
            headers = self._headers(client_id, token, api="4", apiType="delete", graphURL=graph_url)
        else:
            headers = self._headers(
                client_id,
                token,
                api="delete",
                apiType="delete",
                graphURL=graph_url,
                dateOperator=date_operator,
                fromTime=from_time.isoformat() if from_time else None,
                toTime=to_time.isoformat() if to_time else None,
            )
        response = self._post("deleteAllReadings", self.rdf_servlet_url, headers, {"sensorURL": sensor_url})
        return self._first_line(response)

    def get_sensor_by_id(self, sensor_url: str, graph_url: str, client_id: str, token: str) -> Sensor:
        headers = self._headers(client_id, token, api="5", apiType="get", graphURL=graph_url)
        response = self._post("getSensorById", self.rdf_servlet_url, headers, {"sensorURL": sensor_url})
        sensor = Sensor.model_validate(response.json())
        logger.info("[LSM] sensor id returned: %s", sensor.id)
        return sensor

    def sensor_add(self, sensor: Sensor, client_id: str, token: str) -> str:
        if not sensor.id:
            sensor = sensor.model_copy(update={"id": uuid.uuid4().hex})
        headers = self._headers(client_id, token, api="21", apiType="insert")
        self._post("sensorAdd", self.object_servlet_url, headers, sensor.model_dump(mode="json"))
        logger.info("[LSM] sensor id returned: %s", sensor.id)
        return sensor.id

    def sensor_data_update(self, observation: Observation, client_id: str, token: str) -> None:
        headers = self._headers(client_id, token, api="22", apiType="insert")
        self._post("sensorDataUpdate", self.object_servlet_url, headers, observation.model_dump(mode="json"))
        logger.info("[LSM] Sensor data is updated successfully")

    # ---------- triples ----------

    def push_rdf(self, graph_url: str, triples: str, client_id: str, token: str) -> bool:
        headers = self._headers(client_id, token, api="23", apiType="insert", graphURL=graph_url)
        self._post("pushRDF", self.object_servlet_url, headers, {"graphURL": graph_url, "triples": triples})
        return True

    def delete_triples(self, graph_url: str, client_id: str, token: str, triples: Optional[str] = None) -> str:
        """Delete the given triples, or every triple of the graph when `triples` is None."""
        headers = self._headers(client_id, token, api="24", apiType="insert", graphURL=graph_url)
        payload = {"graphURL": graph_url, "triples": triples if triples is not None else "all"}
        response = self._post("deleteTriples", self.object_servlet_url, headers, payload)
        return self._first_line(response)

    def update_triples(
        self,
        graph_url: str,
        new_triple_patterns: str,
        old_triple_patterns: str,
        client_id: str,
        token: str,
    ) -> str:
        headers = self._headers(client_id, token, graphURL=graph_url, project="openiot", operator="delete")
        payload = {"delete": old_triple_patterns, "update": new_triple_patterns}
        response = self._post("updateTriples", self.object_servlet_url, headers, payload)
        logger.debug("[LSM] Server's response: %s", self._first_line(response))
        return self._first_line(response)

    def upload_schema(self, schema_rdf_xml: str, name: str, client_id: str, token: str) -> str:
        headers = self._headers(client_id, token, fileName=name, project="openiot")
        headers["Content-Type"] = "application/rdf+xml"
        response = self._post("uploadSchema", self.upload_url, headers, data=schema_rdf_xml.encode("utf-8"))
        message = self._first_line(response)
        logger.info("[LSM] Server's response: %s", message)
        return message
