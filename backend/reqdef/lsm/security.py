"""
Read side of OpenIoT security management.

Resolves users, roles, permissions and registered services by issuing
SPARQL SELECT queries against the OAuth graph held in LSM.
"""

import logging
import re
from typing import Dict, List, Optional

import requests
from pydantic import BaseModel, Field

from reqdef import config
from reqdef.lsm.errors import SecurityQueryError

logger = logging.getLogger(__name__)

RDF_TYPE = "http://www.w3.org/1999/02/22-rdf-syntax-ns#type"
FOAF_NICK = "http://xmlns.com/foaf/0.1/nick"
FOAF_MBOX = "http://xmlns.com/foaf/0.1/mbox"
OPENIOT_NS = "http://openiot.eu/ontology/ns/"

FILTERED_SERVICES = frozenset({"Service Manager", "HTTP"})

_IRI_FORBIDDEN = re.compile(r'[<>"{}|^`\\\s]')


class User(BaseModel):
    username: str
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    roles: List[str] = Field(default_factory=list)


class RegisteredService(BaseModel):
    id: int
    name: Optional[str] = None


def iri(value: str) -> str:
    if not value or _IRI_FORBIDDEN.search(value):
        raise SecurityQueryError(f"Invalid IRI: {value!r}")
    return f"<{value}>"


def literal(value: str) -> str:
    escaped = (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
    )
    return f'"{escaped}"'


class LSMSecurityManagerService:
    def __init__(
        self,
        sparql_endpoint: str = config.LSM_SPARQL_ENDPOINT,
        graph_url: str = config.LSM_OAUTH_GRAPH_URL,
        instances_prefix: str = config.OPENIOT_RESOURCE_NAMESPACE,
        session: Optional[requests.Session] = None,
        timeout: float = config.LSM_HTTP_TIMEOUT,
    ):
        self.sparql_endpoint = sparql_endpoint
        self.graph_url = graph_url
        self.instances_prefix = instances_prefix
        self.session = session or requests.Session()
        self.timeout = timeout

    # ---------- helpers ----------

    def select(self, where: str, variables: str) -> List[Dict[str, str]]:
        """Run `select <variables> from <graph> where { <where> }` and flatten the bindings."""
        sparql = f"select {variables} from {iri(self.graph_url)}\nwhere {{ {where} }}"
        try:
            response = self.session.get(
                self.sparql_endpoint,
                params={"query": sparql},
                headers={"Accept": "application/sparql-results+json"},
                timeout=self.timeout,
            )
            response.raise_for_status()
            bindings = response.json()["results"]["bindings"]
        except (requests.RequestException, KeyError, ValueError) as exc:
            logger.error("[SECURITY] SPARQL query failed: %s", exc)
            raise SecurityQueryError(f"SPARQL query failed: {exc}") from exc

        return [
            {name: cell.get("value", "") for name, cell in row.items()}
            for row in bindings
        ]

    def _user_url(self, username: str):
        user_prefix = self.instances_prefix + "user/"
        if user_prefix in username:
            return username, username[username.rindex("/") + 1:]
        return user_prefix + username, username

    # ---------- users ----------

    def get_user_by_username(self, username: str) -> Optional[User]:
        user_url, username = self._user_url(username)
        user = iri(user_url)
        rows = self.select(
            f"{user} {iri(RDF_TYPE)} {iri(OPENIOT_NS + 'User')}. "
            f"OPTIONAL{{{user} {iri(FOAF_NICK)} ?nick.}} "
            f"OPTIONAL{{{user} {iri(FOAF_MBOX)} ?mbox.}} "
            f"{user} {iri(OPENIOT_NS + 'password')} ?pass.",
            "?nick ?mbox ?pass",
        )
        if not rows:
            return None
        row = rows[0]
        return User(
            username=username,
            name=row.get("nick"),
            email=row.get("mbox"),
            password=row.get("pass"),
            roles=self.get_user_roles(username),
        )

    def get_user_roles(self, username: str) -> List[str]:
        user_url, _ = self._user_url(username)
        rows = self.select(
            f"?roleId {iri(RDF_TYPE)} {iri(OPENIOT_NS + 'ClientRole')}. "
            f"{iri(user_url)} {iri(OPENIOT_NS + 'role')} ?roleId.",
            "?roleId",
        )
        return [row["roleId"] for row in rows]

    def get_user_id_by_email(self, email: str) -> Optional[str]:
        rows = self.select(
            f"?userId {iri(RDF_TYPE)} {iri(OPENIOT_NS + 'User')}. "
            f"?userId {iri(FOAF_MBOX)} {literal(email)}",
            "?userId",
        )
        return rows[-1]["userId"] if rows else None

    def get_all_user_ids(self) -> List[str]:
        rows = self.select(f"?userId {iri(RDF_TYPE)} {iri(OPENIOT_NS + 'User')}", "?userId")
        logger.debug("[SECURITY] %d users retrieved.", len(rows))
        return [row["userId"] for row in rows]

    # ---------- roles / permissions ----------

    def get_all_role_ids(self) -> List[str]:
        rows = self.select(f"?roleId {iri(RDF_TYPE)} {iri(OPENIOT_NS + 'ClientRole')}", "?roleId")
        return [row["roleId"] for row in rows]

    def get_role_user_ids(self, role_id: str) -> List[str]:
        role_url = self.instances_prefix + "role/" + role_id
        rows = self.select(f"?userId {iri(OPENIOT_NS + 'role')} {iri(role_url)}", "?userId")
        return [row["userId"] for row in rows]

    def get_all_permission_ids(self) -> List[str]:
        rows = self.select(
            f"?permId {iri(RDF_TYPE)} {iri(OPENIOT_NS + 'ClientPermission')}", "?permId"
        )
        return [row["permId"] for row in rows]

    # ---------- registered services ----------

    def get_all_registered_services(self) -> List[RegisteredService]:
        rows = self.select(
            f"?service {iri(RDF_TYPE)} {iri(OPENIOT_NS + 'CloudService')}. "
            f"OPTIONAL{{?service {iri(OPENIOT_NS + 'serviceName')} ?name.}}",
            "?service ?name",
        )
        services = []
        for row in rows:
            service_url = row["service"]
            try:
                service_id = int(service_url[service_url.rindex("/") + 1:])
            except ValueError as exc:
                raise SecurityQueryError(f"Unexpected service IRI {service_url!r}") from exc
            services.append(RegisteredService(id=service_id, name=row.get("name")))
        return services

    def get_all_registered_service_ids(self) -> List[int]:
        return [service.id for service in self.get_all_registered_services()]

    def get_all_services(self) -> List[RegisteredService]:
        """Registered services minus the platform-internal ones."""
        return [
            service for service in self.get_all_registered_services()
            if service.name not in FILTERED_SERVICES
        ]

    def next_service_id(self) -> int:
        """Id for a new registered service: one past the highest id in use, starting at 1."""
        return max(self.get_all_registered_service_ids(), default=0) + 1
