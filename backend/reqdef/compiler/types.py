import json
from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass
class EdgeReference:
    source_endpoint: str
    target_node: str
    target_endpoint: str

    def to_dict(self) -> dict:
        return {
            "source_endpoint": self.source_endpoint,
            "target_node": self.target_node,
            "target_endpoint": self.target_endpoint,
        }


@dataclass
class Statement:
    node_id: str
    node_type: str
    label: str
    properties: Dict[str, Any] = field(default_factory=dict)
    endpoints: List[dict] = field(default_factory=list)
    outputs: List[EdgeReference] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "node_id": self.node_id,
            "node_type": self.node_type,
            "label": self.label,
            "properties": dict(self.properties),
            "endpoints": [dict(e) for e in self.endpoints],
            "outputs": [o.to_dict() for o in self.outputs],
        }


@dataclass
class Specification:
    """Declarative description of a validated application graph."""
    name: str = ""
    description: str = ""
    statements: List[Statement] = field(default_factory=list)

    @property
    def node_ids(self) -> List[str]:
        return [s.node_id for s in self.statements]

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "description": self.description,
            "statements": [s.to_dict() for s in self.statements],
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), sort_keys=True, indent=2, default=str)

    def render(self) -> str:
        """Line-oriented rendering shown in the design console."""
        lines = [f"APPLICATION {_quote(self.name)}"]
        if self.description:
            lines.append(f"DESCRIPTION {_quote(self.description)}")

        for statement in self.statements:
            lines.append("")
            lines.append(
                f"NODE {statement.node_id} {statement.node_type} {_quote(statement.label)}"
            )
            for key in sorted(statement.properties):
                value = json.dumps(statement.properties[key], sort_keys=True, default=str)
                lines.append(f"  SET {key} = {value}")
            for ref in statement.outputs:
                lines.append(
                    f"  LINK {ref.source_endpoint} -> {ref.target_node}.{ref.target_endpoint}"
                )
            lines.append("END")

        return "\n".join(lines) + "\n"


def _quote(text: str) -> str:
    return json.dumps(text or "")
