"""Tests for endpoints, nodes and the mutable graph model."""

import pytest

from reqdef.graph import (
    UNBOUNDED,
    CapacityExceeded,
    DirectionMismatch,
    DuplicateId,
    Edge,
    Endpoint,
    EndpointDirection,
    GraphModel,
    GraphNode,
    NotFound,
    ScopeMismatch,
    SelfLoopNotAllowed,
    scopes_compatible,
)


def out_ep(endpoint_id="out", scope="Number", max_connections=-1):
    return Endpoint(endpoint_id, EndpointDirection.OUTPUT, scope, max_connections=max_connections)


def in_ep(endpoint_id="in", scope="Number", max_connections=-1, required=False):
    return Endpoint(
        endpoint_id, EndpointDirection.INPUT, scope,
        max_connections=max_connections, required=required,
    )


def source(node_id="A", scope="Number"):
    return GraphNode(node_id, "SOURCE", endpoints=[out_ep(scope=scope)])


def sink(node_id="B", scope="Number", max_connections=-1, required=True):
    return GraphNode(
        node_id, "SINK",
        endpoints=[in_ep(scope=scope, max_connections=max_connections, required=required)],
    )


class TestScopes:
    def test_exact_match(self):
        assert scopes_compatible("Sensor", "Sensor")

    @pytest.mark.parametrize("a,b", [
        ("Integer", "Number"),
        ("Number", "Double"),
        ("Long", "Float"),
    ])
    def test_numeric_bucket(self, a, b):
        assert scopes_compatible(a, b)
        assert scopes_compatible(b, a)

    @pytest.mark.parametrize("a,b", [
        ("geo_lat", "geo_lon"),
        ("geo_lat", "Number"),
        ("Date", "Number"),
        ("Sensor", "Integer"),
    ])
    def test_incompatible(self, a, b):
        assert not scopes_compatible(a, b)

    def test_geo_self_match(self):
        assert scopes_compatible("geo_lat", "geo_lat")


class TestEndpoint:
    def test_can_connect_requires_opposite_directions(self):
        assert out_ep().can_connect_to(in_ep())
        assert in_ep().can_connect_to(out_ep())
        assert not out_ep().can_connect_to(out_ep("other"))

    def test_can_connect_requires_compatible_scope(self):
        assert out_ep(scope="Integer").can_connect_to(in_ep(scope="Number"))
        assert not out_ep(scope="Number").can_connect_to(in_ep(scope="geo_lat"))

    def test_unbounded_capacity(self):
        endpoint = out_ep()
        endpoint.attach()
        assert endpoint.remaining_capacity() == UNBOUNDED

    def test_bounded_capacity(self):
        endpoint = in_ep(max_connections=2)
        assert endpoint.remaining_capacity() == 2
        endpoint.attach()
        assert endpoint.remaining_capacity() == 1

    def test_attach_beyond_capacity_is_rejected(self):
        endpoint = in_ep(max_connections=1)
        endpoint.attach()
        with pytest.raises(CapacityExceeded):
            endpoint.attach()
        assert endpoint.connection_count == 1

    def test_detach_below_zero_is_rejected(self):
        endpoint = in_ep()
        with pytest.raises(CapacityExceeded):
            endpoint.detach()
        assert endpoint.connection_count == 0

    def test_label_defaults_to_id(self):
        assert in_ep("VALUE").label == "VALUE"

    def test_from_dict_round_trip_keeps_fields(self):
        endpoint = Endpoint(
            "LAT", EndpointDirection.OUTPUT, "geo_lat", user_data="geo:lat", required=True,
        )
        restored = Endpoint.from_dict(endpoint.to_dict())
        assert restored == endpoint


class TestGraphNode:
    def test_endpoints_keep_insertion_order(self):
        node = GraphNode("n", "FILTER")
        node.add_endpoint(in_ep("first"))
        node.add_endpoint(out_ep("second"))
        node.add_endpoint(in_ep("third"))
        assert [e.id for e in node.endpoints] == ["first", "second", "third"]

    def test_duplicate_endpoint_id(self):
        node = GraphNode("n", "FILTER", endpoints=[in_ep("x")])
        with pytest.raises(DuplicateId):
            node.add_endpoint(out_ep("x"))

    def test_find_endpoint_not_found(self):
        with pytest.raises(NotFound):
            GraphNode("n", "FILTER").find_endpoint("missing")

    def test_type_is_read_only(self):
        node = GraphNode("n", "FILTER")
        with pytest.raises(AttributeError):
            node.type = "SOURCE"

    def test_properties_are_mutable(self):
        node = GraphNode("n", "FILTER", properties={"RADIUS": 1})
        node.properties["RADIUS"] = 5
        assert node.properties == {"RADIUS": 5}


class TestGraphModel:
    def test_add_duplicate_node(self):
        model = GraphModel()
        model.add_node(source("A"))
        with pytest.raises(DuplicateId):
            model.add_node(source("A"))

    def test_remove_missing_node(self):
        with pytest.raises(NotFound):
            GraphModel().remove_node("ghost")

    def test_connect_source_to_sink(self):
        model = GraphModel()
        a = model.add_node(source("A"))
        b = model.add_node(sink("B"))

        edge = model.connect("A", "out", "B", "in")

        assert model.edges == [edge]
        assert a.find_endpoint("out").connection_count == 1
        assert b.find_endpoint("in").connection_count == 1

    def test_connect_missing_endpoint(self):
        model = GraphModel()
        model.add_node(source("A"))
        model.add_node(sink("B"))
        with pytest.raises(NotFound):
            model.connect("A", "out", "B", "nope")
        with pytest.raises(NotFound):
            model.connect("A", "out", "C", "in")

    def test_connect_direction_mismatch(self):
        model = GraphModel()
        model.add_node(source("A"))
        model.add_node(sink("B"))
        with pytest.raises(DirectionMismatch):
            model.connect("B", "in", "A", "out")

    def test_connect_scope_mismatch(self):
        model = GraphModel()
        a = model.add_node(source("A", scope="Number"))
        b = model.add_node(sink("B", scope="geo_lat"))
        with pytest.raises(ScopeMismatch):
            model.connect("A", "out", "B", "in")
        assert model.edges == []
        assert a.find_endpoint("out").connection_count == 0
        assert b.find_endpoint("in").connection_count == 0

    def test_connect_capacity_exceeded(self):
        model = GraphModel()
        model.add_node(source("A1"))
        model.add_node(source("A2"))
        c = model.add_node(sink("C", max_connections=1))

        model.connect("A1", "out", "C", "in")
        with pytest.raises(CapacityExceeded):
            model.connect("A2", "out", "C", "in")

        assert len(model.edges) == 1
        assert c.find_endpoint("in").connection_count == 1
        # the rejected source was not charged
        assert model.get_node("A2").find_endpoint("out").connection_count == 0

    def test_connect_same_pair_twice(self):
        model = GraphModel()
        model.add_node(source("A"))
        model.add_node(sink("B"))
        model.connect("A", "out", "B", "in")
        with pytest.raises(DuplicateId):
            model.connect("A", "out", "B", "in")

    def test_self_loop_rejected_by_default(self):
        model = GraphModel()
        model.add_node(GraphNode("F", "FILTER", endpoints=[in_ep(), out_ep()]))
        with pytest.raises(SelfLoopNotAllowed):
            model.connect("F", "out", "F", "in")

    def test_self_loop_allowed_when_flagged(self):
        model = GraphModel(allow_self_loops=True)
        model.add_node(GraphNode("F", "FILTER", endpoints=[in_ep(), out_ep()]))
        edge = model.connect("F", "out", "F", "in")
        assert edge.is_self_loop

    def test_connect_disconnect_round_trip(self):
        model = GraphModel()
        a = model.add_node(source("A"))
        b = model.add_node(sink("B", max_connections=3))
        before = (a.find_endpoint("out").connection_count, b.find_endpoint("in").connection_count)

        edge = model.connect("A", "out", "B", "in")
        model.disconnect(edge)

        after = (a.find_endpoint("out").connection_count, b.find_endpoint("in").connection_count)
        assert before == after
        assert model.edges == []

    def test_disconnect_unknown_edge(self):
        model = GraphModel()
        model.add_node(source("A"))
        model.add_node(sink("B"))
        with pytest.raises(NotFound):
            model.disconnect(Edge("A", "out", "B", "in"))

    def test_remove_node_cascades_edges(self):
        model = GraphModel()
        a = model.add_node(source("A"))
        model.add_node(sink("B"))
        model.connect("A", "out", "B", "in")

        model.remove_node("B")

        assert "B" not in model
        assert model.edges == []
        assert a.find_endpoint("out").connection_count == 0

    def test_clear_resets_everything(self):
        model = GraphModel()
        a = model.add_node(source("A"))
        b = model.add_node(sink("B"))
        model.connect("A", "out", "B", "in")

        model.clear()

        assert len(model) == 0
        assert model.edges == []
        assert a.find_endpoint("out").connection_count == 0
        assert b.find_endpoint("in").connection_count == 0

    def test_outgoing_edges_follow_endpoint_order(self):
        model = GraphModel()
        model.add_node(GraphNode("S", "SOURCE", endpoints=[out_ep("first"), out_ep("second")]))
        model.add_node(sink("X"))
        model.add_node(sink("Y"))
        late = model.connect("S", "second", "X", "in")
        early = model.connect("S", "first", "Y", "in")

        assert model.outgoing_edges("S") == [early, late]

    def test_edges_of_tracks_connect_and_removal(self):
        model = GraphModel(allow_self_loops=True)
        model.add_node(GraphNode("F", "FILTER", endpoints=[in_ep(), out_ep()]))
        model.add_node(sink("B"))
        loop = model.connect("F", "out", "F", "in")
        edge = model.connect("F", "out", "B", "in")

        assert model.edges_of("F") == [loop, edge]
        assert model.incoming_edges("F") == [loop]

        model.disconnect(loop)
        assert model.edges_of("F") == [edge]

        model.remove_node("B")
        assert model.edges_of("F") == []
        assert model.edges_of("B") == []

    def test_capacity_invariant_holds_under_many_attempts(self):
        model = GraphModel()
        target = model.add_node(sink("T", max_connections=2))
        for i in range(5):
            model.add_node(source(f"S{i}"))
            try:
                model.connect(f"S{i}", "out", "T", "in")
            except CapacityExceeded:
                pass
            endpoint = target.find_endpoint("in")
            assert endpoint.connection_count <= endpoint.max_connections
        assert len(model.edges) == 2

    def test_independent_models_share_nothing(self):
        first, second = GraphModel(), GraphModel()
        first.add_node(source("A"))
        assert "A" not in second
