"""Tests for resource discovery over a controllers directory."""

import logging
from types import SimpleNamespace

import pytest

from restforge.actions import DeleteAction, ReadAction, SearchAction
from restforge.discovery import (
    ResourceController,
    RouteTable,
    discover,
    load_resource,
)
from restforge.discovery.routes import specificity
from restforge.errors import ConfigurationError

from conftest import write_action

CUSTOM_STATS = '''
verb = "GET"
path = "/stats"

def handle(self, context):
    return context.envelope.set_data({"resource": self.resource})
'''


class TestDiscover:
    def test_two_resources_expose_only_their_kinds(self, controllers):
        write_action(controllers, "Alpha", "Search")
        write_action(controllers, "Alpha", "Delete")
        write_action(controllers, "Beta", "Read")

        resources = discover(controllers)

        assert [r.name for r in resources] == ["alpha", "beta"]
        alpha, beta = resources
        assert alpha.kinds == ["Delete", "Search"]
        assert issubclass(alpha.actions["Search"], SearchAction)
        assert issubclass(alpha.actions["Delete"], DeleteAction)
        assert beta.kinds == ["Read"]
        assert issubclass(beta.actions["Read"], ReadAction)

    def test_routes_per_resource(self, controllers):
        write_action(controllers, "Alpha", "Search")
        write_action(controllers, "Alpha", "Delete")

        (alpha,) = discover(controllers)

        assert sorted(alpha.routes()) == [
            ("DELETE", "/alpha/{id}", "AlphaDeleteAction"),
            ("GET", "/alpha", "AlphaSearchAction"),
        ]

    def test_stray_files_and_helpers_ignored(self, controllers):
        write_action(controllers, "Alpha", "Search")
        (controllers / "README.md").write_text("not a resource")
        (controllers / "Alpha" / "helpers.py").write_text("raise RuntimeError('never imported')\n")
        (controllers / "Alpha" / "notes.txt").write_text("ignored")
        (controllers / "__pycache__").mkdir()
        (controllers / ".hidden").mkdir()

        resources = discover(controllers)

        assert [r.name for r in resources] == ["alpha"]

    def test_empty_resource_directory_skipped_with_warning(self, controllers, caplog):
        write_action(controllers, "Alpha", "Search")
        (controllers / "Empty").mkdir()

        with caplog.at_level(logging.WARNING, logger="restforge.discovery.scanner"):
            resources = discover(controllers)

        assert [r.name for r in resources] == ["alpha"]
        assert "no action files found" in caplog.text

    def test_invalid_directory_name_skipped_with_warning(self, controllers, caplog):
        write_action(controllers, "Alpha", "Search")
        (controllers / "9lives").mkdir()

        with caplog.at_level(logging.WARNING):
            resources = discover(controllers)

        assert len(resources) == 1
        assert "not a valid resource name" in caplog.text

    def test_empty_root_yields_nothing(self, controllers):
        assert discover(controllers) == []

    def test_table_defaults_and_override(self, controllers):
        write_action(controllers, "OrderItem", "Search", table="order_item")
        (resource,) = discover(controllers)
        assert resource.name == "orderitem"
        assert resource.actions["Search"].table == "order_item"


class TestDiscoveryErrors:
    def test_missing_root_is_fatal(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            discover(tmp_path / "missing")

    def test_root_that_is_a_file_is_fatal(self, tmp_path):
        path = tmp_path / "controllers"
        path.write_text("")
        with pytest.raises(ConfigurationError):
            discover(path)

    def test_colliding_routes_across_resources(self, controllers):
        write_action(controllers, "Alpha", "Stats", base="Action", body=CUSTOM_STATS)
        write_action(controllers, "Beta", "Stats", base="Action", body=CUSTOM_STATS)

        with pytest.raises(ConfigurationError, match="GET /stats"):
            discover(controllers)

    def test_case_insensitive_duplicate_resource(self, controllers):
        write_action(controllers, "Widget", "Search")
        write_action(controllers, "WIDGET", "Read")

        with pytest.raises(ConfigurationError, match="Duplicate resource 'widget'"):
            discover(controllers)

    def test_wrong_base_class_for_kind(self, controllers):
        write_action(controllers, "Alpha", "Delete", base="ReadAction")
        with pytest.raises(ConfigurationError, match="subclass of DeleteAction"):
            discover(controllers)

    def test_custom_action_must_declare_verb_and_path(self, controllers):
        write_action(controllers, "Alpha", "Archive", base="Action")
        with pytest.raises(ConfigurationError, match="must declare verb and path"):
            discover(controllers)

    def test_missing_class_is_fatal(self, controllers):
        directory = controllers / "Alpha"
        directory.mkdir()
        (directory / "AlphaSearchAction.py").write_text("x = 1\n")
        with pytest.raises(ConfigurationError, match="does not define class AlphaSearchAction"):
            discover(controllers)

    def test_syntax_error_is_fatal(self, controllers):
        directory = controllers / "Alpha"
        directory.mkdir()
        (directory / "AlphaSearchAction.py").write_text("class AlphaSearchAction(\n")
        with pytest.raises(ConfigurationError, match="Syntax error"):
            discover(controllers)

    def test_import_error_is_fatal(self, controllers):
        directory = controllers / "Alpha"
        directory.mkdir()
        (directory / "AlphaSearchAction.py").write_text("import not_a_real_module_xyz\n")
        with pytest.raises(ConfigurationError, match="ModuleNotFoundError"):
            discover(controllers)


class TestControllers:
    def test_custom_controller_class_is_used(self, controllers):
        write_action(controllers, "Alpha", "Search")
        (controllers / "Alpha" / "AlphaController.py").write_text(
            "from restforge.discovery import ResourceController\n\n\n"
            "class AlphaController(ResourceController):\n"
            "    def register(self, group):\n"
            "        for action in reversed(self.actions):\n"
            "            group.add(action)\n"
        )

        resource = load_resource(controllers / "Alpha")

        assert resource.controller_class.__name__ == "AlphaController"
        assert issubclass(resource.controller_class, ResourceController)

    def test_controller_with_wrong_base_is_fatal(self, controllers):
        write_action(controllers, "Alpha", "Search")
        (controllers / "Alpha" / "AlphaController.py").write_text(
            "class AlphaController:\n    pass\n"
        )
        with pytest.raises(ConfigurationError, match="subclass of ResourceController"):
            discover(controllers)

    def test_build_binds_gateways_by_table(self, controllers):
        write_action(controllers, "Alpha", "Search", table="alpha_view")
        write_action(controllers, "Alpha", "Delete")
        (resource,) = discover(controllers)

        requested = []

        def gateway_for(table):
            requested.append(table)
            return SimpleNamespace(key_name="id")

        controller = ResourceController.build(resource, gateway_for)

        assert sorted(requested) == ["alpha", "alpha_view"]
        assert {a.resource for a in controller.actions} == {"alpha"}

    def test_keyed_action_on_keyless_table_is_fatal(self, controllers):
        write_action(controllers, "Alpha", "Search", table="alpha_view")
        write_action(controllers, "Alpha", "Read", table="alpha_view")
        (resource,) = discover(controllers)

        with pytest.raises(ConfigurationError, match="AlphaReadAction.*alpha_view"):
            ResourceController.build(resource, lambda table: SimpleNamespace(key_name=None))

    def test_keyless_table_serves_unkeyed_actions(self, controllers):
        write_action(controllers, "Alpha", "Search", table="alpha_view")
        (resource,) = discover(controllers)

        controller = ResourceController.build(resource, lambda table: SimpleNamespace(key_name=None))

        assert [type(a).__name__ for a in controller.actions] == ["AlphaSearchAction"]

    def test_register_adds_every_action(self, controllers):
        write_action(controllers, "Alpha", "Search")
        write_action(controllers, "Alpha", "Read")
        (resource,) = discover(controllers)
        controller = ResourceController.build(resource, lambda table: SimpleNamespace(key_name="id"))

        class Group:
            def __init__(self):
                self.added = []

            def add(self, action):
                self.added.append(type(action).__name__)

        group = Group()
        controller.register(group)
        assert sorted(group.added) == ["AlphaReadAction", "AlphaSearchAction"]


class TestRouteTable:
    def test_claims_are_unique(self):
        table = RouteTable()
        table.claim("get", "/v1/a", "A")
        assert ("GET", "/v1/a") in table
        with pytest.raises(ConfigurationError, match="claimed by both A and B"):
            table.claim("GET", "/v1/a", "B")

    def test_same_path_different_verbs(self):
        table = RouteTable()
        table.claim("GET", "/v1/a/{id}", "Read")
        table.claim("DELETE", "/v1/a/{id}", "Delete")
        assert len(table) == 2
        assert [c.owner for c in table] == ["Read", "Delete"]

    def test_literal_segment_may_refine_parameter(self):
        table = RouteTable()
        table.claim("GET", "/v1/a/{id}", "Read")
        table.claim("GET", "/v1/a/stats", "Stats")
        table.claim("GET", "/v1/b/{id}", "OtherRead")
        assert len(table) == 3

    def test_renamed_parameter_is_same_route(self):
        table = RouteTable()
        table.claim("GET", "/v1/a/{id}", "Read")
        with pytest.raises(ConfigurationError, match="overlaps /v1/a/{id}"):
            table.claim("GET", "/v1/a/{key}", "Lookup")

    def test_ambiguous_overlap_is_fatal(self):
        table = RouteTable()
        table.claim("GET", "/v1/a/{id}/history", "History")
        with pytest.raises(ConfigurationError, match="claimed by both History and Latest"):
            table.claim("GET", "/v1/a/latest/{field}", "Latest")

    def test_specificity_orders_literals_first(self):
        paths = ["/v1/a/{id}", "/v1/a/stats", "/v1/{x}/stats"]
        assert sorted(paths, key=specificity) == ["/v1/a/stats", "/v1/a/{id}", "/v1/{x}/stats"]


class TestLoader:
    def test_relative_import_inside_resource_directory(self, controllers):
        write_action(controllers, "Alpha", "Search", body="from .shared import LIMIT")
        (controllers / "Alpha" / "shared.py").write_text("LIMIT = 7\n")

        (alpha,) = discover(controllers)

        assert alpha.actions["Search"].LIMIT == 7

    def test_same_resource_name_in_another_root(self, controllers, tmp_path):
        write_action(controllers, "Alpha", "Search", body="from .shared import LIMIT")
        (controllers / "Alpha" / "shared.py").write_text("LIMIT = 7\n")
        discover(controllers)

        other = tmp_path / "other"
        write_action(other, "Alpha", "Search", body="from .shared import LIMIT")
        (other / "Alpha").joinpath("shared.py").write_text("LIMIT = 9\n")

        (alpha,) = discover(other)

        assert alpha.actions["Search"].LIMIT == 9
