"""
Unit tests for FunctionRegistry, ApiFunction and ApiMethod.

Tests cover:
- Blocking and asynchronous catalog loads
- Lookup errors before and after load
- Argument naming and validation
- Binding algorithms onto classes as instance or static methods
"""

import asyncio
import inspect

import pytest

from ee_do import (
    ArgumentError,
    LoadFailure,
    NotInitializedError,
    TransportError,
    UnknownAlgorithmError,
)
from ee_do.proxies import Collection, FeatureCollection, Image, ProxyObject
from ee_do.registry import ApiMethod, FunctionRegistry

from .conftest import MockServer


@pytest.fixture
def registry(transport):
    return FunctionRegistry(transport)


class TestLoading:
    """Tests for load_signatures()."""

    def test_blocking_load(self, registry, catalog):
        assert not registry.loaded

        registry.load_signatures()

        assert registry.loaded
        assert len(registry.all_signatures()) == len(catalog)
        assert "Image.select" in registry

    def test_blocking_load_failure(self, registry, server):
        server.fail_with = "catalog unavailable"

        with pytest.raises(LoadFailure) as exc_info:
            registry.load_signatures()

        assert isinstance(exc_info.value.__cause__, TransportError)
        assert not registry.loaded

    def test_malformed_catalog(self, transport):
        transport._http_transport = MockServer(["Image.select"]).transport
        registry = FunctionRegistry(transport)

        with pytest.raises(LoadFailure, match="expected an object"):
            registry.load_signatures()

    def test_malformed_signature(self, transport):
        transport._http_transport = MockServer({"Image.select": {"args": [{"type": "Image"}]}}).transport
        registry = FunctionRegistry(transport)

        with pytest.raises(LoadFailure, match="Image.select"):
            registry.load_signatures()

    def test_async_load_requires_loop(self, registry):
        with pytest.raises(RuntimeError):
            registry.load_signatures(on_success=lambda: None)

    @pytest.mark.asyncio
    async def test_async_load(self, registry):
        done = asyncio.Event()

        registry.load_signatures(on_success=done.set)
        assert not registry.loaded

        await asyncio.wait_for(done.wait(), timeout=5)
        assert registry.loaded

    @pytest.mark.asyncio
    async def test_async_load_failure(self, registry, server):
        server.fail_with = "catalog unavailable"
        errors = []

        registry.load_signatures(on_success=lambda: None, on_error=errors.append)
        await asyncio.gather(*registry._pending)

        assert len(errors) == 1
        assert isinstance(errors[0], LoadFailure)
        assert isinstance(errors[0].__cause__, TransportError)

    @pytest.mark.asyncio
    async def test_async_load_after_reset_is_discarded(self, registry):
        calls = []

        registry.load_signatures(on_success=lambda: calls.append("ok"), on_error=calls.append)
        registry.reset()
        await asyncio.gather(*registry._pending)

        assert calls == []
        assert not registry.loaded
        with pytest.raises(NotInitializedError):
            registry.lookup("Image.select")

    @pytest.mark.asyncio
    async def test_async_load_superseded_by_blocking_load(self, registry):
        calls = []

        registry.load_signatures(on_success=lambda: calls.append("ok"), on_error=calls.append)
        registry.load_signatures()
        await asyncio.gather(*registry._pending)

        assert calls == []
        assert registry.loaded

    def test_reset_forgets_catalog(self, registry):
        registry.load_signatures()

        registry.reset()

        assert not registry.loaded
        assert "Image.select" not in registry


class TestLookup:
    """Tests for lookup() and building calls."""

    def test_lookup_before_load(self, registry):
        with pytest.raises(NotInitializedError):
            registry.lookup("Image.select")

    def test_lookup_unknown(self, registry):
        registry.load_signatures()

        with pytest.raises(UnknownAlgorithmError) as exc_info:
            registry.lookup("Image.nope")

        assert exc_info.value.name == "Image.nope"

    def test_build_apply(self, ready_context):
        image = Image(1)

        selected = ready_context.functions.build_apply(
            "Image.select", {"input": image, "bandSelectors": ["B1"]}
        )

        assert isinstance(selected, Image)
        assert selected.args == {"input": image, "bandSelectors": ["B1"]}

    def test_too_many_arguments(self, ready_context):
        with pytest.raises(ArgumentError, match="Too many"):
            ready_context.functions.build_call("Terrain", 1, 2)

    def test_missing_required_argument(self, ready_context):
        with pytest.raises(ArgumentError, match="bandSelectors") as exc_info:
            ready_context.functions.build_apply("Image.select", {"input": Image(1)})

        assert exc_info.value.algorithm == "Image.select"

    def test_unrecognized_argument(self, ready_context):
        with pytest.raises(ArgumentError, match="bogus"):
            ready_context.functions.build_apply("Terrain", {"input": 1, "bogus": 2})

    def test_none_is_absent(self, ready_context):
        image = ready_context.functions.build_call("Image.load", "LANDSAT/scene", None)

        assert "version" not in image.args

    def test_describe(self, ready_context):
        func = ready_context.functions.lookup("Landsat.SimpleComposite")

        text = func.describe()

        assert text.startswith("Landsat.SimpleComposite(collection, percentile) -> Image")
        assert "percentile (Integer, optional)" in text
        assert str(func) == text

    def test_functions_compare_by_signature(self, ready_context):
        func = ready_context.functions.lookup("Terrain")

        assert func == ready_context.functions.lookup("Terrain")
        assert func != ready_context.functions.lookup("Image.add")
        assert hash(func) == hash("Terrain")


class TestImportApi:
    """Tests for binding algorithms onto classes."""

    def test_instance_and_static_methods(self, ready_context):
        assert inspect.getattr_static(Image, "select").is_instance
        assert not inspect.getattr_static(Image, "constant").is_instance
        assert not inspect.getattr_static(Image, "load").is_instance

    def test_collection_methods_accept_any_collection(self, ready_context):
        """FeatureCollection-typed first arguments bind as instance methods on Collection."""
        assert inspect.getattr_static(Collection, "geometry").is_instance
        assert not inspect.getattr_static(Collection, "loadTable").is_instance

    def test_prefixed_namespace(self, ready_context):
        method = inspect.getattr_static(Image, "focal_max")

        assert isinstance(method, ApiMethod)
        assert method.func.name == "Window.max"

    def test_instance_method_receives_self(self, ready_context):
        image = Image(1)

        total = image.add(2)

        assert total.func.name == "Image.add"
        assert total.args == {"image1": image, "image2": Image(2)}

    def test_static_method_on_instance_ignores_self(self, ready_context):
        image = Image(1)

        constant = image.constant(3)

        assert constant.args == {"value": 3}

    def test_inherited_method(self, ready_context):
        table = FeatureCollection("users/someone/table")

        filtered = table.filter({"property": "a"})

        assert filtered.func.name == "Collection.filter"
        assert filtered.args["collection"] is table

    def test_method_docstring(self, ready_context):
        assert Image.select.__doc__.startswith("Image.select(input, bandSelectors)")

    def test_existing_attributes_are_kept(self, ready_context):
        class Custom(ProxyObject):
            type_name = "Image"

            def select(self):
                return "mine"

        bound = ready_context.functions.import_api(Custom, "Image", "Image")

        assert "select" not in bound
        assert "add" in bound
        assert Custom.__dict__["select"](None) == "mine"

        ready_context.functions.clear_api(Custom)

        assert "add" not in Custom.__dict__
        assert "select" in Custom.__dict__

    def test_inherited_attributes_are_kept(self, transport):
        """A catalog member named like an inherited attribute is not bound."""
        transport._http_transport = MockServer(
            {"Image.reset": {"returns": "Image", "args": [{"name": "input", "type": "Image"}]}}
        ).transport
        registry = FunctionRegistry(transport)
        registry.load_signatures()

        class Custom(ProxyObject):
            type_name = "Image"

        bound = registry.import_api(Custom, "Image", "Image")

        assert bound == []
        assert "reset" not in Custom.__dict__

    def test_bound_names_leave_unbound_set(self, ready_context):
        unbound = ready_context.functions.unbound_signatures()

        assert "Image.select" not in unbound
        assert "Window.max" not in unbound
        assert "Terrain" in unbound
        assert "Landsat.SimpleComposite" in unbound
