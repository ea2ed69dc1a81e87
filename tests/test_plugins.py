import importlib
from unittest.mock import patch

import pytest

from drydock import Container, Stateful, Stateless, plugin
from drydock.exceptions import PluginDependencyMissing, PluginNotFoundError


class Greeting:
    def greet(self):
        return f"hello from {self.name}"


class Farewell:
    def bye(self):
        return "bye"


def prefixed(prefix="hi"):
    class Prefixed:
        def say(self, what):
            return f"{prefix} {what}"
    return Prefixed


# --- Registration ---

def test_register_bare_class_is_stateless(plugins):
    p = plugins.register("greeting", Greeting)
    assert p.behavior == Stateless(Greeting)
    assert "greeting" in plugins


def test_last_registration_wins(plugins, container):
    plugins.register("greeting", Greeting)
    plugins.register("greeting", Farewell)
    container.use("greeting")
    assert container.bye() == "bye"
    assert not hasattr(container, "greet")


def test_register_rejects_unknown_behavior(plugins):
    with pytest.raises(TypeError):
        plugins.register("bad", object())


def test_plugin_decorator_registers_on_default_registry(plugins, container):
    @plugin("shouting", dependencies=("json",))
    class Shouting:
        def shout(self, what):
            return what.upper()

    assert plugins.get("shouting").dependencies == ("json",)
    assert container.use("shouting").shout("hey") == "HEY"


# --- Enabling ---

def test_use_applies_stateless_behavior_and_ignores_options(plugins, container):
    plugins.register("greeting", Stateless(Greeting))
    container.use("greeting", unused=True)
    assert container.greet() == "hello from test"
    assert container.enabled_plugins == ("greeting",)


def test_use_builds_stateful_behavior_from_options(plugins, container):
    plugins.register("prefixed", Stateful(prefixed))
    container.use("prefixed", prefix="yo")
    assert container.say("there") == "yo there"


def test_stateful_instances_are_independent(plugins, loader):
    plugins.register("prefixed", Stateful(prefixed))
    a = Container("a", loader=loader, plugins=plugins).use("prefixed", prefix="A")
    b = Container("b", loader=loader, plugins=plugins).use("prefixed")
    assert (a.say("x"), b.say("x")) == ("A x", "hi x")


def test_use_is_idempotent(plugins, container):
    runs = []
    plugins.register("greeting", Greeting, lambda c: runs.append(c))

    container.use("greeting")
    cls_after_first = type(container)
    container.use("greeting", other="opts")

    assert runs == [container]
    assert type(container) is cls_after_first
    assert container.enabled_plugins == ("greeting",)


def test_block_runs_in_container_context(plugins, container):
    plugins.register("seeded", Greeting, lambda c: c.register("seed", 42))
    container.use("seeded")
    assert container["seed"] == 42


def test_other_containers_are_not_extended(plugins, container, loader):
    plugins.register("greeting", Greeting)
    other = Container("other", loader=loader, plugins=plugins)
    container.use("greeting")
    assert not hasattr(other, "greet")
    assert type(other) is Container


def test_unknown_plugin(container):
    with pytest.raises(PluginNotFoundError, match="nope"):
        container.use("nope")


def test_extended_container_keeps_its_class_name(plugins, container):
    plugins.register("greeting", Greeting)
    container.use("greeting")
    assert type(container).__name__ == "Container"
    assert isinstance(container, Container)
    assert isinstance(container, Greeting)


# --- Dependencies ---

def test_missing_dependency_aborts_enabling(plugins, container):
    plugins.register("needy", Stateless(Greeting, ("drydock_no_such_module_xyz",)))

    with pytest.raises(PluginDependencyMissing) as exc:
        container.use("needy")

    assert exc.value.plugin == "needy"
    assert "drydock_no_such_module_xyz" in exc.value.cause
    assert "needy" in str(exc.value)
    assert container.enabled_plugins == ()
    assert not hasattr(container, "greet")
    assert plugins.loaded_dependencies == ()


def test_dependencies_are_loaded_once_per_process(plugins, loader):
    plugins.register("jsonish", Stateless(Greeting, ("json",)))
    a = Container("a", loader=loader, plugins=plugins)
    b = Container("b", loader=loader, plugins=plugins)

    with patch("drydock.plugins.importlib.import_module", wraps=importlib.import_module) as imp:
        a.use("jsonish")
        b.use("jsonish")

    imp.assert_called_once_with("json")
    assert plugins.loaded_dependencies == ("json",)


def test_failing_block_leaves_container_unchanged(plugins, container):
    def explode(c):
        c.use("farewell")
        raise RuntimeError("block failed")

    plugins.register("farewell", Farewell)
    plugins.register("greeting", Greeting, explode)
    original = type(container)

    with pytest.raises(RuntimeError, match="block failed"):
        container.use("greeting")

    assert type(container) is original
    assert container.enabled_plugins == ()
    assert not hasattr(container, "greet")
    assert not hasattr(container, "bye")


# --- Derivation ---

def test_derived_container_inherits_enabled_plugins(plugins, container):
    plugins.register("greeting", Greeting)
    plugins.register("farewell", Farewell)
    container.use("greeting")

    child = container.derive("child")
    assert child.enabled_plugins == ("greeting",)
    assert child.greet() == "hello from child"

    child.use("farewell")
    assert child.enabled_plugins == ("greeting", "farewell")
    assert container.enabled_plugins == ("greeting",)
    assert not hasattr(container, "bye")


def test_parent_changes_after_derivation_do_not_leak(plugins, container):
    plugins.register("greeting", Greeting)
    child = container.derive()
    container.use("greeting")
    assert child.enabled_plugins == ()
    assert not hasattr(child, "greet")


def test_derived_container_replays_plugin_blocks(plugins, container):
    plugins.register("seeded", Greeting, lambda c: c.register("seed", c.name))
    container.use("seeded")

    child = container.derive("child")

    assert child["seed"] == "child"
    assert container["seed"] == "test"
    child.use("seeded")
    assert child.enabled_plugins == ("seeded",)


def test_derived_container_copies_settings_but_not_state(container, app):
    app.component("core/mailer.py", "Mailer")
    container.resolve("mailer")

    child = container.derive()

    assert child.config.root == container.config.root
    assert child.config is not container.config
    assert not child.configured
    assert child.keys() == ()
    child.configure()
    assert type(child["mailer"]).__name__ == "Mailer"
