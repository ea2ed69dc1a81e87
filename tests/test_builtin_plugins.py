import logging

import pytest

from drydock import Container
from drydock.exceptions import ConfigurationError
from drydock.plugins.dependency_graph import render_dot
from drydock.plugins.notifications import Event, Notifications


# --- env ---

def test_env_prefers_configured_env(container):
    container.config.env = "staging"
    container.use("env", inferrer=lambda: "inferred")
    assert container.env == "staging"


def test_env_uses_inferrer_when_unset(container):
    container.use("env", inferrer=lambda: "inferred")
    assert container.env == "inferred"


def test_env_default_inferrer(container, monkeypatch):
    monkeypatch.delenv("APP_ENV", raising=False)
    container.use("env")
    assert container.env == "development"
    monkeypatch.setenv("APP_ENV", "production")
    assert container.env == "production"


# --- logging ---

def test_logging_registers_logger(loader, plugins, app):
    c = Container("billing", loader=loader, plugins=plugins).configure(root=app.root, log_level=logging.DEBUG)
    c.use("logging")

    assert c.has("logger")
    assert c.logger is c["logger"]
    assert c.logger.name == "drydock.billing"
    assert c.logger.level == logging.DEBUG


def test_logging_keeps_existing_logger(container):
    custom = logging.getLogger("custom")
    container.register("logger", custom)
    container.use("logging")
    assert container.logger is custom


# --- notifications ---

def test_notifications_hub_is_registered(container):
    container.use("notifications")
    assert isinstance(container.notifications, Notifications)
    assert container["notifications"] is container.notifications


def test_publish_and_subscribe():
    hub = Notifications().register_event("user.created", source="signup")
    got = []
    hub.subscribe("user.created", got.append)

    @hub.subscribe("user.created", where={"admin": True})
    def admins_only(event):
        got.append(("admin", event["id"]))

    hub.publish("user.created", id=1)
    hub.publish("user.created", id=2, admin=True)

    assert got[0] == Event("user.created", {"source": "signup", "id": 1})
    assert got[1].payload["id"] == 2
    assert got[2] == ("admin", 2)
    assert len(got) == 3


def test_unregistered_events_are_rejected():
    hub = Notifications()
    assert not hub.has_event("nope")
    with pytest.raises(ConfigurationError):
        hub.publish("nope")
    with pytest.raises(ConfigurationError):
        hub.subscribe("nope", print)


def test_instrument_publishes_with_time():
    hub = Notifications().register_event("work")
    got = []
    hub.subscribe("work", got.append)

    with hub.instrument("work", job="x") as payload:
        payload["result"] = "done"

    assert got[0]["job"] == "x"
    assert got[0]["result"] == "done"
    assert got[0]["time"] >= 0


# --- monitoring ---

CALC = """
class Calculator:
    def add(self, a, b):
        return a + b

    def mul(self, a, b):
        return a * b

    def _hidden(self):
        return "hidden"
"""


def test_monitoring_enables_notifications(container):
    container.use("monitoring")
    assert container.enabled_plugins == ("notifications", "monitoring")
    assert container.notifications.has_event("monitoring")


def test_monitor_publishes_method_calls(container, app):
    app.write("core/calculator.py", CALC)
    container.use("monitoring")
    calls = []

    calc = container.monitor("calculator", callback=calls.append)

    assert calc.add(2, 3) == 5
    assert calc.mul(2, 3) == 6
    assert calc._hidden() == "hidden"
    assert [(e["target"], e["method"], e["args"]) for e in calls] == [
        ("calculator", "add", (2, 3)),
        ("calculator", "mul", (2, 3)),
    ]
    assert all(e["time"] >= 0 for e in calls)


def test_monitor_selected_methods(container, app):
    app.write("core/calculator.py", CALC)
    container.use("monitoring")
    calls = []
    container.notifications.subscribe("monitoring", calls.append)

    container.monitor("calculator", methods=["mul"])
    container["calculator"].add(1, 1)
    container["calculator"].mul(1, 1)

    assert [e["method"] for e in calls] == ["mul"]


# --- dependency_graph ---

def test_dependency_graph_from_imports(container, app):
    app.component("core/persistence/user_repo.py", "UserRepo")
    app.write(
        "core/services/sign_up.py",
        """
        from drydock import Container

        Import = Container.current().imports("persistence.user_repo", mailer="mail.smtp_client")


        @Import
        class SignUp:
            def __init__(self, user_repo, mailer):
                self.user_repo = user_repo
        """,
    )
    container.use("dependency_graph")
    container.register_component("services.sign_up")
    container.register_component("persistence.user_repo")
    container.register("plain", 1)

    graph = container.dependency_graph()

    assert graph == {
        "services.sign_up": ("persistence.user_repo", "mail.smtp_client"),
        "persistence.user_repo": (),
        "plain": (),
    }


def test_render_dot_includes_unregistered_targets():
    dot = render_dot({"a": ("b",), "b": ("c",)}, title="App")
    assert dot.startswith("digraph Drydock {")
    assert 'label="App";' in dot
    assert 'n2 [label="c"];' in dot
    assert "n0 -> n1;" in dot and "n1 -> n2;" in dot


def test_export_graph_writes_dot(container, tmp_path):
    container.use("dependency_graph")
    container.register("a", 1)
    out = tmp_path / "graph.dot"
    container.export_graph(str(out), rankdir="TB")
    text = out.read_text(encoding="utf-8")
    assert 'rankdir="TB";' in text
    assert 'n0 [label="a"];' in text
