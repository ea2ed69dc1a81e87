import logging
import sys
import textwrap
from pathlib import Path

import pytest

import drydock.loader as loader_mod
from drydock import Container, PluginRegistry, SourceLoader
from drydock.plugins import set_default_registry
from drydock.plugins.builtin import register_builtin_plugins

log_capture: list[str] = []


class ListLogHandler(logging.Handler):
    def emit(self, record):
        log_capture.append(self.format(record))


@pytest.fixture(autouse=True)
def reset_logging_capture():
    log_capture.clear()


def _loaded_from(module, base: str) -> bool:
    f = getattr(module, "__file__", None)
    locations = [f] if f else list(getattr(module, "__path__", None) or [])
    return any(str(Path(p).resolve()).startswith(base) for p in locations)


@pytest.fixture(autouse=True)
def isolated_imports(tmp_path_factory):
    """Undo the sys.modules/sys.path changes made by loading app trees."""
    base = str(tmp_path_factory.getbasetemp().resolve())
    modules = set(sys.modules)
    path = list(sys.path)
    loader_mod.reset_default_loader()
    yield
    for name in set(sys.modules) - modules:
        if _loaded_from(sys.modules[name], base):
            del sys.modules[name]
    sys.path[:] = path
    loader_mod.reset_default_loader()


@pytest.fixture(autouse=True)
def plugins():
    registry = register_builtin_plugins(PluginRegistry())
    previous = set_default_registry(registry)
    yield registry
    set_default_registry(previous)


class AppTree:
    def __init__(self, root):
        self.root = root

    def write(self, rel: str, text: str = "") -> "AppTree":
        p = self.root / rel
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(textwrap.dedent(text), encoding="utf-8")
        return self

    def component(self, rel: str, class_name: str, body: str = "pass") -> "AppTree":
        return self.write(rel, f"class {class_name}:\n    {body}\n")

    def boot_unit(self, name: str, text: str, core_dir: str = "core") -> "AppTree":
        return self.write(f"{core_dir}/boot/{name}.py", text)


@pytest.fixture
def app(tmp_path) -> AppTree:
    return AppTree(tmp_path)


@pytest.fixture
def loader() -> SourceLoader:
    return SourceLoader()


@pytest.fixture
def container(app, loader, plugins) -> Container:
    return Container("test", loader=loader, plugins=plugins).configure(root=app.root)
