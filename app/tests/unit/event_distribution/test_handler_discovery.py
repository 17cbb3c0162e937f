"""Unit tests for feature handler discovery."""

import sys
import textwrap

import pytest

from event_distribution.discovery import discover_handler_modules, is_test_module

pytestmark = pytest.mark.unit


@pytest.fixture
def feature_package(tmp_path, monkeypatch):
    """Create an importable package of feature modules."""
    created = []

    def _factory(name, modules):
        root = tmp_path / name
        root.mkdir()
        (root / "__init__.py").write_text("")
        for module_path, source in modules.items():
            path = root / module_path
            path.parent.mkdir(parents=True, exist_ok=True)
            init = path.parent / "__init__.py"
            if not init.exists():
                init.write_text("")
            path.write_text(textwrap.dedent(source))
        created.append(name)
        return name

    monkeypatch.syspath_prepend(str(tmp_path))
    yield _factory

    for name in created:
        for module in [m for m in sys.modules if m == name or m.startswith(f"{name}.")]:
            del sys.modules[module]


class TestIsTestModule:
    """Test test module detection."""

    @pytest.mark.parametrize(
        "module_name,expected",
        [
            ("programs.polls", False),
            ("programs.tests.test_polls", True),
            ("programs.test_polls", True),
            ("programs.conftest", True),
            ("programs.contest", False),
        ],
    )
    def test_is_test_module(self, module_name, expected):
        """Test suites are recognized by package and module names."""
        assert is_test_module(module_name) is expected


class TestDiscoverHandlerModules:
    """Test module discovery."""

    def test_imports_every_module(self, feature_package):
        """Modules and nested packages are imported."""
        name = feature_package(
            "features_all",
            {"polls.py": "LOADED = True\n", "groups/join.py": "LOADED = True\n"},
        )

        summary = discover_handler_modules([name])

        assert f"{name}.polls" in sys.modules
        assert f"{name}.groups.join" in sys.modules
        assert set(summary["modules_imported"]) == {
            name,
            f"{name}.polls",
            f"{name}.groups",
            f"{name}.groups.join",
        }

    def test_skips_test_modules(self, feature_package):
        """Test modules next to features are not imported."""
        name = feature_package(
            "features_tests",
            {"polls.py": "", "test_polls.py": "raise RuntimeError('imported a test')\n"},
        )

        summary = discover_handler_modules([name])

        assert f"{name}.test_polls" not in summary["modules_imported"]

    def test_import_error_is_raised(self, feature_package):
        """A feature that fails to import aborts discovery."""
        name = feature_package("features_broken", {"broken.py": "raise ValueError('bad feature')\n"})

        with pytest.raises(ValueError, match="bad feature"):
            discover_handler_modules([name])

    def test_missing_package_is_raised(self):
        """Unknown packages are an error."""
        with pytest.raises(ModuleNotFoundError):
            discover_handler_modules(["no_such_feature_package"])
