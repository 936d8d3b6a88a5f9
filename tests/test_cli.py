"""End-to-end tests for the provider process entry point.

run_provider is exercised the way a provider executable is invoked: a
process environment, stdin, and captured stdout/stderr.
"""

from __future__ import annotations

import asyncio
import io
import json
import logging

import pytest

from garm_provider_common.errors import DuplicateEntityError, NotFoundError
from garm_provider_common.execution.cli import configure_logging, main, run_provider
from garm_provider_common.params import BootstrapInstance, ProviderInstance


class ScriptedProvider:
    """Provider whose results and errors are set per test."""

    def __init__(self) -> None:
        self.calls: list[tuple] = []
        self.error: BaseException | None = None
        self.instances: list[ProviderInstance] = []

    async def _call(self, *call):
        self.calls.append(call)
        if self.error is not None:
            raise self.error

    async def create_instance(self, bootstrap_params: BootstrapInstance):
        await self._call("create_instance", bootstrap_params.name)
        return ProviderInstance(provider_id="i-new", name=bootstrap_params.name)

    async def get_instance(self, instance_id: str):
        await self._call("get_instance", instance_id)
        return ProviderInstance(provider_id=instance_id, name="runner-1")

    async def list_instances(self, pool_id: str):
        await self._call("list_instances", pool_id)
        return self.instances

    async def delete_instance(self, instance_id: str):
        await self._call("delete_instance", instance_id)

    async def remove_all_instances(self):
        await self._call("remove_all_instances")

    async def start(self, instance_id: str):
        await self._call("start", instance_id)

    async def stop(self, instance_id: str, force: bool):
        await self._call("stop", instance_id, force)


@pytest.fixture
def provider() -> ScriptedProvider:
    return ScriptedProvider()


@pytest.fixture
def factory_calls() -> list[tuple[str, str]]:
    return []


@pytest.fixture
def factory(provider, factory_calls):
    def _build(config_file: str, controller_id: str) -> ScriptedProvider:
        factory_calls.append((config_file, controller_id))
        return provider

    return _build


@pytest.fixture
def environ(tmp_path):
    config = tmp_path / "provider.toml"
    config.write_text("")
    return {
        "GARM_CONTROLLER_ID": "controller-1",
        "GARM_POOL_ID": "pool-1",
        "GARM_PROVIDER_CONFIG_FILE": str(config),
        "GARM_INTERFACE_VERSION": "v0.1.1",
    }


def _invoke(factory, environ, stdin: str = "", **kwargs):
    stdout, stderr = io.StringIO(), io.StringIO()
    code = run_provider(
        factory,
        environ=environ,
        stdin=io.StringIO(stdin),
        stdout=stdout,
        stderr=stderr,
        **kwargs,
    )
    return code, stdout.getvalue(), stderr.getvalue()


class TestSuccess:
    def test_create_instance(self, factory, factory_calls, provider, environ):
        environ["GARM_COMMAND"] = "CreateInstance"
        code, out, err = _invoke(factory, environ, json.dumps({"name": "runner-9"}))
        assert code == 0
        assert err == ""
        assert json.loads(out) == {
            "provider_id": "i-new",
            "name": "runner-9",
            "os_name": "",
            "os_version": "",
            "addresses": [],
        }
        assert factory_calls == [(environ["GARM_PROVIDER_CONFIG_FILE"], "controller-1")]

    def test_list_instances_prints_array_in_order(self, factory, provider, environ):
        environ["GARM_COMMAND"] = "ListInstances"
        provider.instances = [
            ProviderInstance(provider_id="i-1"),
            ProviderInstance(provider_id="i-2"),
        ]
        code, out, _ = _invoke(factory, environ)
        assert code == 0
        assert [i["provider_id"] for i in json.loads(out)] == ["i-1", "i-2"]

    def test_no_payload_commands_print_nothing(self, factory, provider, environ):
        environ["GARM_COMMAND"] = "StopInstance"
        environ["GARM_INSTANCE_ID"] = "i-1"
        code, out, err = _invoke(factory, environ)
        assert (code, out, err) == (0, "", "")
        assert provider.calls == [("stop", "i-1", True)]

    def test_get_version_prints_raw_string(self, factory, provider, environ):
        environ["GARM_COMMAND"] = "GetVersion"
        code, out, _ = _invoke(factory, environ)
        assert (code, out) == (0, "v0.1.1")
        assert provider.calls == []

    def test_get_version_without_negotiation(self, factory, environ):
        environ["GARM_COMMAND"] = "GetVersion"
        del environ["GARM_INTERFACE_VERSION"]
        code, out, _ = _invoke(factory, environ)
        assert (code, out) == (0, "v0.1.0")


class TestFailures:
    def test_validation_failure_exits_1(self, factory, provider, environ):
        environ["GARM_COMMAND"] = "DeleteInstance"
        code, out, err = _invoke(factory, environ)
        assert code == 1
        assert out == ""
        assert "instance ID" in err
        assert provider.calls == []

    def test_missing_command(self, factory, factory_calls, environ):
        code, _, err = _invoke(factory, environ)
        assert code == 1
        assert "missing GARM_COMMAND" in err
        assert factory_calls == []

    def test_not_found_exits_30(self, factory, provider, environ):
        environ["GARM_COMMAND"] = "GetInstance"
        environ["GARM_INSTANCE_ID"] = "i-gone"
        provider.error = NotFoundError("instance i-gone not found")
        code, out, err = _invoke(factory, environ)
        assert code == 30
        assert out == ""
        assert "failed to get instance from provider" in err
        assert "i-gone not found" in err

    def test_duplicate_exits_31(self, factory, provider, environ):
        environ["GARM_COMMAND"] = "CreateInstance"
        provider.error = DuplicateEntityError()
        code, _, _ = _invoke(factory, environ, json.dumps({"name": "runner-1"}))
        assert code == 31

    def test_malformed_stdin_exits_1(self, factory, environ):
        environ["GARM_COMMAND"] = "CreateInstance"
        code, _, err = _invoke(factory, environ, "{oops")
        assert code == 1
        assert "failed to get bootstrap params" in err

    def test_unsupported_interface_version(self, factory, environ):
        environ["GARM_COMMAND"] = "GetVersion"
        environ["GARM_INTERFACE_VERSION"] = "v1.0.0"
        code, _, err = _invoke(factory, environ)
        assert code == 1
        assert "unsupported interface version" in err

    def test_factory_failure(self, environ):
        environ["GARM_COMMAND"] = "ListInstances"

        def _broken(config_file, controller_id):
            raise ValueError("bad credentials in config")

        code, _, err = _invoke(_broken, environ)
        assert code == 1
        assert "failed to create provider: bad credentials in config" in err

    def test_factory_not_found_error_keeps_classification(self, environ):
        environ["GARM_COMMAND"] = "ListInstances"

        def _broken(config_file, controller_id):
            raise NotFoundError("credentials file not found")

        code, _, _ = _invoke(_broken, environ)
        assert code == 30

    def test_timeout(self, factory, provider, environ):
        environ["GARM_COMMAND"] = "DeleteInstance"
        environ["GARM_INSTANCE_ID"] = "i-1"
        provider.error = TimeoutError()
        code, _, err = _invoke(factory, environ)
        assert code == 1
        assert "timed out" in err

    def test_cancellation_is_reported(self, factory, provider, environ):
        environ["GARM_COMMAND"] = "StartInstance"
        environ["GARM_INSTANCE_ID"] = "i-1"
        provider.error = asyncio.CancelledError()
        code, _, err = _invoke(factory, environ)
        assert code == 1
        assert err == "operation cancelled\n"


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
    root.setLevel(level)


@pytest.mark.usefixtures("restore_root_logger")
class TestMain:
    def test_exits_with_translated_code(self, factory, environ, monkeypatch, capsys):
        for name, value in environ.items():
            monkeypatch.setenv(name, value)
        monkeypatch.setenv("GARM_COMMAND", "GetVersion")
        with pytest.raises(SystemExit) as exc_info:
            main(factory)
        assert exc_info.value.code == 0
        assert capsys.readouterr().out == "v0.1.1"


@pytest.mark.usefixtures("restore_root_logger")
class TestConfigureLogging:
    def test_level_from_environment(self):
        stream = io.StringIO()
        configure_logging({"GARM_PROVIDER_LOG_LEVEL": "debug"}, stream)
        logging.getLogger("garm.provider").debug("hello from provider")
        assert "hello from provider" in stream.getvalue()

    def test_unknown_level_falls_back_to_warning(self):
        configure_logging({"GARM_PROVIDER_LOG_LEVEL": "chatty"}, io.StringIO())
        assert logging.getLogger().level == logging.WARNING

    def test_returns_the_installed_handler(self):
        stream = io.StringIO()
        handler = configure_logging({}, stream)
        assert handler in logging.getLogger().handlers
        assert handler.stream is stream
