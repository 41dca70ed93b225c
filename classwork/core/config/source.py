import functools
import os
import typing as t
from pathlib import Path

import pydantic as p
import yaml
from pydantic_settings import PydanticBaseSettingsSource, SettingsError

import classwork.lib.util as util
from classwork.model import DeploymentEnvironment


class CurrentState(t.TypedDict, total=False):
    root: t.Required[p.AnyUrl]
    env: t.Required[DeploymentEnvironment]


class SettingsCurrentState(CurrentState, total=False):
    override: t.Required[tuple[str, ...]]


SkipKeys = frozenset({"env", "root", "override"})


def env_paths(root: p.AnyUrl, env: DeploymentEnvironment) -> list[Path]:
    """The directories searched for YAML, least specific first"""
    assert root.scheme == "file" and root.path is not None, "root is not a legible location of YAML files"
    paths = [Path(root.path)]
    if env is not DeploymentEnvironment.Local:
        # we don't have a special directory for local/ that's just root
        paths.append(Path(root.path) / "env.d" / env.value)
    return paths


class SettingsSource(PydanticBaseSettingsSource):
    def __call__(self) -> dict[str, t.Any]:
        # we expect init kwargs to have config root and env in them
        data: dict[str, t.Any] = {}

        for field_name, field in self.settings_cls.model_fields.items():
            try:
                field_value, field_key, value_is_complex = self.get_field_value(field, field_name)
                field_value = self.prepare_field_value(field_name, field, field_value, value_is_complex)
            except KeyError:
                continue
            except ValueError as e:
                raise SettingsError(f"error parsing value for field {field_name!r} from source {self!r}") from e
            except Exception as e:
                raise SettingsError(f"error getting value for field {field_name!r} from source {self!r}") from e

            data[field_key] = field_value
        return data


class OverrideSettingsSource(SettingsSource):
    """Applies `-o key.path=value` pairs given on the command line"""

    @functools.cached_property
    def parsed_options(self) -> dict[str, t.Any]:
        current_state = t.cast(SettingsCurrentState, self.current_state)
        od: dict[str, t.Any] = {}
        for o in current_state["override"]:
            parsed = util.parse_override(o)
            # values are YAML scalars, so `-o ledger.reject_late_submissions=true` is a bool
            od = util.deep_update(od, _load_leaf(parsed))
        return od

    def get_field_value(self, field: p.fields.FieldInfo, field_name: str) -> tuple[t.Any, str, bool]:
        # the partial mapping returned here is deep-merged over what the later sources load
        if field_name in SkipKeys or field_name not in self.parsed_options:
            raise KeyError(field_name)
        val = self.parsed_options[field_name]
        return val, field_name, isinstance(val, dict)

    def prepare_field_value(
        self, field_name: str, field: p.fields.FieldInfo, value: t.Any, value_is_complex: bool
    ) -> t.Any:
        return value


def _load_leaf(d: dict[str, t.Any]) -> dict[str, t.Any]:
    return {k: _load_leaf(v) if isinstance(v, dict) else yaml.safe_load(v) for k, v in d.items()}


class YAMLCascadingSettingsSource(SettingsSource):
    """Reads `<field>.yaml` from the config root, then from `env.d/<env>/`

    Files found later are deep-merged over earlier ones.
    """

    @functools.cached_property
    def load_paths(self) -> list[Path]:
        current_state = t.cast(SettingsCurrentState, self.current_state)
        return env_paths(current_state["root"], current_state["env"])

    def get_field_value(self, field: p.fields.FieldInfo, field_name: str) -> tuple[t.Any, str, bool]:
        yamls: list[str] = []
        for path in self.load_paths:
            fn = path / f"{field_name}.yaml"
            if fn.exists():
                yamls.append(fn.read_text(encoding="utf8"))
        if not yamls:
            raise KeyError(field_name)
        return yamls, field_name, True

    def prepare_field_value(
        self, field_name: str, field: p.fields.FieldInfo, value: t.Any, value_is_complex: bool
    ) -> t.Any:
        if not value_is_complex:
            return super().prepare_field_value(field_name, field, value, value_is_complex)

        # for complex values, we expect to be given a list[str] representing
        # the yamls encountered along the load_paths
        if not isinstance(value, list):
            raise ValueError(field_name)
        merged: dict[str, t.Any] = {}
        for doc in t.cast(list[str], value):
            loaded = yaml.safe_load(doc)
            if not isinstance(loaded, dict):
                return loaded
            merged = util.deep_update(merged, t.cast(dict[str, t.Any], loaded))
        return merged


class YAMLSecretsSource(SettingsSource):
    """Reads `secrets.yaml` from the most specific config directory that has one"""

    filename: t.ClassVar[str] = "secrets.yaml"

    @functools.cached_property
    def secrets(self) -> dict[str, t.Any]:
        current_state = t.cast(CurrentState, self.current_state)
        for path in reversed(env_paths(current_state["root"], current_state["env"])):
            fn = path / self.filename
            if fn.exists():
                return yaml.safe_load(fn.read_text(encoding="utf8")) or {}
        return {}

    def get_field_value(self, field: p.fields.FieldInfo, field_name: str) -> tuple[t.Any, str, bool]:
        # check skip keys before touching self.secrets, which needs root from the current state
        if field_name in SkipKeys or field_name not in self.secrets:
            raise KeyError(field_name)
        val = self.secrets[field_name]
        return val, field_name, isinstance(val, dict)

    def prepare_field_value(
        self, field_name: str, field: p.fields.FieldInfo, value: t.Any, value_is_complex: bool
    ) -> t.Any:
        return value


class EnvironmentSecretsSource(SettingsSource):
    """Reads `CLASSWORK_AUTH__JWT`-style variables; `__` separates nested keys"""

    prefix: t.ClassVar[str] = "CLASSWORK_"
    delimiter: t.ClassVar[str] = "__"

    @functools.cached_property
    def variables(self) -> dict[str, t.Any]:
        found: dict[str, t.Any] = {}
        for k, v in os.environ.items():
            if not k.startswith(self.prefix):
                continue
            path = [s.lower() for s in k[len(self.prefix) :].split(self.delimiter) if s]
            if not path:
                continue
            leaf: dict[str, t.Any] = {path[-1]: v}
            for key in reversed(path[:-1]):
                leaf = {key: leaf}
            found = util.deep_update(found, leaf)
        return found

    def get_field_value(self, field: p.fields.FieldInfo, field_name: str) -> tuple[t.Any, str, bool]:
        if field_name in SkipKeys or field_name not in self.variables:
            raise KeyError(field_name)
        val = self.variables[field_name]
        return val, field_name, isinstance(val, dict)

    def prepare_field_value(
        self, field_name: str, field: p.fields.FieldInfo, value: t.Any, value_is_complex: bool
    ) -> t.Any:
        return value
