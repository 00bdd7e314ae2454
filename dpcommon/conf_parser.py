#!/usr/bin/env python3

# DropProject - submission processing pipeline
# Copyright © 2019-2024 The DropProject development team
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as
# published by the Free Software Foundation, either version 3 of the
# License, or (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program.  If not, see <http://www.gnu.org/licenses/>.

"""Load TOML configuration files into typed dataclasses.

"""

import dataclasses
import logging
import re
import sys
import tomllib
import types
import typing


class ConfigError(Exception):
    """Exception for critical configuration errors."""

    pass


class ConfigTypeError(ConfigError):
    def __init__(self, path: str, expected: str, got: object):
        msg = f"Expected {path} to be {expected}, got {type(got).__name__}"
        super().__init__(msg)


_T = typing.TypeVar("_T")


def parse_config(
    config_file_path: str, config_class: type[_T], enoent_help: str = ""
) -> _T:
    """
    Load a TOML config file into a config class, checking for type errors.

    config_class must be a dataclass. Each of its fields must have a type
    that is either one of the basic TOML types (str, int, float, bool),
    another dataclass satisfying the same rules, a list[T] or a
    tuple[T, ...] with T satisfying these rules, a dict[str, T] with T
    satisfying these rules, or an optional form (T | None) of any of the
    above.

    A trailing "_" in a field name is dropped when looking up the TOML
    key, so that sections can be named after python keywords.

    config_file_path: Path to the config TOML file.
    config_class: Dataclass to load the configuration into.
    enoent_help: Extra help text for "file not found" error.
    """
    try:
        with open(config_file_path, "rb") as f:
            data = tomllib.load(f)
        return parse_config_obj(data, config_class, "")
    except FileNotFoundError:
        logging.critical(
            f"Cannot find configuration file {config_file_path}{enoent_help}"
        )
        sys.exit(1)
    except (ConfigError, tomllib.TOMLDecodeError) as e:
        logging.critical(f"Cannot load configuration file {config_file_path}: {e}")
        sys.exit(1)


def format_key(key: str):
    if re.fullmatch(r"[A-Za-z0-9_-]+", key):
        return key
    else:
        return repr(key)


def join_path(path: str, new_part: str):
    if path != "":
        return path + "." + new_part
    else:
        return new_part


def _parse_dataclass(data: object, obj_class, path: str):
    if not isinstance(data, dict):
        raise ConfigTypeError(path, "a table", data)
    kw_args = {}
    for field in dataclasses.fields(obj_class):
        if not field.init:
            continue
        config_name = field.name.removesuffix("_")

        is_required = (
            field.default is dataclasses.MISSING
            and field.default_factory is dataclasses.MISSING
        )
        field_path = join_path(path, format_key(config_name))
        if is_required and config_name not in data:
            raise ConfigError(f"Key {field_path} is required")

        if config_name in data:
            kw_args[field.name] = parse_config_obj(
                data[config_name], field.type, field_path)

    for k in data:
        if k not in kw_args and k + "_" not in kw_args:
            logging.warning("Unrecognized key %s in config, ignoring.",
                            join_path(path, format_key(k)))

    return obj_class(**kw_args)


def parse_config_obj(data: object, obj_class: type[_T], path: str) -> _T:
    """Convert a value loaded by tomllib into an instance of obj_class.

    data: the value, as returned by tomllib.
    obj_class: the (possibly generic) type to convert to.
    path: dotted position of data in the file, for error messages.

    return: the converted value.

    raise (ConfigError): if data doesn't match obj_class.

    """
    if typing.get_origin(obj_class) in (typing.Union, types.UnionType):
        # Only "T | None" is supported, and TOML has no null.
        args = typing.get_args(obj_class)
        assert len(args) == 2 and args[1] is type(None)
        obj_class = args[0]

    if dataclasses.is_dataclass(obj_class):
        return _parse_dataclass(data, obj_class, path)

    elif typing.get_origin(obj_class) is dict:
        key_type, value_type = typing.get_args(obj_class)
        assert key_type is str
        if not isinstance(data, dict):
            raise ConfigTypeError(path, "a table", data)
        return typing.cast(_T, {
            k: parse_config_obj(v, value_type, join_path(path, format_key(k)))
            for k, v in data.items()})

    elif typing.get_origin(obj_class) in (tuple, list):
        args = typing.get_args(obj_class)
        if typing.get_origin(obj_class) is tuple:
            assert len(args) == 2 and args[1] == Ellipsis, \
                "Only homogeneous tuples are supported"
        if not isinstance(data, list):
            raise ConfigTypeError(path, "a list", data)
        result = [parse_config_obj(x, args[0], path + f"[{i}]")
                  for i, x in enumerate(data)]
        return typing.get_origin(obj_class)(result)  # type: ignore

    elif obj_class in (str, int, bool):
        # bool is a subclass of int, but "true" is not a valid int setting.
        if not isinstance(data, obj_class) or \
                (obj_class is int and isinstance(data, bool)):
            raise ConfigTypeError(path, obj_class.__name__, data)
        return typing.cast(_T, data)

    elif obj_class is float:
        if not isinstance(data, int | float) or isinstance(data, bool):
            raise ConfigTypeError(path, "float", data)
        return typing.cast(_T, float(data))

    else:
        raise AssertionError(
            f"Unsupported type found in configuration: {obj_class}")
