import json
from dataclasses import dataclass, field
from typing import List, Optional, Set, Tuple

import pytest

from neural_convert.config import Config, StrEnum
from neural_convert.exceptions import ConfigurationError


class Color(StrEnum):
    red = "red"
    blue = "blue"


def test_str_enum():
    assert str(Color.red) == "red"
    assert repr(Color.red) == "'red'"
    assert Color("blue") is Color.blue


def test_simple_config_as_dict():
    @dataclass
    class MockConfig(Config):
        name: str = "default"
        x: Optional[int] = None

    c = MockConfig()
    assert c.as_dict() == dict(name="default", x=None)
    assert c.as_dict(exclude_none=True) == dict(name="default")


def test_nested_configs():
    @dataclass
    class Bar:
        x: int
        y: int

    @dataclass
    class Foo(Config):
        bar: Bar
        z: str

    foo = Foo(bar=Bar(x=1, y=2), z="z")
    data = foo.as_dict()
    assert isinstance(data["bar"], dict)

    foo1 = Foo.from_dict(data)
    assert foo1 == foo
    assert isinstance(foo1.bar, Bar)

    foo2 = Foo.from_dict(data, overrides=["bar.x=0"])
    assert foo2.bar.x == 0
    foo3 = foo2.merge(["--bar.x=-1"])
    assert foo3.bar.x == -1
    assert foo2.bar.x == 0


def test_json_safe_dump():
    @dataclass
    class Foo(Config):
        x_list: List[int]
        x_tuple: Tuple[int, ...]
        x_set: Set[str]
        color: Color = Color.red

    foo = Foo(x_list=[0, 1], x_tuple=(0, 1), x_set={"a"})
    assert foo.as_config_dict() == {
        "x_list": [0, 1],
        "x_tuple": [0, 1],
        "x_set": ["a"],
        "color": "red",
    }
    assert foo.as_dict()["color"] is Color.red


@dataclass
class FileConfig(Config):
    name: str = "default"
    color: Color = Color.red
    tags: List[str] = field(default_factory=list)

    def validate(self):
        if self.name == "invalid":
            raise ConfigurationError("invalid name")


def test_from_yaml_and_json(tmp_path):
    yaml_path = tmp_path / "config.yaml"
    yaml_path.write_text("name: foo\ncolor: blue\ntags: [a, b]\n")
    expected = FileConfig(name="foo", color=Color.blue, tags=["a", "b"])
    assert FileConfig.from_file(yaml_path) == expected

    json_path = tmp_path / "config.json"
    json_path.write_text(json.dumps({"name": "bar"}))
    assert FileConfig.from_file(json_path, overrides=["color=blue"]) == FileConfig(
        name="bar", color=Color.blue
    )


def test_empty_yaml(tmp_path):
    path = tmp_path / "config.yml"
    path.write_text("")
    assert FileConfig.from_file(path) == FileConfig()


def test_unsupported_file_type(tmp_path):
    with pytest.raises(ConfigurationError, match="Unsupported config file type"):
        FileConfig.from_file(tmp_path / "config.toml")


def test_invalid_values_are_configuration_errors():
    with pytest.raises(ConfigurationError):
        FileConfig.from_dict({"color": "green"})
    with pytest.raises(ConfigurationError):
        FileConfig.from_dict({"unknown_field": 1})
    with pytest.raises(ConfigurationError):
        FileConfig().merge(["color=green"])


def test_merge_validates():
    with pytest.raises(ConfigurationError, match="invalid name"):
        FileConfig().merge(["name=invalid"])


def test_replace_and_copy():
    c = FileConfig(tags=["a"])
    assert c.replace(name="x") == FileConfig(name="x", tags=["a"])
    deep = c.copy()
    deep.tags.append("b")
    assert c.tags == ["a"]
