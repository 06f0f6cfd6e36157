from __future__ import annotations

import copy
import io
import json
from dataclasses import dataclass, field

import pytest

from budx.config import Config, load, read
from budx.scanner import ConfigSyntaxError

PART1 = """# first part
test1 {
  num = 1
  comment = "#"
  ok = true
  cover {
    fnum = 12.58
  }
}
"""

PART2 = """test2.mylist = ["1", "2", "3"]
test3 {
  nums {
    num1 = -0.123
    num2 = 3.14e+2
    num3 = 3.14e-3
    num4 = 3.14e4
    num5 = 3.14e+10
    num6 = 0e6
  }
}
"""

SINGLE_JSON = """{
  "test1": {
    "num": 1,
    "comment": "#",
    "ok": true,
    "cover": {
      "fnum": 12.58
    }
  },
  "test2": {
    "mylist": ["1", "2", "3"]
  },
  "test3": {
    "nums": {
      "num1": -0.123,
      "num2": 3.14e+2,
      "num3": 3.14e-3,
      "num4": 3.14e4,
      "num5": 3.14e+10,
      "num6": 0e6
    }
  }
}
"""

EXAMPLE = """test2 {
  comment = "#"
  user {
    name = "张三"
    testbool.list = [true, false]
  }
}
"""


@pytest.fixture
def data_dir(tmp_path):
    (tmp_path / "singlefile.conf").write_text(PART1 + PART2, encoding="utf-8")
    (tmp_path / "singlefile.json").write_text(SINGLE_JSON, encoding="utf-8")
    (tmp_path / "part1.conf").write_text(PART1, encoding="utf-8")
    (tmp_path / "part2.conf").write_text(PART2, encoding="utf-8")
    (tmp_path / "multifile.conf").write_text(
        'include "part1.conf"\ninclude "part2.conf"\n', encoding="utf-8"
    )
    (tmp_path / "includenoexistfile.conf").write_text(
        'include "missing.conf"\n', encoding="utf-8"
    )
    (tmp_path / "scanerr.conf").write_text('"a" "b"\n', encoding="utf-8")
    (tmp_path / "scanerr1.conf").write_text("a = 1+\n", encoding="utf-8")
    (tmp_path / "test2.conf").write_text(EXAMPLE, encoding="utf-8")
    return tmp_path


@pytest.fixture
def multi(data_dir):
    return load(data_dir / "multifile.conf")


def _sample():
    return Config(
        {
            "test1": {"num": 1, "comment": "#", "ok": True, "cover": {"fnum": 12.58}},
            "test2": {"mylist": ["1", "2", "3"]},
            "test3": {
                "nums": {
                    "num1": -0.123,
                    "num2": 3.14e2,
                    "num3": 3.14e-3,
                    "num4": 3.14e4,
                    "num5": 3.14e10,
                    "num6": 0e6,
                }
            },
        }
    )


# merge


def test_merge_int():
    conf = _sample()
    assert conf.get_int("test1.num") == 1
    conf.merge("test1.num", 2)
    assert conf.get_int("test1.num") == 2


def test_merge_int_to_string():
    conf = _sample()
    assert conf.get_float("test3.nums.num1") == -0.123
    conf.merge("test3.nums.num1", "two")
    assert conf.get_str("test3.nums.num1") == "two"


def test_merge_bool():
    conf = _sample()
    conf.merge("test4.abc.ok", True)
    assert conf.get_bool("test4.abc.ok") is True


def test_merge_config():
    conf = _sample()
    assert conf.get_float("test1.cover.fnum") == 12.58
    conf.merge(
        "test1",
        Config(
            {
                "num": 1,
                "ok": False,
                "cover": {"fnum": 0.001},
                "list": Config({"strlist": ["11", "22", "33"]}),
            }
        ),
    )
    assert conf.get_int("test1.num") == 1
    assert conf.get_float("test1.cover.fnum") == 0.001
    assert conf.get_bool("test1.ok") is False
    assert conf.get_strings("test1.list.strlist") == ["11", "22", "33"]
    assert conf.get_str("test1.comment") == "#"


def test_merge_root_config():
    conf = _sample()
    conf.merge("", Config({"test2": Config({"mylist1": ["11", "12", "13"]})}))
    assert conf.get_strings("test2.mylist1") == ["11", "12", "13"]
    assert conf.get_strings("test2.mylist") == ["1", "2", "3"]


def test_merge_non_mapping_at_root_changes_nothing():
    conf = _sample()
    snapshot = copy.deepcopy(conf)
    conf.merge("", True)
    assert conf == snapshot


def test_merge_replaces_scalar_with_subtree():
    conf = _sample()
    conf.merge("test1.num.deep", 5)
    assert conf.get_int("test1.num.deep") == 5


def test_merge_ignores_unsupported_values():
    conf = _sample()
    conf.merge("test1.other", object())
    assert "other" not in conf["test1"]


def test_sub_config_shares_data():
    conf = _sample()
    sub = conf.sub_config("test1")
    sub.merge("num", 7)
    assert conf.get_int("test1.num") == 7


# empty configuration


def test_empty_config():
    conf = Config()
    assert len(conf) == 0
    assert conf.get_int("intkey", 1980) == 1980
    assert list(conf.sub_configs()) == []


# getters on an in-memory configuration


def test_get_int():
    conf = _sample()
    assert conf.get_int("test1.num") == 1
    assert conf.get_int("test1.num1") is None
    assert conf.get_int("test1.num", 5) == 1
    assert conf.get_int("test1.num1", 5) == 5


def test_get_int_truncates_float():
    conf = Config({"a": 3.9})
    assert conf.get_int("a") == 3


def test_get_int_rejects_bool():
    conf = Config({"a": True})
    assert conf.get_int("a", -1) == -1


def test_get_float():
    conf = _sample()
    assert conf.get_float("test1.cover.fnum") == 12.58
    assert conf.get_float("test1.num1") is None
    assert conf.get_float("test1.cover.fnum", 5.5) == 12.58
    assert conf.get_float("test1.num1", 5.5) == 5.5


def test_get_str():
    conf = _sample()
    assert conf.get_str("test1.comment") == "#"
    assert conf.get_str("test1.comment1") is None
    assert conf.get_str("test1.comment", "##") == "#"
    assert conf.get_str("test1.comment1", "##") == "##"


def test_get_strings():
    conf = _sample()
    assert conf.get_strings("test2.mylist") == ["1", "2", "3"]
    assert conf.get_strings("test2.mylist1") is None
    assert conf.get_strings("test2.mylist", ["1", "2"]) == ["1", "2", "3"]
    assert conf.get_strings("test2.mylist1", ["1", "2", "3"]) == ["1", "2", "3"]


def test_get_strings_filters_other_types():
    conf = Config({"mixed": ["a", 1, "b"], "numbers": [1, 2]})
    assert conf.get_strings("mixed") == ["a", "b"]
    assert conf.get_strings("numbers", ["x"]) == ["x"]


def test_get_bools():
    conf = Config({"flags": [True, "x", False]})
    assert conf.get_bools("flags") == [True, False]
    assert conf.get_bools("missing", [True]) == [True]


def test_get_bool():
    conf = _sample()
    assert conf.get_bool("test1.ok") is True
    assert conf.get_bool("test1.ok1") is None
    assert conf.get_bool("test1.ok", False) is True
    assert conf.get_bool("test1.ok1", False) is False


def test_sub_config():
    conf = _sample()
    sub = conf.sub_config("test1")
    assert isinstance(sub, Config)
    assert sub.get_bool("ok", False) is True
    assert sub.get_bool(".ok1", False) is False


def test_sub_config_not_exist():
    conf = _sample()
    assert conf.sub_config("test1.tttt") is None
    assert conf.sub_config("test1.num") is None


def test_sub_configs_and_length():
    sub = _sample().sub_config("test3.nums")
    assert len(sub) == 6
    pairs = list(sub.sub_configs())
    assert all(key.startswith("num") for key, _ in pairs)
    assert all(value is None for _, value in pairs)
    assert len(pairs) == 6


# objects


@dataclass
class _Settings:
    app_name: str = "sample"
    http_port: int = 0
    http_addr: str = "localhost"
    http_ssl: bool = False
    http_ssl_cert: str = ""
    http_ssl_key: str = ""
    seeds: list[str] = field(default_factory=list)
    float_num: float = 0.0


def test_apply_to():
    conf = Config(
        {
            "appName": "sample",
            "HttpAddr": "127.0.0.1",
            "httpSslKey": "test",
            "httpSsl": True,
            "httpPort": 9000,
            "seeds": ["1", "2", "3"],
            "floatNum": 1.18,
        }
    )
    settings = conf.apply_to(_Settings())
    assert settings.app_name == "sample"
    assert settings.http_addr == "127.0.0.1"
    assert settings.http_ssl_key == "test"
    assert settings.http_ssl_cert == ""
    assert settings.http_ssl is True
    assert settings.http_port == 9000
    assert settings.seeds == ["1", "2", "3"]
    assert settings.float_num == 1.18


def test_apply_to_skips_mismatched_types():
    conf = Config({"httpPort": "eighty", "floatNum": 3})
    settings = conf.apply_to(_Settings())
    assert settings.http_port == 0
    assert settings.float_num == 0.0


# loading files


def test_load_single_file(data_dir):
    expected = json.loads(SINGLE_JSON)
    assert load(data_dir / "singlefile.conf") == expected


def test_parse_normal_json(data_dir):
    expected = json.loads(SINGLE_JSON)
    assert load(data_dir / "singlefile.json") == expected


def test_load_multi_file(data_dir):
    expected = json.loads(SINGLE_JSON)
    assert load(data_dir / "multifile.conf") == expected


def test_load_relative_path(data_dir, monkeypatch):
    monkeypatch.chdir(data_dir)
    assert load("singlefile.conf").get_int("test1.num") == 1


def test_load_not_exist_include(data_dir):
    with pytest.raises(ConfigSyntaxError) as info:
        load(data_dir / "includenoexistfile.conf")
    assert str(info.value).startswith("error in load include:")


def test_load_missing_file(data_dir):
    with pytest.raises(FileNotFoundError):
        load(data_dir / "absent.conf")


def test_scanner_errors(data_dir):
    with pytest.raises(ConfigSyntaxError) as info:
        load(data_dir / "scanerr.conf")
    assert str(info.value).startswith("invalid character '\"'")

    with pytest.raises(ConfigSyntaxError) as info:
        load(data_dir / "scanerr1.conf")
    assert str(info.value).startswith("invalid character '+'")


def test_read_stream(data_dir):
    with open(data_dir / "singlefile.conf", "rb") as reader:
        conf = read(reader)
    assert conf.get_int("test1.num") == 1
    assert conf.get_int("test1.num1") is None


def test_read_text_stream():
    conf = read(io.StringIO("a.b = 1\nc = hello\n"))
    assert conf.get_int("a.b") == 1
    assert conf.get_str("c") == "hello"


def test_loaded_getters(multi):
    assert multi.get_int("test1.num", 5) == 1
    assert multi.get_int("test1.num.num1", 5) == 5
    assert multi.get_float("test1.cover.fnum") == 12.58
    assert multi.get_float("test1.num1", 5.5) == 5.5
    assert multi.get_str("test1.comment") == "#"
    assert multi.get_str("test1.comment1", "##") == "##"
    assert multi.get_strings("test2.mylist") == ["1", "2", "3"]
    assert multi.get_strings("test2.mylist1", ["1", "2", "3"]) == ["1", "2", "3"]
    assert multi.get_bool("test1.ok") is True
    assert multi.get_bool("test1.ok1", False) is False


def test_loaded_sub_config(multi):
    sub = multi.sub_config("test1")
    assert sub.get_bool("ok", False) is True
    assert sub.get_bool(".ok1", False) is False
    assert multi.sub_config("test1.tttt") is None
    assert multi.sub_config("test1.num") is None


def test_loaded_sub_configs(multi):
    sub = multi.sub_config("test3.nums")
    keys = [key for key, _ in sub.sub_configs()]
    assert len(keys) == 6
    assert all(key.startswith("num") for key in keys)


def test_example(data_dir):
    conf = load(data_dir / "test2.conf")
    assert conf.get_str("test2.comment", "") == "#"
    assert conf.get_str("test2.user.name") == "张三"
    assert conf.get_bools("test2.user.testbool.list", []) == [True, False]