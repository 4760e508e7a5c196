import json
from dataclasses import dataclass, field

import pytest

from app_harness import ConfigParseError, ConfigResolver, MaskSet, RuntimeSettings
from app_harness.configuration import merge_data, resolve_arguments
from app_harness.errors import ErrorKind
from app_harness.masking import MASKED_VALUE

SOURCE = {"url": "http://example.org", "secret": "shh", "count": 3}


def settings_for(configuration="", **kwargs):
    return RuntimeSettings(configuration=configuration, **kwargs)


def test_missing_configuration_is_empty(logger):
    assert ConfigResolver(settings_for(), logger).load() == {}


def test_blank_configuration_is_empty(logger):
    assert ConfigResolver(settings_for("   "), logger).load() == {}


def test_inline_configuration_keeps_order(logger):
    config = ConfigResolver(settings_for(json.dumps(SOURCE)), logger).load()
    assert config == SOURCE
    assert list(config) == ["url", "secret", "count"]


def test_configuration_file_is_used_without_inline_configuration(logger, tmp_path):
    path = tmp_path / "configuration.json"
    path.write_text(json.dumps({"window": 7}), encoding="utf-8")

    resolver = ConfigResolver(settings_for(configuration_file=str(path)), logger)
    assert resolver.load() == {"window": 7}


def test_inline_configuration_wins_over_file(logger, tmp_path):
    path = tmp_path / "configuration.json"
    path.write_text(json.dumps({"window": 7}), encoding="utf-8")

    settings = settings_for('{"window": 1}', configuration_file=str(path))
    assert ConfigResolver(settings, logger).load() == {"window": 1}


@pytest.mark.parametrize("document", ['{"url": ', "[1, 2]", '"text"'])
def test_invalid_configuration_raises(logger, capsys, document):
    with pytest.raises(ConfigParseError) as excinfo:
        ConfigResolver(settings_for(document), logger).load()

    assert excinfo.value.kind is ErrorKind.CONFIG_PARSE
    assert "[ERROR]" in capsys.readouterr().out


def test_unreadable_configuration_file_raises(logger, tmp_path):
    settings = settings_for(configuration_file=str(tmp_path / "missing.json"))
    with pytest.raises(ConfigParseError):
        ConfigResolver(settings, logger).load()


def test_printed_configuration_is_masked(logger, capsys):
    settings = settings_for(
        json.dumps(SOURCE),
        print_configuration=True,
        mask_setting_ids=MaskSet.from_string("secret"),
    )

    config = ConfigResolver(settings, logger).load()

    out = capsys.readouterr().out
    assert "app will be started with configuration" in out
    assert MASKED_VALUE in out
    assert "shh" not in out
    assert "http://example.org" in out
    assert config["secret"] == "shh"


def test_configuration_is_not_printed_without_flag(logger, capsys):
    ConfigResolver(settings_for(json.dumps(SOURCE)), logger).load()
    assert "app will be started" not in capsys.readouterr().out


def test_repeated_loads_return_the_unmasked_configuration(logger):
    settings = settings_for(
        json.dumps(SOURCE),
        print_configuration=True,
        mask_setting_ids=MaskSet.from_string("secret,url"),
    )
    resolver = ConfigResolver(settings, logger)

    assert resolver.load() == resolver.load() == SOURCE


def test_print_does_not_modify_the_configuration(logger):
    config = dict(SOURCE)
    ConfigResolver(settings_for(), logger).print(config, MaskSet.from_string("secret"))
    assert config == SOURCE


@pytest.mark.parametrize("value, expected", [
    ("", frozenset()),
    ("secret", frozenset({"secret"})),
    ("a,b", frozenset({"a", "b"})),
    (" a , ,b,", frozenset({"a", "b"})),
])
def test_mask_ids_from_string(value, expected):
    assert MaskSet.from_string(value).ids == expected


def test_mask_only_replaces_present_settings():
    masked = MaskSet.from_string("secret,absent").apply(SOURCE)
    assert masked == {"url": "http://example.org", "secret": MASKED_VALUE, "count": 3}


def test_resolve_arguments_adds_data_only_when_present():
    assert resolve_arguments(SOURCE, None) == SOURCE
    assert resolve_arguments(SOURCE, [1, 2]) == {**SOURCE, "data": [1, 2]}


def test_resolve_arguments_copies_the_configuration():
    arguments = resolve_arguments(SOURCE, "input")
    assert "data" not in SOURCE
    assert arguments is not SOURCE


@dataclass
class Arguments:
    url: str
    count: int = 1
    tags: list = field(default_factory=list)
    data: object = None


def test_resolve_arguments_binds_a_dataclass(logger, capsys):
    arguments = resolve_arguments(SOURCE, {"rows": 2}, Arguments, logger)

    assert arguments == Arguments(url="http://example.org", count=3, data={"rows": 2})
    assert "Ignoring settings unknown to Arguments: secret" in capsys.readouterr().out


@dataclass
class RequiredData:
    threshold: int
    data: list


def test_resolve_arguments_fills_a_required_data_field():
    arguments = resolve_arguments({"threshold": 2}, [1, 5, 9], RequiredData)
    assert arguments == RequiredData(threshold=2, data=[1, 5, 9])


def test_resolve_arguments_reports_missing_required_settings():
    with pytest.raises(TypeError):
        resolve_arguments({"count": 2}, None, Arguments)


def test_resolve_arguments_rejects_non_dataclass_schema():
    with pytest.raises(TypeError, match="must be a dataclass"):
        resolve_arguments(SOURCE, None, dict)


def test_merge_data_requires_a_data_field():
    @dataclass
    class NoData:
        url: str

    assert merge_data(NoData("x"), None) == NoData("x")
    with pytest.raises(TypeError, match="no 'data' field"):
        merge_data(NoData("x"), [1])
