import json
import sys

import pytest

from neural_convert.cli import build_config, main, parse_args, run
from neural_convert.convert import ConversionResult, ModelType, Stage
from neural_convert.exceptions import CLIError, ConfigurationError
from neural_convert.models.parser import LexicalizedParser, ParserModelStore
from neural_convert.models.sentiment import SentimentModelStore


def test_build_config_from_args():
    argv = ["-s", "OLD", "-m", "sentiment", "-i", "in.pt", "-o", "out"]
    config = build_config(parse_args(argv))
    assert config.stage is Stage.old
    assert config.model is ModelType.sentiment
    assert config.input == "in.pt"
    assert config.output == "out"
    assert config.save_overwrite is False


def test_build_config_from_file_with_precedence(tmp_path):
    config_path = tmp_path / "convert.yaml"
    config_path.write_text("stage: new\nmodel: dvparser\ninput: a.portable\noutput: a.pt\n")

    config = build_config(parse_args(["-c", str(config_path), "-o", "b.pt"]))
    assert config.stage is Stage.new
    assert config.model is ModelType.dvparser
    assert config.input == "a.portable"
    assert config.output == "b.pt"

    config = build_config(parse_args(["-c", str(config_path), "save_overwrite=true"]))
    assert config.save_overwrite is True


@pytest.mark.parametrize(
    "argv, match",
    [
        pytest.param(["-m", "sentiment", "-i", "a", "-o", "b"], "Please specify stage", id="stage"),
        pytest.param(["-s", "new", "-m", "x", "-i", "a", "-o", "b"], "Invalid model", id="model"),
        pytest.param(["-s", "new", "-m", "sentiment", "-o", "b"], "Please specify input", id="in"),
        pytest.param(
            ["-s", "new", "-m", "sentiment", "-i", "a"], "Please specify output", id="out"
        ),
    ],
)
def test_invalid_args(argv, match):
    with pytest.raises(ConfigurationError, match=match):
        build_config(parse_args(argv))


def test_run_sentiment(tmp_path, sentiment_model):
    SentimentModelStore().save(sentiment_model, tmp_path / "model.pt")
    result = run(
        [
            "--stage=old",
            "--model=sentiment",
            f"--input={tmp_path / 'model.pt'}",
            f"--output={tmp_path / 'model.portable'}",
        ]
    )
    assert result == ConversionResult.converted
    assert (tmp_path / "model.portable").is_file()


def test_run_parser_noop(tmp_path):
    ParserModelStore().save(LexicalizedParser(), tmp_path / "parser.pt")
    argv = ["-s", "old", "-m", "dvparser", "-i", str(tmp_path / "parser.pt")]
    result = run(argv + ["-o", str(tmp_path / "out")])
    assert result == ConversionResult.noop
    assert not (tmp_path / "out").exists()


def test_main_reports_usage_errors(monkeypatch):
    monkeypatch.setattr("neural_convert.cli.prepare_cli_environment", lambda: None)
    monkeypatch.setattr(sys, "argv", ["neural-convert", "--model", "sentiment"])
    with pytest.raises(CLIError, match="Please specify stage"):
        main()


def test_build_config_from_json_ignores_case(tmp_path):
    config_path = tmp_path / "convert.json"
    config_path.write_text(
        json.dumps({"stage": "OLD", "model": "DVParser", "input": "a.pt", "output": "a.portable"})
    )
    config = build_config(parse_args(["--config", str(config_path)]))
    assert config.stage is Stage.old
    assert config.model is ModelType.dvparser
    assert config.output == "a.portable"
