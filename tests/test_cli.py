import json

import pytest

from logo_cli import cli, config
from logo_cli.services.logo_generator import LogoGenerator


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    monkeypatch.setattr(config, "CONFIG_PATH", tmp_path / "config.json")
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.setenv("LOGO_CACHE_ENABLED", "false")
    monkeypatch.setenv("LOGO_OUTPUT_DIR", str(tmp_path / "logos"))


@pytest.fixture
def stub_generator(monkeypatch, openai_client, fast_retry):
    generator = LogoGenerator(client=openai_client, retry=fast_retry)
    monkeypatch.setattr(cli, "build_generator", lambda settings, cache=None: generator)
    return generator


def test_browse_list(capsys):
    assert cli.main(["browse", "--category", "minimal", "--list"]) == 0

    lines = capsys.readouterr().out.strip().splitlines()
    assert lines[0] == "1. minimal-geometric - Clean Geometric"
    assert len(lines) == 5


def test_browse_details_with_filters(capsys):
    assert cli.main(["browse", "--industry", "legal", "--complexity", "basic"]) == 0

    out = capsys.readouterr().out
    assert "ID: corporate-legal" in out
    assert "Parameters: legal_symbol=scales of justice" in out


def test_batch_dry_run_needs_no_api_key(tmp_path, capsys):
    batch_file = tmp_path / "logos.csv"
    batch_file.write_text(
        'company,prompt,style,colors,quality\nTechCorp,modern software logo,modern,"blue;gray",hd\n'
        "GreenLeaf,eco-friendly logo,minimal,green,standard\n",
        encoding="utf-8",
    )

    assert cli.main(["batch", "-f", str(batch_file), "--dry-run"]) == 0

    out = capsys.readouterr().out
    assert '1. TechCorp: "modern software logo" (modern)' in out
    assert '2. GreenLeaf: "eco-friendly logo" (minimal)' in out
    assert "Estimated cost: $0.260" in out


def test_batch_missing_file_exits_nonzero(tmp_path, capsys):
    assert cli.main(["batch", "-f", str(tmp_path / "missing.json")]) == 1

    assert "Could not read batch file" in capsys.readouterr().err


def test_generate_without_api_key_exits_nonzero(capsys):
    assert cli.main(["generate", "-c", "Acme", "-p", "bold new idea"]) == 1

    err = capsys.readouterr().err
    assert "OpenAI API key not found" in err
    assert "config set --api-key" in err


def test_generate_quiet_prints_json_summary(stub_generator, openai_client, capsys):
    code = cli.main(
        ["generate", "-c", "Acme", "-p", "bold new idea", "--quality", "hd", "--no-download", "--quiet"]
    )

    assert code == 0
    summary = json.loads(capsys.readouterr().out)
    assert summary["success"] is True
    assert summary["count"] == 1
    assert summary["totalCost"] == 0.19
    assert summary["logos"][0]["url"] == "https://images.example.com/logo.png"
    assert openai_client.images.generate.await_args.kwargs["quality"] == "high"


def test_generate_variations_with_template_params(stub_generator, openai_client, capsys):
    code = cli.main(
        [
            "generate",
            "-c",
            "Acme",
            "-p",
            "clinic",
            "-t",
            "industry-healthcare",
            "--param",
            "specialty=dental",
            "--variations",
            "2",
            "--no-download",
        ]
    )

    assert code == 0
    assert openai_client.images.generate.await_count == 2
    first_prompt = openai_client.images.generate.await_args_list[0].kwargs["prompt"]
    assert first_prompt.startswith("Medical dental logo")
    assert "Total cost: $0.140" in capsys.readouterr().out


def test_generate_unknown_template_exits_nonzero(stub_generator, openai_client, capsys):
    assert cli.main(["generate", "-c", "Acme", "-p", "x", "-t", "nope", "--no-download"]) == 1

    assert "Template not found: nope" in capsys.readouterr().err
    openai_client.images.generate.assert_not_awaited()


def test_bad_template_param_exits_nonzero(stub_generator, capsys):
    assert cli.main(["generate", "-c", "Acme", "-p", "x", "--param", "oops", "--no-download"]) == 1

    assert "expected NAME=VALUE" in capsys.readouterr().err


def test_config_set_then_show_masks_key(tmp_path, capsys):
    assert cli.main(["config", "set", "--api-key", "sk-test-1234567890", "--output-dir", "./brand"]) == 0
    saved = json.loads((tmp_path / "config.json").read_text(encoding="utf-8"))
    assert saved == {"api_key": "sk-test-1234567890", "output_dir": "./brand"}
    capsys.readouterr()

    assert cli.main(["config", "show"]) == 0

    shown = json.loads(capsys.readouterr().out)
    assert shown["api_key"] == "sk-test..."
    # LOGO_OUTPUT_DIR from the environment wins over the file.
    assert shown["output_dir"] == str(tmp_path / "logos")


def test_config_set_without_values_exits_nonzero(capsys):
    assert cli.main(["config", "set"]) == 1

    assert "Nothing to update" in capsys.readouterr().err


def test_cache_commands(tmp_path, monkeypatch, capsys):
    cache_dir = tmp_path / "cache"
    cache_dir.mkdir()
    (cache_dir / "abc.json").write_text("{}", encoding="utf-8")
    monkeypatch.setenv("LOGO_CACHE_ENABLED", "true")
    monkeypatch.setenv("LOGO_CACHE_DIR", str(cache_dir))

    assert cli.main(["cache", "stats"]) == 0
    assert "File entries: 1" in capsys.readouterr().out

    assert cli.main(["cache", "clear"]) == 0
    assert not (cache_dir / "abc.json").exists()


def test_cache_disabled(capsys):
    assert cli.main(["cache", "stats"]) == 0

    assert "Cache is disabled" in capsys.readouterr().out


def test_invalid_environment_value_exits_cleanly(monkeypatch, capsys):
    monkeypatch.setenv("LOGO_DEFAULT_STYLE", "retro")

    assert cli.main(["config", "show"]) == 1

    err = capsys.readouterr().err
    assert "Error: Invalid configuration in environment" in err
    assert "Traceback" not in err


def test_template_create_list_and_show(tmp_path, capsys):
    templates_dir = str(tmp_path / "templates")
    code = cli.main(
        [
            "template",
            "--dir",
            templates_dir,
            "create",
            "-n",
            "Coffee Shop",
            "-d",
            "Warm cafe marks",
            "-p",
            "hand-drawn coffee cup",
            "-i",
            "food",
            "--variation",
            "icon=icon only",
            "--variation",
            "wordmark=text-based",
        ]
    )
    assert code == 0
    assert (tmp_path / "templates" / "coffee-shop.json").exists()
    capsys.readouterr()

    assert cli.main(["template", "--dir", templates_dir, "list"]) == 0
    out = capsys.readouterr().out
    assert "1. Coffee Shop (coffee-shop)" in out
    assert "Variations: 2" in out

    assert cli.main(["template", "--dir", templates_dir, "show", "-t", "Coffee Shop"]) == 0
    out = capsys.readouterr().out
    assert "Base prompt: hand-drawn coffee cup" in out
    assert "2. wordmark: text-based" in out


def test_template_bad_variation_exits_nonzero(tmp_path, capsys):
    code = cli.main(
        ["template", "--dir", str(tmp_path), "create", "-n", "X", "-d", "d", "-p", "p", "--variation", "oops"]
    )

    assert code == 1
    assert "expected NAME=MODIFIER" in capsys.readouterr().err


def test_template_use_generates_every_variation(tmp_path, stub_generator, openai_client, capsys):
    templates_dir = str(tmp_path / "templates")
    cli.main(
        [
            "template",
            "--dir",
            templates_dir,
            "create",
            "-n",
            "Coffee Shop",
            "-d",
            "d",
            "-p",
            "hand-drawn coffee cup",
            "--variation",
            "icon=icon only",
            "--variation",
            "wordmark=text-based",
        ]
    )
    capsys.readouterr()

    code = cli.main(
        [
            "template",
            "--dir",
            templates_dir,
            "use",
            "-t",
            "coffee-shop",
            "-c",
            "Bean There",
            "--all-variations",
            "--no-download",
        ]
    )

    assert code == 0
    prompts = [call.kwargs["prompt"] for call in openai_client.images.generate.await_args_list]
    assert len(prompts) == 2
    assert "logo of Bean There, hand-drawn coffee cup, icon only" in prompts[0]
    out = capsys.readouterr().out
    assert "wordmark: https://images.example.com/logo.png" in out
    assert "Total cost: $0.140" in out


def test_template_use_unknown_template_exits_nonzero(tmp_path, capsys):
    assert cli.main(["template", "--dir", str(tmp_path), "use", "-t", "nope", "-c", "Acme"]) == 1

    assert "Template not found: nope" in capsys.readouterr().err
