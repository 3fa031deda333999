from typer.testing import CliRunner

from meditrust.cli import _offline_copy, app
from meditrust.config import ProjectConfig

runner = CliRunner()


def test_verify_offline_renders_local_verdict():
    result = runner.invoke(app, ["verify", "pharmacorp|B123|03/2099|Ibuprofen", "--offline"])

    assert result.exit_code == 0
    assert "Authentic - safe to use" in result.output
    assert "Ibuprofen" in result.output
    assert "local assessment" in result.output


def test_verify_offline_counterfeit_offers_report():
    result = runner.invoke(app, ["verify", "fakecorp|X000|01/2020", "--offline"])

    assert result.exit_code == 0
    assert "Counterfeit medicine detected" in result.output
    assert "meditrust report" in result.output


def test_verify_malformed_payload_exits_with_usage_code():
    result = runner.invoke(app, ["verify", "||", "--offline"])

    assert result.exit_code == 2
    assert "Invalid code" in result.output


def test_scan_reads_payloads_from_stdin(tmp_path):
    config = tmp_path / "meditrust.yaml"
    config.write_text("service:\n  enabled: false\n", encoding="utf-8")

    result = runner.invoke(
        app,
        ["scan", "--config", str(config)],
        input="medlife|B1|12/2099\n||\n",
    )

    assert result.exit_code == 0
    assert "Authentic - safe to use" in result.output
    assert "Please rescan" in result.output


def test_offline_copy_leaves_loaded_config_untouched():
    config = ProjectConfig()

    offline = _offline_copy(config)

    assert offline.service.enabled is False
    assert config.service.enabled is True
    assert offline.policy == config.policy
