import pytest
import yaml

from e2e_tools.common.settings import ConfigurationError, load_settings


def write_yaml(path, data):
    path.write_text(yaml.dump(data), encoding="utf-8")


def test_defaults_without_files_or_env(tmp_path):
    settings = load_settings(config_dir=tmp_path, environ={})

    assert settings.test_env == "qa"
    assert settings.data_format == "json"
    assert settings.report_to_squash is False
    assert settings.is_ci is False
    assert settings.build_url == "#"
    assert settings.squash_tm.url == "https://demo.squashtest.org"
    assert settings.squash_tm.campaign_id == "4"
    assert settings.email.host == "smtp.gmail.com"
    assert settings.email.port == 587
    assert settings.email.recipients == ["qa-team@example.com"]
    assert settings.browser.name == "chromium"
    assert settings.browser.headless is True

    qa = settings.current_environment()
    assert qa.base_url == "https://www.saucedemo.com"
    assert qa.api_url == "https://api.qa.example.com"
    assert settings.environment("uat").timeout == 60000


def test_yaml_layers_are_deep_merged(tmp_path):
    write_yaml(tmp_path / "config.yaml", {
        "test_env": "dev",
        "email": {"host": "smtp.internal"},
    })
    write_yaml(tmp_path / "dev.yaml", {"logging": {"level": "debug"}})

    settings = load_settings(config_dir=tmp_path, environ={})

    assert settings.test_env == "dev"
    assert settings.logging.level == "DEBUG"
    assert settings.email.host == "smtp.internal"
    # untouched keys of a merged section keep their defaults
    assert settings.email.port == 587


def test_test_env_variable_selects_override_file(tmp_path):
    write_yaml(tmp_path / "uat.yaml", {"browser": {"action_timeout": 30000}})

    settings = load_settings(config_dir=tmp_path, environ={"TEST_ENV": "uat"})

    assert settings.test_env == "uat"
    assert settings.browser.action_timeout == 30000
    assert settings.current_environment().timeout == 60000


def test_env_variables_override_and_convert_types(tmp_path):
    environ = {
        "REPORT_TO_SQUASH": "true",
        "SQUASH_TM_URL": "https://squash.example.com/",
        "SQUASH_TM_API_TOKEN": "tok",
        "SMTP_PORT": "465",
        "SMTP_SECURE": "1",
        "EMAIL_RECIPIENTS": "a@example.com, b@example.com,,",
        "CI": "true",
        "HEADLESS": "false",
        "DATA_FORMAT": "YAML",
    }
    settings = load_settings(config_dir=tmp_path, environ=environ)

    assert settings.report_to_squash is True
    assert settings.squash_tm.url == "https://squash.example.com"
    assert settings.squash_tm.api_token == "tok"
    assert settings.email.port == 465
    assert settings.email.secure is True
    assert settings.email.recipients == ["a@example.com", "b@example.com"]
    assert settings.is_ci is True
    assert settings.browser.headless is False
    assert settings.data_format == "yaml"


def test_invalid_integer_keeps_default(tmp_path):
    settings = load_settings(config_dir=tmp_path, environ={"SMTP_PORT": "not-a-port"})
    assert settings.email.port == 587


def test_base_url_overrides_every_environment(tmp_path):
    environ = {
        "BASE_URL": "https://staging.example.com",
        "API_BASE_URL": "https://api.staging.example.com",
    }
    settings = load_settings(config_dir=tmp_path, environ=environ)

    for name in ("dev", "qa", "uat"):
        assert settings.environment(name).base_url == "https://staging.example.com"
        assert settings.environment(name).api_url == "https://api.staging.example.com"


def test_ci_job_url_wins_over_build_url(tmp_path):
    settings = load_settings(config_dir=tmp_path, environ={
        "BUILD_URL": "https://jenkins.example.com/job/1",
        "CI_JOB_URL": "https://gitlab.example.com/jobs/2",
    })
    assert settings.build_url == "https://gitlab.example.com/jobs/2"

    settings = load_settings(config_dir=tmp_path, environ={
        "BUILD_URL": "https://jenkins.example.com/job/1",
    })
    assert settings.build_url == "https://jenkins.example.com/job/1"


def test_unknown_environment_lists_available(tmp_path):
    settings = load_settings(config_dir=tmp_path, environ={"TEST_ENV": "prod"})

    with pytest.raises(ConfigurationError, match="Unknown environment: prod. Available: dev, qa, uat"):
        settings.current_environment()


def test_unsupported_data_format(tmp_path):
    with pytest.raises(ConfigurationError, match="Unsupported data format: xml"):
        load_settings(config_dir=tmp_path, environ={"DATA_FORMAT": "xml"})


def test_malformed_yaml(tmp_path):
    (tmp_path / "config.yaml").write_text("email: [unclosed", encoding="utf-8")

    with pytest.raises(ConfigurationError, match="Invalid YAML"):
        load_settings(config_dir=tmp_path, environ={})


def test_yaml_must_be_a_mapping(tmp_path):
    (tmp_path / "config.yaml").write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ConfigurationError, match="must contain a mapping"):
        load_settings(config_dir=tmp_path, environ={})
