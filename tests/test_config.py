import pytest

from jobcrawl.config import Config, parse_config, load_config

CONFIG_TEXT = """\
db:
  user: user
  password: password
  url: "user:password@tcp(localhost:3306)/jobs"
mail:
  smtp_host: smtp.example.com
  smtp_port: "587"
  sender: sender@example.com
  password: password
  receiver: receiver@example.com
"""


def write_config(base, env, text=CONFIG_TEXT):
    directory = base / "config"
    directory.mkdir(exist_ok=True)
    (directory / f"config.{env}.yml").write_text(text, encoding="utf-8")


def test_load_config_reads_environment_file(tmp_path):
    write_config(tmp_path, "local")
    config = load_config("local", tmp_path)
    assert config.db.url == "user:password@tcp(localhost:3306)/jobs"
    assert config.mail.smtp_host == "smtp.example.com"
    assert config.mail.receiver == "receiver@example.com"


def test_load_config_accepts_trailing_slash(tmp_path):
    write_config(tmp_path, "test")
    assert load_config("test", str(tmp_path) + "/") == load_config("test", tmp_path)


def test_load_config_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config("absent", tmp_path)


def test_missing_sections_give_defaults():
    config = parse_config("db:\n  user: user\n")
    assert config.mail == Config().mail
    assert config.db.url == ""


def test_numeric_port_is_kept_as_text():
    config = parse_config("mail:\n  smtp_port: 587\n")
    assert config.mail.smtp_port == "587"


def test_empty_document_equals_default():
    assert parse_config("") == Config()


def test_non_mapping_document_is_rejected():
    with pytest.raises(ValueError):
        parse_config("- a\n- b\n")