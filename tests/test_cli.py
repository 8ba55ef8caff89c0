from unittest.mock import patch

import pymysql
import pytest
import responses

from jobcrawl.cli import main

CONFIG_YAML = """
db:
  user: user
  password: password
  url: "user:password@tcp(localhost:3306)/jobs"
mail:
  smtp_host: localhost
  smtp_port: "587"
  sender: sender@example.com
  password: password
  receiver: receiver@example.com
"""

SARAMIN_URL = "https://www.saramin.co.kr/zf_user/jobs/list/job-category?cat_kewd=223&sort=RD&page=1"
JOBKOREA_URL = (
    "https://www.jobkorea.co.kr/Search/?stext=go&ord=RelevanceDesc&tabType=recruit&Page_No=1"
)
INCRUIT_URL = "https://search.incruit.com/list/search.asp?col=job&kw=go&startno=1"
INTHISWORK_URL = "https://inthiswork.com/page/1?s=go"

SARAMIN_EMPTY = '<div class="info_empty"></div>'
SARAMIN_WITH_POST = """
<div class="box_item">
  <div class="col company_nm"><a href="/company/1">Acme Corp</a></div>
  <div class="col notification_info"><div class="job_tit">
    <a class="str_tit" id="rec_link_12345" href="/zf_user/jobs/relay/view?rec_idx=12345">Go Developer</a>
  </div></div>
</div>
""" + SARAMIN_EMPTY
JOBKOREA_EMPTY = '<section class="content-recruit"><article class="list-empty"></article></section>'
INCRUIT_EMPTY = "<html><body></body></html>"
INTHISWORK_EMPTY = (
    '<div class="fusion-text fusion-text-1"><p><strong><span>죄송합니다.</span></strong></p></div>'
)


class FakeCursor:
    def __init__(self, connection):
        self.connection = connection
        self.rows = []

    def execute(self, sql, params=None):
        conn = self.connection
        if sql.startswith("SELECT id, name"):
            self.rows = list(conn.sites)
        elif sql.startswith("SELECT s.name"):
            names = dict(conn.sites)
            self.rows = [(names[post[4]], post[0]) for post in conn.posts]
        elif sql.startswith("INSERT INTO sites"):
            if params[0] not in {name for _, name in conn.sites}:
                conn.sites.append((len(conn.sites) + 1, params[0]))
        elif sql.startswith("INSERT INTO posts"):
            conn.posts.append(tuple(params))

    def fetchall(self):
        return self.rows

    def close(self):
        pass


class FakeConnection:
    def __init__(self):
        self.sites = []
        self.posts = []
        self.commits = 0
        self.closed = False

    def cursor(self):
        return FakeCursor(self)

    def commit(self):
        self.commits += 1

    def rollback(self):
        pass

    def ping(self, reconnect=True):
        return True

    def close(self):
        self.closed = True


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    (tmp_path / "config").mkdir()
    (tmp_path / "config" / "config.test.yml").write_text(CONFIG_YAML, encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("APP_ENV", "test")
    connection = FakeConnection()
    connect_args = {}

    def fake_connect(**kwargs):
        connect_args.update(kwargs)
        return connection

    monkeypatch.setattr(pymysql, "connect", fake_connect)
    return connection, connect_args


def _register(rsps, saramin_body):
    rsps.add(responses.GET, SARAMIN_URL, body=saramin_body)
    rsps.add(responses.GET, JOBKOREA_URL, body=JOBKOREA_EMPTY)
    rsps.add(responses.GET, INCRUIT_URL, body=INCRUIT_EMPTY)
    rsps.add(responses.GET, INTHISWORK_URL, body=INTHISWORK_EMPTY)


def test_missing_config_fails(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("APP_ENV", "absent")
    assert main([]) == 1


def test_no_new_posts_reports_and_sends_nothing(workspace, capsys):
    connection, connect_args = workspace
    with responses.RequestsMock() as rsps, patch("smtplib.SMTP") as smtp_cls:
        _register(rsps, SARAMIN_EMPTY)
        assert main([]) == 0
    assert "No posts found" in capsys.readouterr().out
    smtp_cls.assert_not_called()
    assert connection.posts == []
    assert connection.closed is True
    assert connect_args["database"] == "jobs"
    assert connect_args["user"] == "user"


def test_new_post_is_stored_and_mailed(workspace, capsys):
    connection, _ = workspace
    with responses.RequestsMock() as rsps, patch("smtplib.SMTP") as smtp_cls:
        _register(rsps, SARAMIN_WITH_POST)
        assert main([]) == 0
        smtp = smtp_cls.return_value.__enter__.return_value
        sender, receivers, message = smtp.sendmail.call_args.args
    assert connection.sites == [(1, "saramin")]
    assert connection.posts == [
        (
            "12345",
            "https://saramin.co.kr/zf_user/jobs/relay/view?rec_idx=12345",
            "Go Developer",
            "Acme Corp",
            1,
        )
    ]
    assert sender == "sender@example.com"
    assert receivers == ["receiver@example.com"]
    assert b"SARAMIN\n" in message
    assert "Acme Corp  |  Go Developer".encode() in message
    assert "Total time:" in capsys.readouterr().out


def test_already_stored_post_is_not_mailed_again(workspace, capsys):
    connection, _ = workspace
    connection.sites.append((1, "saramin"))
    connection.posts.append(("12345", "u", "t", "c", 1))
    with responses.RequestsMock() as rsps, patch("smtplib.SMTP") as smtp_cls:
        _register(rsps, SARAMIN_WITH_POST)
        assert main([]) == 0
    smtp_cls.assert_not_called()
    assert len(connection.posts) == 1
    assert "No posts found" in capsys.readouterr().out